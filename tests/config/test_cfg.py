"""
Tests for the runtime configuration.
"""

import pytest

from elankit.config import Cfg
from elankit.core.env_var import ELAN_HOME, LEAN_RECURSION_COUNT
from elankit.notifications import NotificationKind


@pytest.mark.unit
class TestCfg:
    def test_layout(self, cfg, elan_home):
        assert cfg.toolchains_dir == elan_home / "toolchains"
        assert cfg.update_hash_dir == elan_home / "update-hashes"
        assert cfg.temp_dir == elan_home / "tmp"
        assert cfg.fallback_dir == elan_home / "fallback"
        assert cfg.lock_dir == elan_home / "lock"
        assert cfg.settings_file.path == elan_home / "settings.yaml"

    def test_from_env(self, tmp_path):
        cfg = Cfg.from_env({ELAN_HOME: str(tmp_path), LEAN_RECURSION_COUNT: "3"})

        assert cfg.elan_dir == tmp_path
        assert cfg.recursion_count == 3

    def test_get_hash_file(self, cfg):
        path = cfg.get_hash_file("stable")

        assert path == cfg.update_hash_dir / "stable"
        assert cfg.update_hash_dir.is_dir()
        assert not path.exists()

    def test_get_hash_file_without_parent(self, cfg):
        cfg.get_hash_file("stable", create_parent=False)
        assert not cfg.update_hash_dir.exists()

    def test_set_default(self, cfg, notifications):
        cfg.set_default("stable")

        assert cfg.get_default() == "stable"
        assert notifications[-1].kind is NotificationKind.SET_DEFAULT_TOOLCHAIN

    def test_telemetry_toggle(self, cfg):
        assert not cfg.telemetry_enabled()
        cfg.set_telemetry(True)
        assert cfg.telemetry_enabled()
