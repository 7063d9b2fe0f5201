"""
tests/toolchain/test_install.py

Unit tests for install methods.
"""

import sys
from unittest.mock import patch

import pytest

from elankit.core.platform import PlatformInfo
from elankit.toolchain.dist import DownloadCfg, ToolchainDesc
from elankit.toolchain.install import (
    Copy,
    Dist,
    Installer,
    Link,
    is_valid_install_method,
    uninstall,
)


def _noop(notification):
    pass


@pytest.mark.unit
class TestLegality:
    def test_custom_methods(self, tmp_path):
        for method in (Copy(tmp_path), Link(tmp_path), Installer(tmp_path, tmp_path)):
            assert is_valid_install_method(method, is_custom=True)
            assert not is_valid_install_method(method, is_custom=False)

    def test_dist_method(self, tmp_path):
        method = Dist(
            ToolchainDesc.from_str("stable"),
            None,
            DownloadCfg(tmp_path, tmp_path, _noop, PlatformInfo("linux", "x64")),
        )
        assert is_valid_install_method(method, is_custom=False)
        assert not is_valid_install_method(method, is_custom=True)


@pytest.mark.unit
class TestCopy:
    def test_replaces_destination(self, tmp_path, custom_src):
        dest = tmp_path / "toolchains" / "custom"
        dest.mkdir(parents=True)
        (dest / "stale").write_text("old")

        assert Copy(custom_src).run(dest, _noop) is True

        assert not (dest / "stale").exists()
        assert (dest / "lib" / "libleanshared.so").exists()
        assert not dest.is_symlink()


@pytest.mark.skipif(sys.platform == "win32", reason="Unix-specific test")
@pytest.mark.unit
class TestLink:
    def test_links_destination(self, tmp_path, custom_src):
        dest = tmp_path / "toolchains" / "custom"

        assert Link(custom_src).run(dest, _noop) is True

        assert dest.is_symlink()
        assert dest.resolve() == custom_src.resolve()

    def test_uninstall_keeps_link_target(self, tmp_path, custom_src):
        dest = tmp_path / "toolchains" / "custom"
        Link(custom_src).run(dest, _noop)

        uninstall(dest, _noop)

        assert not dest.is_symlink()
        assert (custom_src / "bin").is_dir()


@pytest.mark.unit
class TestInstaller:
    def test_merges_archive_without_root(self, tmp_path, make_tar_gz):
        archive = make_tar_gz("lean.tar.gz", {"bin/lean": "lean"}, root="lean-4.0.0")
        dest = tmp_path / "toolchains" / "custom"
        (dest / "bin").mkdir(parents=True)
        (dest / "bin" / "leanpkg").write_text("kept")

        assert Installer(archive, tmp_path / "tmp").run(dest, _noop) is True

        assert (dest / "bin" / "lean").read_text() == "lean"
        assert (dest / "bin" / "leanpkg").read_text() == "kept"
        assert list((tmp_path / "tmp").iterdir()) == []


@pytest.mark.unit
class TestDist:
    def test_delegates_to_update_from_dist(self, tmp_path):
        cfg = DownloadCfg(tmp_path, tmp_path, _noop, PlatformInfo("linux", "x64"))
        desc = ToolchainDesc.from_str("stable")
        method = Dist(desc, tmp_path / "hash", cfg, force_update=True)

        with patch(
            "elankit.toolchain.install.update_from_dist", return_value=False
        ) as update:
            assert method.run(tmp_path / "tc", _noop) is False

        update.assert_called_once_with(desc, tmp_path / "tc", tmp_path / "hash", cfg, True)


@pytest.mark.unit
def test_uninstall_directory(tmp_path):
    dest = tmp_path / "tc"
    (dest / "bin").mkdir(parents=True)

    uninstall(dest, _noop)

    assert not dest.exists()
