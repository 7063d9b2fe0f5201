"""
Tests for platform detection and the capability matrix.
"""

import pytest
from unittest.mock import patch

from elankit.core.platform import PlatformInfo, detect_platform
from elankit.core.platform_capabilities import (
    PLATFORM_CAPABILITIES,
    PlatformCapabilities,
    get_platform_capabilities,
)


@pytest.mark.unit
class TestPlatformInfo:
    """Tests for PlatformInfo."""

    def test_platform_string(self):
        assert PlatformInfo("linux", "x64").platform_string() == "linux-x64"
        assert str(PlatformInfo("macos", "arm64")) == "macos-arm64"

    @pytest.mark.parametrize(
        "os_name,arch,expected",
        [
            ("linux", "x64", "linux"),
            ("linux", "arm64", "linux_aarch64"),
            ("macos", "x64", "darwin"),
            ("macos", "arm64", "darwin_aarch64"),
            ("windows", "x64", "windows"),
        ],
    )
    def test_release_suffix(self, os_name, arch, expected):
        assert PlatformInfo(os_name, arch).release_suffix() == expected

    def test_detect_platform_normalizes(self):
        with patch("platform.system", return_value="Darwin"), patch(
            "platform.machine", return_value="aarch64"
        ):
            info = detect_platform()

        assert info == PlatformInfo("macos", "arm64")

    def test_detect_platform_unsupported_os(self):
        with patch("platform.system", return_value="Plan9"):
            with pytest.raises(RuntimeError, match="Unsupported operating system"):
                detect_platform()


@pytest.mark.unit
class TestCapabilityMatrix:
    """Tests for the capability lookups."""

    def test_all_families_present(self):
        assert set(PLATFORM_CAPABILITIES) == {"linux", "macos", "windows"}

    def test_every_family_has_same_keys(self):
        keys = {frozenset(caps) for caps in PLATFORM_CAPABILITIES.values()}
        assert len(keys) == 1

    def test_windows_quirks(self):
        caps = get_platform_capabilities("windows")

        assert caps.executable_extension == ".exe"
        assert caps.symlink_check_required
        assert caps.fallback_via_hardlink
        assert caps.prepend_toolchain_bin

    def test_unix_families_have_no_quirks(self):
        for family in ("linux", "macos"):
            caps = get_platform_capabilities(family)
            assert caps.executable_extension == ""
            assert not caps.symlink_check_required
            assert not caps.fallback_via_hardlink
            assert not caps.prepend_toolchain_bin

    def test_loader_path_variable(self):
        assert get_platform_capabilities("linux-x64").loader_path_var == "LD_LIBRARY_PATH"
        assert (
            get_platform_capabilities("macos-arm64").loader_path_var
            == "DYLD_LIBRARY_PATH"
        )
        assert get_platform_capabilities("windows").loader_path_var == "LD_LIBRARY_PATH"

    def test_accepts_platform_info(self):
        assert get_platform_capabilities(PlatformInfo("windows", "x64")).fallback_via_hardlink
        assert not get_platform_capabilities(
            PlatformInfo("linux", "x64")
        ).fallback_via_hardlink

    def test_unknown_family(self):
        with pytest.raises(ValueError, match="Unsupported platform family"):
            get_platform_capabilities("beos")

    def test_detects_current_platform(self):
        with patch(
            "elankit.core.platform_capabilities.detect_platform",
            return_value=PlatformInfo("macos", "arm64"),
        ):
            caps = get_platform_capabilities()

        assert caps.family == "macos"

    def test_exe(self):
        assert get_platform_capabilities("windows").exe("lean") == "lean.exe"
        assert get_platform_capabilities("linux").exe("lean") == "lean"

    def test_capabilities_are_frozen(self):
        caps = get_platform_capabilities("linux")
        with pytest.raises(Exception):
            caps.family = "windows"  # type: ignore[misc]
        assert isinstance(caps, PlatformCapabilities)
