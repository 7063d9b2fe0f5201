"""Platform capability matrix for process and filesystem quirks.

All platform-conditional behaviour of the toolchain core is looked up here
instead of being tested inline, so each OS family is described in one place.

Capabilities:
- executable_extension: Suffix appended to binary names ('' or '.exe')
- loader_path_var: Environment variable searched for shared libraries
- symlink_check_required: Whether a linked toolchain must be detected with
  lstat because directory checks do not follow junctions/symlinks reliably
- fallback_via_hardlink: Whether the fallback companion binary must be run
  from its own directory because process creation searches the executable's
  directory before PATH
- prepend_toolchain_bin: Whether the toolchain's own bin directory is added
  to PATH for spawned commands
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .platform import PlatformInfo, detect_platform

# Capability database, keyed by OS family
PLATFORM_CAPABILITIES: Dict[str, Dict[str, Any]] = {
    "linux": {
        "executable_extension": "",
        "loader_path_var": "LD_LIBRARY_PATH",
        "symlink_check_required": False,
        "fallback_via_hardlink": False,
        "prepend_toolchain_bin": False,
    },
    "macos": {
        "executable_extension": "",
        "loader_path_var": "DYLD_LIBRARY_PATH",
        "symlink_check_required": False,
        "fallback_via_hardlink": False,
        "prepend_toolchain_bin": False,
    },
    "windows": {
        "executable_extension": ".exe",
        "loader_path_var": "LD_LIBRARY_PATH",
        "symlink_check_required": True,
        "fallback_via_hardlink": True,
        "prepend_toolchain_bin": True,
    },
}


@dataclass(frozen=True)
class PlatformCapabilities:
    """Typed view over one row of the capability matrix."""

    family: str
    executable_extension: str
    loader_path_var: str
    symlink_check_required: bool
    fallback_via_hardlink: bool
    prepend_toolchain_bin: bool

    def exe(self, name: str) -> str:
        """Append the executable extension to a binary name."""
        return f"{name}{self.executable_extension}"


def _family(platform: Union[str, PlatformInfo]) -> str:
    if isinstance(platform, PlatformInfo):
        return platform.os
    # Accept both 'linux' and 'linux-x64' style strings
    return platform.split("-", 1)[0]


def get_platform_capabilities(
    platform: Optional[Union[str, PlatformInfo]] = None,
) -> PlatformCapabilities:
    """
    Get the capability record for a platform.

    Args:
        platform: OS family, platform string or PlatformInfo. Detects the
            current platform when None.

    Raises:
        ValueError: If the platform family is unknown
    """
    if platform is None:
        platform = detect_platform()

    family = _family(platform)
    capabilities = PLATFORM_CAPABILITIES.get(family)
    if capabilities is None:
        raise ValueError(f"Unsupported platform family: {family}")

    return PlatformCapabilities(family=family, **capabilities)


__all__ = [
    "PLATFORM_CAPABILITIES",
    "PlatformCapabilities",
    "get_platform_capabilities",
]
