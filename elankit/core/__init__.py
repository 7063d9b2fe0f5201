"""
Core functionality for elankit.

This package contains the foundational modules that other components depend on.
"""

from .directory import get_elan_home, ensure_home_structure

from .locking import LockManager, LockTimeout

from .platform import PlatformInfo, detect_platform, clear_platform_cache

from .platform_capabilities import PlatformCapabilities, get_platform_capabilities

from .exceptions import (
    ElanKitError,
    ToolchainError,
    ToolchainNotInstalledError,
    InvalidCustomToolchainNameError,
    BadInstallerTypeError,
    BinaryNotFoundError,
    FilesystemError,
    DownloadError,
    DistError,
    SettingsError,
    TelemetryError,
)

__all__ = [
    # Directory
    "get_elan_home",
    "ensure_home_structure",
    # Locking
    "LockManager",
    "LockTimeout",
    # Platform
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "PlatformCapabilities",
    "get_platform_capabilities",
    # Exceptions
    "ElanKitError",
    "ToolchainError",
    "ToolchainNotInstalledError",
    "InvalidCustomToolchainNameError",
    "BadInstallerTypeError",
    "BinaryNotFoundError",
    "FilesystemError",
    "DownloadError",
    "DistError",
    "SettingsError",
    "TelemetryError",
]
