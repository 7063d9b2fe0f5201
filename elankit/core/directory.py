"""
Directory structure management for elankit.

Directory Structure (~/.elan/ or %USERPROFILE%\\.elan\\, or $ELAN_HOME):
    - bin/            : Proxy binaries that dispatch to the active toolchain
    - toolchains/     : One directory (or link) per installed toolchain
    - update-hashes/  : Last applied distribution per non-custom toolchain
    - downloads/      : Downloaded release archives
    - tmp/            : Scratch space for extraction and installer downloads
    - fallback/       : Hard-linked companion binaries (Windows only)
    - telemetry/      : Telemetry logs
    - lock/           : Per-toolchain lock files
    - settings.yaml   : Default toolchain, directory overrides, telemetry switch
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from .env_var import ELAN_HOME
from .exceptions import FilesystemError

HOME_SUBDIRS = (
    "bin",
    "toolchains",
    "update-hashes",
    "downloads",
    "tmp",
    "telemetry",
    "lock",
)


def get_elan_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Get the elan home directory.

    ELAN_HOME wins when set; otherwise `.elan` under the user's home.

    Example:
        >>> get_elan_home({"ELAN_HOME": "/opt/elan"})
        PosixPath('/opt/elan')
    """
    if environ is None:
        environ = os.environ

    explicit = environ.get(ELAN_HOME)
    if explicit:
        return Path(explicit)

    if os.name == "nt":
        user_profile = environ.get("USERPROFILE")
        if not user_profile:
            raise FilesystemError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine elan home directory."
            )
        return Path(user_profile) / ".elan"

    return Path.home() / ".elan"


def ensure_home_structure(elan_home: Path) -> Path:
    """
    Create the elan home directory structure if it doesn't exist.

    Raises:
        FilesystemError: If a directory cannot be created
    """
    for subdir in ("",) + HOME_SUBDIRS:
        path = elan_home / subdir
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Failed to create directory {path}: {e}") from e

    return elan_home


__all__ = ["HOME_SUBDIRS", "get_elan_home", "ensure_home_structure"]
