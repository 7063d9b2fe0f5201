"""
Install methods.

The set of ways a toolchain can be placed on disk is closed: `Copy`, `Link`
and `Installer` serve custom toolchains built or unpacked by the user, while
`Dist` serves toolchains published as releases. `is_valid_install_method`
is the single rule deciding which methods a toolchain kind may use.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional

from ..core.filesystem import (
    create_link,
    extract_archive,
    normalize_root_directory,
    recursive_copy,
    remove_path,
    temporary_directory,
)
from ..notifications import Notification, NotificationKind, NotifyHandler
from .dist import DownloadCfg, ToolchainDesc, update_from_dist

logger = logging.getLogger(__name__)


class InstallMethod(ABC):
    """
    Abstract base for install methods.

    Subclasses declare whether they serve custom toolchains and implement
    `run`, which reports whether anything on disk changed.
    """

    for_custom_toolchains: ClassVar[bool]

    @abstractmethod
    def run(self, path: Path, notify_handler: NotifyHandler) -> bool:
        """
        Place the toolchain at path.

        Args:
            path: Toolchain installation directory
            notify_handler: Sink for progress notifications

        Returns:
            True if the installation changed
        """
        pass


@dataclass(frozen=True)
class Copy(InstallMethod):
    """Copy a local toolchain tree."""

    source: Path
    for_custom_toolchains: ClassVar[bool] = True

    def run(self, path: Path, notify_handler: NotifyHandler) -> bool:
        remove_path(path)
        recursive_copy(self.source, path)
        logger.debug(f"Copied {self.source} to {path}")
        return True


@dataclass(frozen=True)
class Link(InstallMethod):
    """Link to a local toolchain tree instead of copying it."""

    source: Path
    for_custom_toolchains: ClassVar[bool] = True

    def run(self, path: Path, notify_handler: NotifyHandler) -> bool:
        remove_path(path)
        create_link(self.source, path)
        return True


@dataclass(frozen=True)
class Installer(InstallMethod):
    """Unpack a local .tar.gz installer, merging it into the toolchain."""

    archive: Path
    temp_dir: Path
    for_custom_toolchains: ClassVar[bool] = True

    def run(self, path: Path, notify_handler: NotifyHandler) -> bool:
        notify_handler(Notification(NotificationKind.EXTRACTING, path=self.archive))
        with temporary_directory(prefix="installer-", dir=self.temp_dir) as extract_dir:
            extract_archive(self.archive, extract_dir, archive_format="tar.gz")
            recursive_copy(normalize_root_directory(extract_dir), path)
        return True


@dataclass(frozen=True)
class Dist(InstallMethod):
    """Install a published release."""

    desc: ToolchainDesc
    update_hash: Optional[Path]
    download_cfg: DownloadCfg
    force_update: bool = False
    for_custom_toolchains: ClassVar[bool] = False

    def run(self, path: Path, notify_handler: NotifyHandler) -> bool:
        return update_from_dist(
            self.desc, path, self.update_hash, self.download_cfg, self.force_update
        )


def is_valid_install_method(method: InstallMethod, is_custom: bool) -> bool:
    """
    Decide whether a method may install a toolchain of the given kind.

    Example:
        >>> is_valid_install_method(Copy(Path("src")), is_custom=True)
        True
        >>> is_valid_install_method(Copy(Path("src")), is_custom=False)
        False
    """
    return method.for_custom_toolchains == is_custom


def uninstall(path: Path, notify_handler: NotifyHandler) -> None:
    """
    Remove an installed toolchain.

    Linked toolchains lose only their link; the linked tree is untouched.
    """
    remove_path(path)
    logger.debug(f"Removed toolchain at {path}")


__all__ = [
    "InstallMethod",
    "Copy",
    "Link",
    "Installer",
    "Dist",
    "is_valid_install_method",
    "uninstall",
]
