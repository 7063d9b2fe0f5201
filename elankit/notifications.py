"""
Typed notification events emitted by the toolchain core.

The core never prints. It hands `Notification` objects to a sink supplied by
the configuration; the default sink forwards them to the standard logging
module at a level chosen per kind.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class NotificationKind(Enum):
    """Kinds of lifecycle events."""

    LOOKING_FOR_TOOLCHAIN = "looking_for_toolchain"
    INSTALLING_TOOLCHAIN = "installing_toolchain"
    UPDATING_TOOLCHAIN = "updating_toolchain"
    USING_EXISTING_TOOLCHAIN = "using_existing_toolchain"
    INSTALLED_TOOLCHAIN = "installed_toolchain"
    UPDATE_HASH_MATCHES = "update_hash_matches"
    UNINSTALLING_TOOLCHAIN = "uninstalling_toolchain"
    UNINSTALLED_TOOLCHAIN = "uninstalled_toolchain"
    TOOLCHAIN_NOT_INSTALLED = "toolchain_not_installed"
    TOOLCHAIN_DIRECTORY = "toolchain_directory"
    TELEMETRY_CLEANUP_ERROR = "telemetry_cleanup_error"
    SET_DEFAULT_TOOLCHAIN = "set_default_toolchain"
    SET_OVERRIDE_TOOLCHAIN = "set_override_toolchain"
    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"


_LEVELS = {
    NotificationKind.LOOKING_FOR_TOOLCHAIN: logging.DEBUG,
    NotificationKind.TOOLCHAIN_DIRECTORY: logging.DEBUG,
    NotificationKind.EXTRACTING: logging.DEBUG,
    NotificationKind.TELEMETRY_CLEANUP_ERROR: logging.WARNING,
}


@dataclass(frozen=True)
class Notification:
    """A single event, with whichever details apply to its kind."""

    kind: NotificationKind
    toolchain: Optional[str] = None
    path: Optional[Path] = None
    error: Optional[BaseException] = None
    detail: Optional[str] = None

    @property
    def level(self) -> int:
        return _LEVELS.get(self.kind, logging.INFO)

    def __str__(self) -> str:
        kind = self.kind
        name = self.toolchain
        if kind is NotificationKind.LOOKING_FOR_TOOLCHAIN:
            return f"looking for installed toolchain '{name}'"
        if kind is NotificationKind.INSTALLING_TOOLCHAIN:
            return f"installing toolchain '{name}'"
        if kind is NotificationKind.UPDATING_TOOLCHAIN:
            return f"updating existing install for '{name}'"
        if kind is NotificationKind.USING_EXISTING_TOOLCHAIN:
            return f"using existing install for '{name}'"
        if kind is NotificationKind.INSTALLED_TOOLCHAIN:
            return f"toolchain '{name}' installed"
        if kind is NotificationKind.UPDATE_HASH_MATCHES:
            return "toolchain is already up to date"
        if kind is NotificationKind.UNINSTALLING_TOOLCHAIN:
            return f"uninstalling toolchain '{name}'"
        if kind is NotificationKind.UNINSTALLED_TOOLCHAIN:
            return f"toolchain '{name}' uninstalled"
        if kind is NotificationKind.TOOLCHAIN_NOT_INSTALLED:
            return f"no toolchain installed for '{name}'"
        if kind is NotificationKind.TOOLCHAIN_DIRECTORY:
            return f"toolchain directory: '{self.path}'"
        if kind is NotificationKind.TELEMETRY_CLEANUP_ERROR:
            return f"unable to record telemetry: {self.error}"
        if kind is NotificationKind.SET_DEFAULT_TOOLCHAIN:
            return f"default toolchain set to '{name}'"
        if kind is NotificationKind.SET_OVERRIDE_TOOLCHAIN:
            return f"override toolchain for '{self.path}' set to '{name}'"
        if kind is NotificationKind.DOWNLOADING:
            return f"downloading {self.detail}"
        return f"extracting {self.path}"


NotifyHandler = Callable[[Notification], None]


def log_notification(notification: Notification) -> None:
    """Default sink: forward the notification to logging."""
    logger.log(notification.level, str(notification))


__all__ = [
    "NotificationKind",
    "Notification",
    "NotifyHandler",
    "log_notification",
]
