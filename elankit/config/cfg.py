"""
Runtime configuration shared by every toolchain operation.

`Cfg` fixes the on-disk layout under the elan home directory, carries the
notification sink and the platform capabilities, and records the recursion
depth inherited from the parent process.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from ..core.directory import get_elan_home
from ..core.env_var import read_recursion_count
from ..core.locking import LockManager
from ..core.platform_capabilities import PlatformCapabilities, get_platform_capabilities
from ..notifications import (
    Notification,
    NotificationKind,
    NotifyHandler,
    log_notification,
)
from .settings import SettingsFile

logger = logging.getLogger(__name__)


class Cfg:
    """
    Configuration for one elankit invocation.

    Attributes:
        elan_dir: Root of the elan home directory
        toolchains_dir: Where toolchains are installed
        update_hash_dir: Where update-hash files live
        download_dir: Cache for downloaded release archives
        temp_dir: Scratch space for extraction and installer downloads
        fallback_dir: Holds hard-linked fallback binaries
        telemetry_dir: Telemetry log directory
        settings_file: The YAML settings file
        notify_handler: Sink receiving lifecycle notifications
        recursion_count: Recursion depth inherited from the parent process
        platform: Capabilities of the current OS family
        lock_dir: Holds per-toolchain lock files
        lock_manager: Per-toolchain lock provider
    """

    def __init__(
        self,
        elan_dir: Path,
        notify_handler: Optional[NotifyHandler] = None,
        recursion_count: Optional[int] = None,
        platform: Optional[PlatformCapabilities] = None,
        lock_timeout: float = 300,
    ):
        self.elan_dir = Path(elan_dir)
        self.toolchains_dir = self.elan_dir / "toolchains"
        self.update_hash_dir = self.elan_dir / "update-hashes"
        self.download_dir = self.elan_dir / "downloads"
        self.temp_dir = self.elan_dir / "tmp"
        self.fallback_dir = self.elan_dir / "fallback"
        self.telemetry_dir = self.elan_dir / "telemetry"
        self.settings_file = SettingsFile(self.elan_dir / "settings.yaml")
        self.notify_handler: NotifyHandler = notify_handler or log_notification
        self.recursion_count = (
            read_recursion_count() if recursion_count is None else recursion_count
        )
        self.platform = platform or get_platform_capabilities()
        self.lock_dir = self.elan_dir / "lock"
        self.lock_manager = LockManager(self.lock_dir)
        self.lock_timeout = lock_timeout

        logger.debug(
            f"Configured elan home {self.elan_dir} "
            f"(recursion depth {self.recursion_count}, {self.platform.family})"
        )

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        notify_handler: Optional[NotifyHandler] = None,
    ) -> "Cfg":
        """Build the configuration from the process environment."""
        if environ is None:
            environ = os.environ
        return cls(
            get_elan_home(environ),
            notify_handler=notify_handler,
            recursion_count=read_recursion_count(environ),
        )

    def notify(self, kind: NotificationKind, **details) -> None:
        """Emit a notification to the configured sink."""
        self.notify_handler(Notification(kind, **details))

    def get_hash_file(self, toolchain_name: str, create_parent: bool = True) -> Path:
        """Path of the update-hash file for a toolchain."""
        if create_parent:
            self.update_hash_dir.mkdir(parents=True, exist_ok=True)
        return self.update_hash_dir / toolchain_name

    def telemetry_enabled(self) -> bool:
        return self.settings_file.with_(lambda s: s.telemetry)

    def set_telemetry(self, enabled: bool) -> None:
        def apply(settings):
            settings.telemetry = enabled

        self.settings_file.with_mut(apply)

    def set_default(self, toolchain_name: str) -> None:
        """Persist the default toolchain name."""

        def apply(settings):
            settings.default_toolchain = toolchain_name

        self.settings_file.with_mut(apply)
        self.notify(NotificationKind.SET_DEFAULT_TOOLCHAIN, toolchain=toolchain_name)

    def get_default(self) -> Optional[str]:
        return self.settings_file.with_(lambda s: s.default_toolchain)

    def find_override(self, path: Path) -> Optional[str]:
        return self.settings_file.with_(lambda s: s.find_override(path))


__all__ = ["Cfg"]
