"""
Persistent user settings stored as YAML in the elan home directory.

Example settings.yaml:
    version: 1
    default_toolchain: leanprover/lean4:stable
    telemetry: false
    overrides:
      /home/user/project: my-custom-lean
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar

import yaml

from ..core.exceptions import SettingsError
from ..core.filesystem import atomic_write
from ..notifications import Notification, NotificationKind, NotifyHandler

logger = logging.getLogger(__name__)

SETTINGS_VERSION = 1

T = TypeVar("T")


@dataclass
class Settings:
    """In-memory view of settings.yaml."""

    default_toolchain: Optional[str] = None
    telemetry: bool = False
    overrides: Dict[str, str] = field(default_factory=dict)
    version: int = SETTINGS_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "default_toolchain": self.default_toolchain,
            "telemetry": self.telemetry,
            "overrides": dict(self.overrides),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """
        Build settings from parsed YAML.

        Raises:
            SettingsError: If a field has the wrong type
        """
        overrides = data.get("overrides") or {}
        if not isinstance(overrides, dict):
            raise SettingsError("'overrides' must be a mapping of directory to toolchain")

        default_toolchain = data.get("default_toolchain")
        if default_toolchain is not None and not isinstance(default_toolchain, str):
            raise SettingsError(
                f"'default_toolchain' must be a toolchain name, got {default_toolchain!r}"
            )

        # yaml.safe_load already maps true/false to bool; quoted strings stay str
        telemetry = data.get("telemetry", False)
        if not isinstance(telemetry, bool):
            raise SettingsError(f"'telemetry' must be true or false, got {telemetry!r}")

        version = data.get("version", SETTINGS_VERSION)
        if isinstance(version, bool):
            raise SettingsError(f"'version' must be an integer, got {version!r}")
        try:
            version = int(version)
        except (TypeError, ValueError) as e:
            raise SettingsError(f"'version' must be an integer, got {version!r}") from e

        return cls(
            default_toolchain=default_toolchain,
            telemetry=telemetry,
            overrides={str(k): str(v) for k, v in overrides.items()},
            version=version,
        )

    def add_override(
        self, path: Path, toolchain: str, notify_handler: Optional[NotifyHandler] = None
    ) -> None:
        """Pin a directory to a toolchain."""
        key = str(Path(path).resolve())
        self.overrides[key] = toolchain
        if notify_handler is not None:
            notify_handler(
                Notification(
                    NotificationKind.SET_OVERRIDE_TOOLCHAIN,
                    toolchain=toolchain,
                    path=Path(key),
                )
            )

    def remove_override(self, path: Path) -> bool:
        """Drop a directory override; returns whether one existed."""
        return self.overrides.pop(str(Path(path).resolve()), None) is not None

    def find_override(self, path: Path) -> Optional[str]:
        """Find the override for path or its nearest overridden ancestor."""
        current = Path(path).resolve()
        for candidate in (current, *current.parents):
            toolchain = self.overrides.get(str(candidate))
            if toolchain is not None:
                return toolchain
        return None


class SettingsFile:
    """Reads and writes settings.yaml."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Settings:
        """
        Load settings; a missing file yields defaults.

        Raises:
            SettingsError: If the file is not valid YAML or has a bad shape
        """
        if not self.path.exists():
            logger.debug(f"Settings file not found, using defaults: {self.path}")
            return Settings()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse settings: {e}")
            raise SettingsError(f"Invalid YAML in {self.path}: {e}") from e
        except OSError as e:
            raise SettingsError(f"Failed to read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise SettingsError(f"Settings in {self.path} must be a mapping")

        return Settings.from_dict(data)

    def save(self, settings: Settings) -> None:
        """Write settings atomically."""
        try:
            content = yaml.safe_dump(settings.to_dict(), sort_keys=False)
            atomic_write(self.path, content)
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
            raise SettingsError(f"Failed to save settings: {e}") from e

        logger.debug(f"Saved settings to {self.path}")

    def with_(self, func: Callable[[Settings], T]) -> T:
        """Run func against the current settings."""
        return func(self.load())

    def with_mut(self, func: Callable[[Settings], T]) -> T:
        """Run func against the current settings and persist its changes."""
        settings = self.load()
        result = func(settings)
        self.save(settings)
        return result


__all__ = ["Settings", "SettingsFile", "SETTINGS_VERSION"]
