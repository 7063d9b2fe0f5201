"""
Configuration for elankit: runtime layout and persisted user settings.
"""

from .cfg import Cfg
from .settings import Settings, SettingsFile

__all__ = ["Cfg", "Settings", "SettingsFile"]
