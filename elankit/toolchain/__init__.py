"""
Toolchain management module for elankit.

This module provides functionality for:
- Resolving toolchain names to installation directories
- Installing, updating and removing toolchains
- Building commands that run toolchain binaries
"""

from elankit.toolchain.command import Command
from elankit.toolchain.dist import Component, ComponentStatus, ToolchainDesc
from elankit.toolchain.install import (
    Copy,
    Dist,
    InstallMethod,
    Installer,
    Link,
    is_valid_install_method,
)
from elankit.toolchain.toolchain import Toolchain, UpdateStatus

__all__ = [
    "Command",
    "Component",
    "ComponentStatus",
    "ToolchainDesc",
    "InstallMethod",
    "Copy",
    "Link",
    "Installer",
    "Dist",
    "is_valid_install_method",
    "Toolchain",
    "UpdateStatus",
]
