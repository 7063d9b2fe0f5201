"""
elankit - Lean toolchain manager.

Installs, updates, removes and runs Lean toolchains kept under the elan
home directory.
"""

from .config import Cfg
from .toolchain import Toolchain, UpdateStatus

__version__ = "0.1.0"

__all__ = ["Cfg", "Toolchain", "UpdateStatus", "__version__"]
