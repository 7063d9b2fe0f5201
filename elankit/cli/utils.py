"""
Shared utilities for CLI commands.

This module provides helpers used by several commands: building the
configuration from parsed arguments, choosing the active toolchain and
printing errors consistently.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from elankit.config import Cfg
from elankit.core.directory import ensure_home_structure
from elankit.core.env_var import ELAN_HOME
from elankit.core.exceptions import NoToolchainSelectedError
from elankit.toolchain import Toolchain

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration
# ============================================================================


def load_cfg(args) -> Cfg:
    """
    Build the configuration for a command.

    Args:
        args: Parsed arguments; `elan_home` overrides ELAN_HOME when set

    Returns:
        Configuration for this invocation
    """
    environ = dict(os.environ)
    elan_home = getattr(args, "elan_home", None)
    if elan_home:
        environ[ELAN_HOME] = str(elan_home)
    cfg = Cfg.from_env(environ)
    ensure_home_structure(cfg.elan_dir)
    return cfg


def resolve_toolchain(cfg: Cfg, name: Optional[str], cwd: Optional[Path] = None) -> Toolchain:
    """
    Pick the toolchain a command operates on.

    An explicit name wins, then a directory override for cwd, then the
    default toolchain.

    Raises:
        NoToolchainSelectedError: If none of those is configured
    """
    if name:
        return Toolchain(cfg, name)

    cwd = Path(cwd) if cwd is not None else Path.cwd()
    override = cfg.find_override(cwd)
    if override:
        logger.debug(f"Using override '{override}' for {cwd}")
        return Toolchain(cfg, override)

    default = cfg.get_default()
    if default:
        return Toolchain(cfg, default)

    raise NoToolchainSelectedError(cwd)


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"error: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"warning: {message}", file=sys.stderr)
