"""
Override command implementation.

Pins a directory to a toolchain, or removes the pin.
"""

import logging
from pathlib import Path

from elankit.cli.utils import load_cfg
from elankit.toolchain import Toolchain

logger = logging.getLogger(__name__)


def run_set(args) -> int:
    """Pin a directory (default: current directory) to a toolchain."""
    cfg = load_cfg(args)
    toolchain = Toolchain(cfg, args.toolchain)
    toolchain.make_override(args.path or Path.cwd())
    return 0


def run_unset(args) -> int:
    """Remove the pin for a directory (default: current directory)."""
    cfg = load_cfg(args)
    path = args.path or Path.cwd()
    removed = cfg.settings_file.with_mut(lambda s: s.remove_override(path))
    if not removed:
        print(f"no override set for '{path}'")
    return 0
