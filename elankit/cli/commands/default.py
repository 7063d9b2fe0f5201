"""
Default command implementation.

Shows or sets the default toolchain.
"""

import logging

from elankit.cli.utils import load_cfg
from elankit.toolchain import Toolchain

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the default command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 if no default is set)
    """
    cfg = load_cfg(args)

    if not args.toolchain:
        default = cfg.get_default()
        if default is None:
            print("no default toolchain configured")
            return 1
        print(default)
        return 0

    toolchain = Toolchain(cfg, args.toolchain)
    if not toolchain.is_custom():
        toolchain.install_from_dist_if_not_installed()
    else:
        toolchain.verify()
    toolchain.make_default()
    return 0
