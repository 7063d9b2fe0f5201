"""
Which command implementation.

Prints the path of a binary in the active toolchain.
"""

import logging

from elankit.cli.utils import load_cfg, resolve_toolchain
from elankit.core.exceptions import BinaryNotFoundError, ToolchainNotInstalledError
from elankit.core.filesystem import is_file

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the which command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    cfg = load_cfg(args)
    toolchain = resolve_toolchain(cfg, args.toolchain)

    if not toolchain.exists():
        raise ToolchainNotInstalledError(toolchain.name)

    binary = toolchain.binary_file(args.binary)
    if not is_file(binary):
        raise BinaryNotFoundError(toolchain.name, args.binary)

    print(binary)
    return 0
