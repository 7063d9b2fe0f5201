"""
Doc command implementation.

Locates or opens the HTML documentation shipped with a toolchain.
"""

import logging

from elankit.cli.utils import load_cfg, resolve_toolchain

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the doc command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 if no browser could be opened)
    """
    cfg = load_cfg(args)
    toolchain = resolve_toolchain(cfg, args.toolchain)

    if args.path:
        print(toolchain.doc_path(args.relative))
        return 0

    if not toolchain.open_docs(args.relative):
        logger.error("Could not open a web browser")
        return 1
    return 0
