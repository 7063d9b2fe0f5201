"""
Run command implementation.

Runs a binary from a toolchain with the toolchain environment applied.
"""

import logging

from elankit.cli.utils import load_cfg
from elankit.core.filesystem import is_file
from elankit.toolchain import Toolchain
from elankit.toolchain.toolchain import FALLBACK_BINARY

logger = logging.getLogger(__name__)


def build_command(cfg, toolchain: Toolchain, binary: str):
    """
    Build the command for binary.

    Custom toolchains without leanpkg borrow it from the default toolchain.
    """
    if (
        binary == FALLBACK_BINARY
        and toolchain.is_custom()
        and toolchain.exists()
        and not is_file(toolchain.binary_file(FALLBACK_BINARY))
    ):
        default = cfg.get_default()
        if default:
            fallback = Toolchain(cfg, default)
            logger.debug(f"Using {binary} from '{fallback.name}'")
            return fallback.create_fallback_command(binary, toolchain)

    return toolchain.create_command(binary)


def run(args) -> int:
    """
    Run the run command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code of the spawned process
    """
    cfg = load_cfg(args)
    toolchain = Toolchain(cfg, args.toolchain)

    if not toolchain.is_custom():
        toolchain.install_from_dist_if_not_installed()

    command = build_command(cfg, toolchain, args.binary)
    command.arg(*args.args)
    return command.run().returncode
