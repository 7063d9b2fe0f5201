"""
Toolchain command implementation.

Lists, installs, uninstalls and links toolchains.
"""

import logging

from elankit.cli.utils import load_cfg
from elankit.core.filesystem import is_directory, is_symlink
from elankit.toolchain import Toolchain, UpdateStatus

logger = logging.getLogger(__name__)


def run_list(args) -> int:
    """
    List installed toolchains, marking the default.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    cfg = load_cfg(args)
    default = cfg.get_default()
    default_name = Toolchain(cfg, default).name if default else None

    if not cfg.toolchains_dir.exists():
        print("no installed toolchains")
        return 0

    names = sorted(
        entry.name
        for entry in cfg.toolchains_dir.iterdir()
        if is_directory(entry) or is_symlink(entry)
    )
    if not names:
        print("no installed toolchains")
        return 0

    for name in names:
        suffix = " (default)" if name == default_name else ""
        print(f"{name}{suffix}")
        if args.components:
            for status in Toolchain(cfg, name).list_components():
                state = "installed" if status.installed else "missing"
                kind = "required" if status.required else "optional"
                print(f"  {status.component.description()}: {state} ({kind})")

    return 0


def run_install(args) -> int:
    """
    Install toolchains from releases, or a custom toolchain from installers.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    cfg = load_cfg(args)

    if args.installer:
        if len(args.toolchains) != 1:
            logger.error("--installer requires exactly one toolchain name")
            return 1
        toolchain = Toolchain(cfg, args.toolchains[0])
        toolchain.install_from_installers(args.installer)
        print(f"installed custom toolchain '{toolchain.name}'")
        return 0

    for name in args.toolchains:
        toolchain = Toolchain(cfg, name)
        status = toolchain.install_from_dist(force_update=args.force)
        if status is UpdateStatus.UNCHANGED:
            print(f"{toolchain.name} unchanged")
        else:
            print(f"{toolchain.name} {status.value}")

    return 0


def run_uninstall(args) -> int:
    """Uninstall the named toolchains."""
    cfg = load_cfg(args)
    for name in args.toolchains:
        Toolchain(cfg, name).remove()
    return 0


def run_link(args) -> int:
    """Install a custom toolchain from a local build directory."""
    cfg = load_cfg(args)
    toolchain = Toolchain(cfg, args.toolchain)
    toolchain.install_from_dir(args.path, link=not args.copy)
    return 0
