"""
elankit CLI argument parser.

This module implements the command-line interface for elankit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from elankit.cli.utils import print_error
from elankit.core.exceptions import ElanKitError

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("elankit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """elankit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="elankit",
            description="elankit - Lean toolchain manager",
            epilog='Use "elankit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"elankit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--elan-home",
            type=Path,
            metavar="PATH",
            help="elan home directory (default: $ELAN_HOME or ~/.elan)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_toolchain_command(subparsers)
        self._add_default_command(subparsers)
        self._add_override_command(subparsers)
        self._add_run_command(subparsers)
        self._add_which_command(subparsers)
        self._add_doc_command(subparsers)
        self._add_telemetry_command(subparsers)

        return parser

    def _add_toolchain_command(self, subparsers):
        """Add 'toolchain' subcommand with sub-subcommands."""
        parser = subparsers.add_parser(
            "toolchain",
            help="Manage installed toolchains",
            description="List, install, uninstall and link toolchains",
        )

        toolchain_subparsers = parser.add_subparsers(
            dest="toolchain_command",
            help="Toolchain management commands",
            metavar="COMMAND",
        )

        # toolchain list
        list_parser = toolchain_subparsers.add_parser(
            "list",
            help="List installed toolchains",
            description="Show installed toolchains and the default",
        )
        list_parser.add_argument(
            "--components",
            action="store_true",
            help="Show components of each toolchain",
        )

        # toolchain install
        install_parser = toolchain_subparsers.add_parser(
            "install",
            help="Install or update toolchains",
            description="Install or update release toolchains, or a custom "
            "toolchain from .tar.gz installers",
        )
        install_parser.add_argument(
            "toolchains", nargs="+", metavar="TOOLCHAIN", help="Toolchain names"
        )
        install_parser.add_argument(
            "--force",
            action="store_true",
            help="Reinstall even if the toolchain is up to date",
        )
        install_parser.add_argument(
            "--installer",
            action="append",
            metavar="ARCHIVE",
            help="Installer path or URL (can be used multiple times)",
        )

        # toolchain uninstall
        uninstall_parser = toolchain_subparsers.add_parser(
            "uninstall",
            help="Uninstall toolchains",
            description="Remove installed toolchains",
        )
        uninstall_parser.add_argument(
            "toolchains", nargs="+", metavar="TOOLCHAIN", help="Toolchain names"
        )

        # toolchain link
        link_parser = toolchain_subparsers.add_parser(
            "link",
            help="Create a custom toolchain from a local directory",
            description="Link (or copy) a local Lean build as a custom toolchain",
        )
        link_parser.add_argument("toolchain", help="Custom toolchain name")
        link_parser.add_argument("path", type=Path, help="Path to the build directory")
        link_parser.add_argument(
            "--copy", action="store_true", help="Copy the directory instead of linking"
        )

    def _add_default_command(self, subparsers):
        """Add 'default' subcommand."""
        parser = subparsers.add_parser(
            "default",
            help="Show or set the default toolchain",
            description="Show or set the default toolchain",
        )
        parser.add_argument("toolchain", nargs="?", help="Toolchain name")

    def _add_override_command(self, subparsers):
        """Add 'override' subcommand with sub-subcommands."""
        parser = subparsers.add_parser(
            "override",
            help="Manage directory overrides",
            description="Pin directories to toolchains",
        )

        override_subparsers = parser.add_subparsers(
            dest="override_command", help="Override commands", metavar="COMMAND"
        )

        set_parser = override_subparsers.add_parser(
            "set",
            help="Set the override toolchain for a directory",
        )
        set_parser.add_argument("toolchain", help="Toolchain name")
        set_parser.add_argument(
            "--path", type=Path, help="Directory to pin (default: current directory)"
        )

        unset_parser = override_subparsers.add_parser(
            "unset",
            help="Remove the override toolchain for a directory",
        )
        unset_parser.add_argument(
            "--path", type=Path, help="Directory to unpin (default: current directory)"
        )

    def _add_run_command(self, subparsers):
        """Add 'run' subcommand."""
        parser = subparsers.add_parser(
            "run",
            help="Run a command with a toolchain",
            description="Run a binary from a toolchain with its environment",
        )
        parser.add_argument("toolchain", help="Toolchain name")
        parser.add_argument("binary", help="Binary to run")
        parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments")

    def _add_which_command(self, subparsers):
        """Add 'which' subcommand."""
        parser = subparsers.add_parser(
            "which",
            help="Show the path of a binary",
            description="Show the path of a binary in the active toolchain",
        )
        parser.add_argument("binary", help="Binary name")
        parser.add_argument("--toolchain", metavar="NAME", help="Toolchain to query")

    def _add_doc_command(self, subparsers):
        """Add 'doc' subcommand."""
        parser = subparsers.add_parser(
            "doc",
            help="Open the toolchain documentation",
            description="Open the HTML documentation of a toolchain",
        )
        parser.add_argument(
            "relative", nargs="?", default="index.html", help="Page to open"
        )
        parser.add_argument("--toolchain", metavar="NAME", help="Toolchain to use")
        parser.add_argument(
            "--path", action="store_true", help="Print the path instead of opening it"
        )

    def _add_telemetry_command(self, subparsers):
        """Add 'telemetry' subcommand."""
        parser = subparsers.add_parser(
            "telemetry",
            help="Show or change telemetry logging",
        )
        parser.add_argument("state", nargs="?", choices=["enable", "disable"])

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except ElanKitError as e:
            print_error(str(e))
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        # Commands with sub-commands
        if args.command == "toolchain":
            return self._dispatch_subcommand(
                args,
                "toolchain_command",
                "elankit.cli.commands.toolchain",
                {
                    "list": "run_list",
                    "install": "run_install",
                    "uninstall": "run_uninstall",
                    "link": "run_link",
                },
            )
        if args.command == "override":
            return self._dispatch_subcommand(
                args,
                "override_command",
                "elankit.cli.commands.override",
                {"set": "run_set", "unset": "run_unset"},
            )

        # Command module mapping
        command_map = {
            "default": "elankit.cli.commands.default",
            "run": "elankit.cli.commands.run",
            "which": "elankit.cli.commands.which",
            "doc": "elankit.cli.commands.doc",
            "telemetry": "elankit.cli.commands.telemetry",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)

    def _dispatch_subcommand(self, args, dest: str, module_name: str, handlers) -> int:
        """
        Dispatch a sub-command to a handler function in module_name.

        Args:
            args: Parsed arguments
            dest: Attribute holding the sub-command name
            module_name: Module implementing the handlers
            handlers: Mapping of sub-command name to handler function name

        Returns:
            Exit code from command handler
        """
        subcommand = getattr(args, dest, None)
        if not subcommand:
            logger.error(f"No {args.command} sub-command specified")
            return 1

        handler_name = handlers.get(subcommand)
        if not handler_name:
            logger.error(f"Unknown {args.command} command: {subcommand}")
            return 1

        module = importlib.import_module(module_name)
        return getattr(module, handler_name)(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
