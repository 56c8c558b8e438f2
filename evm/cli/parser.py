"""
evm CLI argument parser.

This module implements the command-line interface for evm using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from evm import __version__
from evm.core.exceptions import EvmError
from evm.versions import TOOLCHAINS

logger = logging.getLogger(__name__)

# Canonical command name -> handler module
COMMAND_MAP = {
    "list": "evm.cli.commands.list_local",
    "list-remote": "evm.cli.commands.list_remote",
    "use": "evm.cli.commands.use",
    "install": "evm.cli.commands.install",
    "uninstall": "evm.cli.commands.uninstall",
}


class CLI:
    """evm command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self._toolchain_parsers = {}
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with a subcommand per toolchain.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="evm",
            description="evm - runtime version manager",
            epilog='Use "evm TOOLCHAIN --help" for toolchain-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument("--version", action="version", version=f"evm {__version__}")
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
            "--home",
            type=Path,
            metavar="PATH",
            help="Base directory holding .evm (default: $EVM_HOME or user home)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: <home>/.evm/config.yaml)",
        )

        toolchains = parser.add_subparsers(
            dest="toolchain", help="Managed toolchains", metavar="TOOLCHAIN"
        )
        for name in TOOLCHAINS:
            self._add_toolchain(toolchains, name)

        return parser

    def _add_toolchain(self, toolchains, name: str):
        """Add a toolchain subcommand with its version commands."""
        parser = toolchains.add_parser(
            name,
            help=f"{name.capitalize()} version manager",
            description=f"Manage installed {name} versions",
        )
        self._toolchain_parsers[name] = parser
        subparsers = parser.add_subparsers(
            dest="subcommand", help="Available commands", metavar="COMMAND"
        )

        list_parser = subparsers.add_parser(
            "list", aliases=["ls", "ll"], help="List installed versions"
        )
        list_parser.set_defaults(command="list")

        remote_parser = subparsers.add_parser(
            "list-remote",
            aliases=["lr"],
            help="List remote versions (default latest)",
        )
        remote_parser.add_argument(
            "--all",
            "-a",
            action="store_true",
            help="List all remote versions (include archived versions)",
        )
        remote_parser.set_defaults(command="list-remote")

        use_parser = subparsers.add_parser(
            "use", aliases=["u"], help="Use target version"
        )
        use_parser.add_argument("version", help="Installed version (e.g. 1.22.0)")
        use_parser.set_defaults(command="use")

        install_parser = subparsers.add_parser(
            "install", aliases=["in", "i"], help="Install target version"
        )
        install_parser.add_argument(
            "version", help="Version or version prefix (e.g. 1.22 or 1.22.0)"
        )
        install_parser.set_defaults(command="install")

        uninstall_parser = subparsers.add_parser(
            "uninstall",
            aliases=["un", "rm", "remove"],
            help="Uninstall target versions",
        )
        uninstall_parser.add_argument(
            "versions", nargs="+", metavar="version", help="Installed versions"
        )
        uninstall_parser.set_defaults(command="uninstall")

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

        self._configure_logging(parsed_args)

        if not parsed_args.toolchain:
            self.parser.print_help()
            return 1

        if not getattr(parsed_args, "command", None):
            self._toolchain_parsers[parsed_args.toolchain].print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except EvmError as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1
        except Exception as e:
            logger.error(f"Unexpected error: {e}")
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
        module_name = COMMAND_MAP.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
