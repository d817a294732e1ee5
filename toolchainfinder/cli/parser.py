"""
toolchainfinder CLI argument parser.

This module implements the command-line interface using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from toolchainfinder import __version__

logger = logging.getLogger(__name__)


class CLI:
    """toolchainfinder command-line interface."""

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
            prog="toolchainfinder",
            description="Discover installed native compiler toolchains",
            epilog='Use "toolchainfinder COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"toolchainfinder {__version__}"
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
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./toolchainfinder.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_list_command(subparsers)
        self._add_find_command(subparsers)
        self._add_config_command(subparsers)
        self._add_env_command(subparsers)

        return parser

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        parser = subparsers.add_parser(
            "list",
            help="List all known toolchains",
            description="List every toolchain family searched on this platform",
        )
        parser.add_argument(
            "--json", action="store_true", help="Output as JSON"
        )

    def _add_find_command(self, subparsers):
        """Add 'find' subcommand."""
        parser = subparsers.add_parser(
            "find",
            help="Find a toolchain meeting a requirement",
            description="Print the toolchain selected for a requirement "
            "(the default toolchain when no requirement is given)",
        )
        parser.add_argument(
            "requirement",
            nargs="?",
            metavar="REQUIREMENT",
            help="Requirement (e.g., gcc-compatible, visualcpp-2015+, swiftc-4)",
        )

    def _add_config_command(self, subparsers):
        """Add 'config' subcommand."""
        parser = subparsers.add_parser(
            "config",
            help="Print build-script configuration for a toolchain",
            description="Print the build-script configuration block declaring "
            "the selected toolchain",
        )
        parser.add_argument(
            "requirement",
            nargs="?",
            metavar="REQUIREMENT",
            help="Requirement (default: the default toolchain)",
        )

    def _add_env_command(self, subparsers):
        """Add 'env' subcommand."""
        parser = subparsers.add_parser(
            "env",
            help="Print the runtime environment for a toolchain",
            description="Print the environment assignments needed to run "
            "binaries built by the selected toolchain",
        )
        parser.add_argument(
            "requirement",
            nargs="?",
            metavar="REQUIREMENT",
            help="Requirement (default: the default toolchain)",
        )

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

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
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
        command_map = {
            "list": "toolchainfinder.cli.commands.listing",
            "find": "toolchainfinder.cli.commands.find",
            "config": "toolchainfinder.cli.commands.buildconfig",
            "env": "toolchainfinder.cli.commands.env",
        }

        module_name = command_map.get(args.command)
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
