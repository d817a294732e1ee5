"""
Config command: print the build-script configuration for a toolchain.
"""

import logging

from toolchainfinder.cli.utils import (
    create_resolver,
    describe_missing,
    print_error,
    select_toolchain,
)

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the config command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if a toolchain was found, 1 otherwise)
    """
    resolver = create_resolver(args)

    try:
        toolchain = select_toolchain(resolver, args.requirement)
    except ValueError as e:
        print_error(str(e))
        return 1

    if toolchain is None:
        print_error(describe_missing(args.requirement))
        return 1

    logger.debug(f"Generating configuration for {toolchain.instance_display_name}")
    print(toolchain.build_script_config(), end="")
    return 0
