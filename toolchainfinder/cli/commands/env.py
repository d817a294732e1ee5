"""
Env command: print the environment needed to run binaries built by a toolchain.
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
    Run the env command.

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

    assignments = toolchain.runtime_env()
    if not assignments:
        logger.info(f"{toolchain.display_name} needs no runtime environment changes")
    for assignment in assignments:
        print(assignment)

    return 0
