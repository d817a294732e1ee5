"""
Find command: print the toolchain selected for a requirement.
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
    Run the find command.

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

    print(toolchain.display_name)
    if toolchain.is_gcc_compatible:
        print(f"  C compiler:   {toolchain.c_compiler}")
        print(f"  C++ compiler: {toolchain.cpp_compiler}")
    elif toolchain.is_visual_cpp:
        print(f"  C++ compiler: {toolchain.cpp_compiler}")
        print(f"  Install dir:  {toolchain.install_dir}")
    for path_entry in toolchain.path_entries:
        print(f"  Path entry:   {path_entry}")

    return 0
