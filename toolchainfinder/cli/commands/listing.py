"""
List command: show every toolchain known for this platform.
"""

import json
import logging

from toolchainfinder.cli.utils import create_resolver

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    resolver = create_resolver(args)
    toolchains = resolver.all_toolchains()

    if args.json:
        print(json.dumps([toolchain.to_dict() for toolchain in toolchains], indent=2))
        return 0

    if not toolchains:
        print("No toolchains searched on this platform")
        return 0

    default = resolver.default_toolchain()
    for toolchain in toolchains:
        marker = "*" if toolchain is default else " "
        status = "available" if toolchain.is_available else "not available"
        print(f"{marker} {toolchain.display_name:<32} {status}")
        for path_entry in toolchain.path_entries:
            print(f"      path: {path_entry}")

    return 0
