"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands.
"""

import logging
import sys
from typing import Optional

from toolchainfinder.core.config import load_config
from toolchainfinder.toolchain.candidates import ToolchainCandidate
from toolchainfinder.toolchain.families import ToolchainRequirement
from toolchainfinder.toolchain.resolver import ToolchainResolver

logger = logging.getLogger(__name__)


def create_resolver(args) -> ToolchainResolver:
    """
    Create a resolver using the configuration selected on the command line.

    Args:
        args: Parsed arguments (uses args.config when present)

    Returns:
        ToolchainResolver
    """
    config = load_config(getattr(args, "config", None))
    return ToolchainResolver(config=config)


def select_toolchain(
    resolver: ToolchainResolver, requirement: Optional[str]
) -> Optional[ToolchainCandidate]:
    """
    Select a toolchain by requirement name, or the default toolchain.

    Args:
        resolver: Toolchain resolver
        requirement: Requirement value or name, or None for the default toolchain

    Returns:
        Selected toolchain or None

    Raises:
        ValueError: If the requirement is unknown
    """
    if not requirement:
        return resolver.default_toolchain()

    parsed = ToolchainRequirement.from_string(requirement)
    logger.debug(f"Looking for toolchain meeting {parsed.name}")
    return resolver.find_toolchain(parsed)


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def describe_missing(requirement: Optional[str]) -> str:
    if requirement:
        return f"No toolchain meets requirement '{requirement}'"
    return "No toolchain is available on this machine"
