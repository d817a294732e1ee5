"""
Centralized exception hierarchy for toolchainfinder.

This module defines all custom exceptions used across the codebase
to provide clear exception semantics.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class ToolchainFinderError(Exception):
    """Base exception for all toolchainfinder errors."""

    pass


class ConfigurationError(ToolchainFinderError):
    """Raised when the discovery configuration is invalid."""

    pass


class InvalidVersionError(ToolchainFinderError):
    """Invalid version format."""

    pass


# ============================================================================
# Toolchain-related Exceptions
# ============================================================================


class ToolchainError(ToolchainFinderError):
    """Base exception for toolchain-related errors."""

    pass


class ToolchainUnavailableError(ToolchainError):
    """Raised when an operation requires a toolchain that was not found."""

    def __init__(self, display_name: str):
        self.display_name = display_name
        super().__init__(f"Toolchain is not available: {display_name}")


class EnvironmentActivationError(ToolchainError):
    """Raised when the process environment cannot be activated or restored."""

    pass
