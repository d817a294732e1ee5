"""
Core functionality for toolchainfinder.

This package contains the foundational modules that other components depend on.
"""

from .config import (
    DiscoveryConfig,
    find_config_file,
    load_config,
)

from .exceptions import (
    ToolchainFinderError,
    ConfigurationError,
    InvalidVersionError,
    ToolchainError,
    ToolchainUnavailableError,
    EnvironmentActivationError,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .version import VersionNumber

__all__ = [
    "DiscoveryConfig",
    "find_config_file",
    "load_config",
    "ToolchainFinderError",
    "ConfigurationError",
    "InvalidVersionError",
    "ToolchainError",
    "ToolchainUnavailableError",
    "EnvironmentActivationError",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "VersionNumber",
]
