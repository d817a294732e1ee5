"""
Test utilities for toolchainfinder testing.

This package provides fake metadata providers, fake Visual Studio locators and
helpers for building search path environments.
"""

from .mocks import (
    FakeLocator,
    FakeProvider,
    gcc_result,
    path_environ,
    swiftc_result,
)

__all__ = [
    "FakeLocator",
    "FakeProvider",
    "gcc_result",
    "path_environ",
    "swiftc_result",
]
