"""
Pytest configuration and shared fixtures for toolchainfinder tests.
"""

import stat
from pathlib import Path

import pytest

from toolchainfinder.core.platform import PlatformInfo, clear_platform_cache


@pytest.fixture
def platform_linux():
    """Linux platform info."""
    return PlatformInfo("linux", "x64", "5.15.0")


@pytest.fixture
def platform_windows():
    """Windows platform info."""
    return PlatformInfo("windows", "x64", "10.0.19041")


@pytest.fixture
def platform_macos():
    """macOS platform info."""
    return PlatformInfo("macos", "arm64", "14.1")


@pytest.fixture
def make_executable(tmp_path):
    """
    Factory creating executable files under tmp_path.

    Usage:
        gpp = make_executable("bin1/g++")
    """

    def _make(relative: str, content: str = "#!/bin/sh\nexit 0\n") -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


@pytest.fixture(autouse=True)
def reset_platform_cache():
    """Make every test start from a fresh platform detection."""
    clear_platform_cache()
    yield
    clear_platform_cache()
