"""
Platform detection for toolchainfinder.

This module detects the current operating system and CPU architecture and
answers the OS-dependent questions that toolchain discovery asks:

- Which environment variable holds the executable search path ('PATH' or 'Path')
- Which executables of a given name are reachable through that search path
- How executables, libraries and object files are named on this OS

Usage:
    from toolchainfinder.core.platform import detect_platform

    platform_info = detect_platform()
    print(f"OS: {platform_info.os}")
    print(f"Search path variable: {platform_info.path_var}")
    for gpp in platform_info.find_all_in_path("g++"):
        print(gpp)
"""

import functools
import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform information.

    Attributes:
        os: Operating system ('windows', 'linux', 'macos', or another lower-cased name)
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm')
        os_version: OS version string (e.g., '10.0.19041', '5.15.0', '14.1')
    """

    os: str
    arch: str
    os_version: str = ""

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    @property
    def is_macos(self) -> bool:
        return self.os == "macos"

    @property
    def is_linux(self) -> bool:
        return self.os == "linux"

    @property
    def path_var(self) -> str:
        """Name of the executable search path environment variable."""
        return "Path" if self.is_windows else "PATH"

    @property
    def path_separator(self) -> str:
        return ";" if self.is_windows else ":"

    @property
    def object_file_suffix(self) -> str:
        return ".obj" if self.is_windows else ".o"

    def executable_name(self, name: str) -> str:
        """
        Get the file name of an executable.

        Example:
            >>> PlatformInfo("windows", "x64").executable_name("g++")
            'g++.exe'
        """
        if self.is_windows and not name.lower().endswith(".exe"):
            return name + ".exe"
        return name

    def shared_library_name(self, name: str) -> str:
        path = Path(name)
        if self.is_windows:
            return str(path.with_name(path.name + ".dll"))
        suffix = ".dylib" if self.is_macos else ".so"
        return str(path.with_name("lib" + path.name + suffix))

    def static_library_name(self, name: str) -> str:
        path = Path(name)
        if self.is_windows:
            return str(path.with_name(path.name + ".lib"))
        return str(path.with_name("lib" + path.name + ".a"))

    def search_path(self, environ: Optional[Mapping[str, str]] = None) -> List[Path]:
        """
        Get the directories of the executable search path, in order.

        Args:
            environ: Environment mapping (default: os.environ)

        Returns:
            List of search path directories (empty entries removed)
        """
        if environ is None:
            environ = os.environ
        value = environ.get(self.path_var, "")
        return [Path(entry) for entry in value.split(self.path_separator) if entry]

    def find_all_in_path(
        self, name: str, environ: Optional[Mapping[str, str]] = None
    ) -> List[Path]:
        """
        Find every executable with the given name in the search path.

        The same file reached through two search path entries (or through a
        symlinked directory) is reported once, at its first position.

        Args:
            name: Executable name without OS suffix (e.g., 'g++')
            environ: Environment mapping (default: os.environ)

        Returns:
            Executables in search path order
        """
        file_name = self.executable_name(name)
        found: List[Path] = []
        seen = set()

        for directory in self.search_path(environ):
            candidate = directory / file_name
            if not candidate.is_file():
                continue
            if not self.is_windows and not os.access(candidate, os.X_OK):
                logger.debug(f"Skipping non-executable file {candidate}")
                continue

            key = candidate.resolve()
            if key in seen:
                logger.debug(f"Skipping duplicate {candidate} (resolves to {key})")
                continue
            seen.add(key)
            found.append(candidate)

        return found

    def find_in_path(
        self, name: str, environ: Optional[Mapping[str, str]] = None
    ) -> Optional[Path]:
        """Find the first executable with the given name in the search path."""
        found = self.find_all_in_path(name, environ)
        return found[0] if found else None

    def __str__(self) -> str:
        parts = [f"{self.os}-{self.arch}"]
        if self.os_version:
            parts.append(f"v{self.os_version}")
        return " ".join(parts)


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformInfo instance with detected platform information
    """
    return PlatformInfo(
        os=_detect_os(), arch=_detect_architecture(), os_version=_detect_os_version()
    )


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'windows', 'linux', 'macos', or the lower-cased system name
    """
    system = platform.system().lower()

    if system == "windows" or system.startswith("cygwin"):
        return "windows"
    elif system == "darwin":
        return "macos"
    return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        # Return original for unknown architectures
        return machine


def _detect_os_version() -> str:
    system = platform.system().lower()

    if system == "darwin":
        version = platform.mac_ver()[0]
        return version if version else "unknown"
    elif system == "linux":
        return platform.release()
    return platform.version()


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    Useful for testing.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
]
