"""
Compiler metadata providers.

A metadata provider probes a compiler executable in a subprocess and reports
either its parsed version (plus provider-specific metadata) or a diagnostic
explaining why the executable is not usable. Probe failures are never raised:
discovery simply drops the candidate.

- GccMetadataProvider: runs 'compiler -dM -E -v -' and reads the predefined
  macros (__GNUC__, __clang_major__, ...), the 'Target:' line and the system
  include search list.
- SwiftcMetadataProvider: runs 'swiftc --version'.
"""

import logging
import os
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Generic, List, Mapping, Optional, Sequence, TypeVar

from ..core.platform import PlatformInfo, detect_platform
from ..core.version import VersionNumber

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PROBE_TIMEOUT = 10.0

_DEFINE_PATTERN = re.compile(r"^#define\s+(\S+)\s*(.*)$")
_SWIFT_VERSION_PATTERN = re.compile(r"Swift version (\d+(?:\.\d+)*)")


@dataclass
class SearchResult(Generic[T]):
    """
    Outcome of probing an executable.

    Attributes:
        available: True when the executable is a usable compiler
        component: Provider-specific metadata (when available)
        diagnostic: Human-readable reason (when not available)
    """

    available: bool
    component: Optional[T] = None
    diagnostic: str = ""

    @classmethod
    def found(cls, component: T) -> "SearchResult[T]":
        return cls(available=True, component=component)

    @classmethod
    def not_found(cls, diagnostic: str) -> "SearchResult[T]":
        return cls(available=False, diagnostic=diagnostic)


@dataclass
class GccMetadata:
    """
    Metadata for a GCC-compatible compiler.

    Attributes:
        version: Compiler version from the predefined macros
        vendor: 'gcc' or 'clang'
        default_architecture: Architecture of the default target ('x86', 'x64', 'arm64', ...)
        target: Target triplet from the verbose output (e.g., 'x86_64-linux-gnu')
        system_includes: System include directories from the verbose output
    """

    version: VersionNumber
    vendor: str
    default_architecture: Optional[str] = None
    target: Optional[str] = None
    system_includes: List[Path] = field(default_factory=list)


@dataclass
class SwiftcMetadata:
    """Metadata for a Swift compiler."""

    version: VersionNumber
    banner: str = ""


def _child_environment(
    path_entries: Sequence[Path], platform_info: PlatformInfo
) -> Optional[Dict[str, str]]:
    """Environment for a probe process with path entries prepended to the search path."""
    if not path_entries:
        return None

    env = dict(os.environ)
    prefix = platform_info.path_separator.join(str(entry) for entry in path_entries)
    current = env.get(platform_info.path_var, "")
    env[platform_info.path_var] = (
        prefix + platform_info.path_separator + current if current else prefix
    )
    return env


class MetadataProvider(Generic[T]):
    """
    Base class for subprocess-backed compiler probes.

    Subclasses supply the probe arguments and parse the process output.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        platform: Optional[PlatformInfo] = None,
    ):
        """
        Initialize provider.

        Args:
            timeout: Seconds to wait for the probe process
            platform: Platform information (default: detected platform)
        """
        self.timeout = timeout
        self.platform = platform or detect_platform()

    def probe_arguments(self) -> List[str]:
        raise NotImplementedError

    def probe_input(self) -> Optional[str]:
        return None

    def parse(self, executable: Path, stdout: str, stderr: str) -> SearchResult[T]:
        raise NotImplementedError

    def probe(
        self,
        executable: Path,
        args: Sequence[str] = (),
        path_entries: Sequence[Path] = (),
    ) -> SearchResult[T]:
        """
        Probe an executable.

        Args:
            executable: Compiler executable to run
            args: Extra arguments placed before the probe arguments
            path_entries: Directories prepended to the probe's search path

        Returns:
            SearchResult with metadata or a diagnostic
        """
        command = [str(executable), *args, *self.probe_arguments()]
        logger.debug(f"Probing {executable}: {' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                input=self.probe_input(),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=_child_environment(path_entries, self.platform),
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.debug(f"Timeout probing {executable}")
            return SearchResult.not_found(
                f"Could not determine version of {executable}: "
                f"timed out after {self.timeout}s"
            )
        except OSError as e:
            logger.debug(f"Failed to run {executable}: {e}")
            return SearchResult.not_found(f"Could not start {executable}: {e}")

        if result.returncode != 0:
            logger.debug(f"{executable} returned {result.returncode}")
            return SearchResult.not_found(
                f"Could not determine version of {executable}: "
                f"process exited with code {result.returncode}"
            )

        return self.parse(executable, result.stdout or "", result.stderr or "")


class GccMetadataProvider(MetadataProvider[GccMetadata]):
    """
    Probe GCC or Clang through the preprocessor's predefined macros.

    Use GccMetadataProvider.for_gcc() or GccMetadataProvider.for_clang().
    A 'g++' that is really Clang (as on macOS) is reported as not available
    by the GCC provider, and vice versa.
    """

    def __init__(
        self,
        vendor: str,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        platform: Optional[PlatformInfo] = None,
    ):
        super().__init__(timeout=timeout, platform=platform)
        if vendor not in ("gcc", "clang"):
            raise ValueError(f"Unknown compiler vendor: {vendor}")
        self.vendor = vendor

    @classmethod
    def for_gcc(cls, **kwargs) -> "GccMetadataProvider":
        return cls("gcc", **kwargs)

    @classmethod
    def for_clang(cls, **kwargs) -> "GccMetadataProvider":
        return cls("clang", **kwargs)

    def probe_arguments(self) -> List[str]:
        return ["-dM", "-E", "-v", "-"]

    def probe_input(self) -> Optional[str]:
        return ""

    def parse(
        self, executable: Path, stdout: str, stderr: str
    ) -> SearchResult[GccMetadata]:
        defines = parse_defines(stdout)

        if "__GNUC__" not in defines and "__clang__" not in defines:
            return SearchResult.not_found(
                f"Could not determine {self.vendor} version: "
                f"{executable} produced unexpected output"
            )

        is_clang = "__clang__" in defines
        if self.vendor == "gcc" and is_clang:
            return SearchResult.not_found(
                f"XCode detected: {executable} appears to be Clang rather than GCC"
            )
        if self.vendor == "clang" and not is_clang:
            return SearchResult.not_found(f"{executable} appears to be GCC rather than Clang")

        if is_clang:
            keys = ("__clang_major__", "__clang_minor__", "__clang_patchlevel__")
        else:
            keys = ("__GNUC__", "__GNUC_MINOR__", "__GNUC_PATCHLEVEL__")
        try:
            major = int(defines[keys[0]])
            minor = int(defines.get(keys[1], "0"))
            patch = int(defines.get(keys[2], "0"))
            version = VersionNumber.version(major, minor, patch)
        except (KeyError, ValueError):
            return SearchResult.not_found(
                f"Could not determine {self.vendor} version: "
                f"{executable} reported malformed version macros"
            )

        metadata = GccMetadata(
            version=version,
            vendor=self.vendor,
            default_architecture=architecture_from_defines(defines),
            target=parse_target(stderr),
            system_includes=parse_system_includes(stderr),
        )
        logger.debug(f"Extracted {self.vendor} version {version} from {executable}")
        return SearchResult.found(metadata)


class SwiftcMetadataProvider(MetadataProvider[SwiftcMetadata]):
    """Probe swiftc with '--version'."""

    def probe_arguments(self) -> List[str]:
        return ["--version"]

    def parse(
        self, executable: Path, stdout: str, stderr: str
    ) -> SearchResult[SwiftcMetadata]:
        output = stdout + stderr
        match = _SWIFT_VERSION_PATTERN.search(output)
        if not match:
            logger.debug(f"Could not parse version from output: {output[:200]}")
            return SearchResult.not_found(
                f"Could not determine swiftc version: {executable} produced unexpected output"
            )

        version = VersionNumber.parse(match.group(1))
        logger.debug(f"Extracted swiftc version {version} from {executable}")
        return SearchResult.found(
            SwiftcMetadata(version=version, banner=output.strip().splitlines()[0])
        )


def parse_defines(output: str) -> Dict[str, str]:
    """
    Parse '#define NAME VALUE' lines.

    Example:
        >>> parse_defines("#define __GNUC__ 9\\n#define __x86_64__ 1\\n")
        {'__GNUC__': '9', '__x86_64__': '1'}
    """
    defines = {}
    for line in output.splitlines():
        match = _DEFINE_PATTERN.match(line.strip())
        if match:
            defines[match.group(1)] = match.group(2).strip()
    return defines


def architecture_from_defines(defines: Mapping[str, str]) -> Optional[str]:
    if "__x86_64__" in defines or "__amd64__" in defines:
        return "x64"
    if "__i386__" in defines:
        return "x86"
    if "__aarch64__" in defines or "__arm64__" in defines:
        return "arm64"
    if "__arm__" in defines:
        return "arm"
    return None


def parse_target(output: str) -> Optional[str]:
    for line in output.splitlines():
        if line.startswith("Target:"):
            target = line.split(":", 1)[1].strip()
            return target or None
    return None


def parse_system_includes(output: str) -> List[Path]:
    """
    Parse the system include directories from verbose preprocessor output.

    Reads the lines between '#include <...> search starts here:' and
    'End of search list.'.
    """
    includes = []
    in_include_section = False

    for line in output.splitlines():
        if (
            "#include <...> search starts here:" in line
            or '#include "..." search starts here:' in line
        ):
            in_include_section = True
            continue
        elif "End of search list." in line:
            break
        elif in_include_section:
            path_str = line.strip()
            if path_str and not path_str.startswith("#"):
                # Remove framework annotations (macOS)
                path_str = path_str.split(" (")[0].strip()
                includes.append(Path(path_str))

    return includes


__all__ = [
    "SearchResult",
    "GccMetadata",
    "SwiftcMetadata",
    "MetadataProvider",
    "GccMetadataProvider",
    "SwiftcMetadataProvider",
    "parse_defines",
    "parse_system_includes",
]
