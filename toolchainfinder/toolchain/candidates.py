"""
Toolchain candidates.

A ToolchainCandidate describes one discovered (or searched-for but missing)
compiler installation. Candidates are immutable and tagged with a
CandidateKind that selects the family-specific behaviour:

- GCC: a GCC found on the search path
- CLANG: a Clang found on the search path
- WINDOWS_GCC: MinGW or 32-bit Cygwin GCC found at a fixed location
- CYGWIN_GCC_64: dual-architecture Cygwin (32-bit and 64-bit g++ installed)
- VISUAL_CPP: Visual C++ from a located Visual Studio install
- SWIFTC: a Swift compiler
- UNAVAILABLE: placeholder for a family that was searched for and not found

The capability layering (a Windows GCC is a GCC, a GCC is GCC-compatible) is
expressed by the is_gcc_compatible / is_gcc / is_windows_gcc predicates, and
requirement matching is done by one matcher function per kind.

Usage:
    candidate = ToolchainCandidate.gcc(VersionNumber.parse("9.3.0"))
    if candidate.meets(ToolchainRequirement.GCC_COMPATIBLE):
        print(candidate.build_script_config())
"""

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.exceptions import ToolchainError, ToolchainUnavailableError
from ..core.platform import PlatformInfo, detect_platform
from ..core.version import VersionNumber
from .families import ToolFamily, ToolchainRequirement, VisualStudioVersion
from .visualstudio import VisualStudioInstall

logger = logging.getLogger(__name__)

_TRAILING_VERSION = re.compile(r"\s+\d+(\.\d+)*(\s+\(\d+(\.\d+)*\))?$")

R = ToolchainRequirement


class CandidateKind(Enum):
    """Shape of a toolchain candidate."""

    GCC = "gcc"
    CLANG = "clang"
    WINDOWS_GCC = "windows-gcc"
    CYGWIN_GCC_64 = "cygwin-gcc-64"
    VISUAL_CPP = "visual-cpp"
    SWIFTC = "swiftc"
    UNAVAILABLE = "unavailable"


_GCC_KINDS = {CandidateKind.GCC, CandidateKind.WINDOWS_GCC, CandidateKind.CYGWIN_GCC_64}
_WINDOWS_GCC_KINDS = {CandidateKind.WINDOWS_GCC, CandidateKind.CYGWIN_GCC_64}

_IMPLEMENTATION_CLASSES = {
    CandidateKind.GCC: ("Gcc", "GccCompilerPlugin", "GNU GCC"),
    CandidateKind.WINDOWS_GCC: ("Gcc", "GccCompilerPlugin", "GNU GCC"),
    CandidateKind.CYGWIN_GCC_64: ("Gcc", "GccCompilerPlugin", "GNU GCC"),
    CandidateKind.CLANG: ("Clang", "ClangCompilerPlugin", "Clang"),
    CandidateKind.VISUAL_CPP: ("VisualCpp", "MicrosoftVisualCppCompilerPlugin", "Visual Studio"),
    CandidateKind.SWIFTC: ("Swiftc", "SwiftCompilerPlugin", "Swiftc"),
}


@dataclass(frozen=True)
class ToolchainCandidate:
    """
    A discovered toolchain (or the placeholder for a missing one).

    Attributes:
        kind: Candidate shape
        family: Compiler product line
        version: Compiler version (UNKNOWN for fixed-location installs)
        path_entries: Directories to prepend to the search path to make this
            toolchain resolvable (empty when the ambient search path already does)
        install_dir: Visual Studio installation directory
        compiler: Visual C++ compiler executable
        bin_dir: Swift compiler directory
        cygwin32_path: 32-bit Cygwin bin directory (dual-architecture Cygwin)
        cygwin64_path: 64-bit Cygwin bin directory (dual-architecture Cygwin)
        visual_studio: Visual Studio generation (Visual C++)
        platform: Host platform the candidate was discovered on
    """

    kind: CandidateKind
    family: ToolFamily
    version: VersionNumber = VersionNumber.UNKNOWN
    path_entries: Tuple[Path, ...] = ()
    install_dir: Optional[Path] = None
    compiler: Optional[Path] = None
    bin_dir: Optional[Path] = None
    cygwin32_path: Optional[Path] = None
    cygwin64_path: Optional[Path] = None
    visual_studio: Optional[VisualStudioVersion] = None
    platform: PlatformInfo = field(
        default_factory=detect_platform, compare=False, repr=False
    )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def gcc(
        cls,
        version: VersionNumber,
        path_entries: Sequence[Path] = (),
        platform: Optional[PlatformInfo] = None,
    ) -> "ToolchainCandidate":
        return cls(
            CandidateKind.GCC,
            ToolFamily.GCC,
            version,
            tuple(path_entries),
            platform=platform or detect_platform(),
        )

    @classmethod
    def clang(
        cls,
        version: VersionNumber,
        path_entries: Sequence[Path] = (),
        platform: Optional[PlatformInfo] = None,
    ) -> "ToolchainCandidate":
        return cls(
            CandidateKind.CLANG,
            ToolFamily.CLANG,
            version,
            tuple(path_entries),
            platform=platform or detect_platform(),
        )

    @classmethod
    def windows_gcc(
        cls,
        family: ToolFamily,
        version: VersionNumber = VersionNumber.UNKNOWN,
        path_entries: Sequence[Path] = (),
        platform: Optional[PlatformInfo] = None,
    ) -> "ToolchainCandidate":
        if family not in (ToolFamily.MINGW_GCC, ToolFamily.CYGWIN_GCC):
            raise ValueError(f"Not a Windows GCC family: {family}")
        return cls(
            CandidateKind.WINDOWS_GCC,
            family,
            version,
            tuple(path_entries),
            platform=platform or detect_platform(),
        )

    @classmethod
    def cygwin_gcc_64(
        cls,
        cygwin32_path: Path,
        cygwin64_path: Path,
        version: VersionNumber = VersionNumber.UNKNOWN,
        platform: Optional[PlatformInfo] = None,
    ) -> "ToolchainCandidate":
        return cls(
            CandidateKind.CYGWIN_GCC_64,
            ToolFamily.CYGWIN_GCC_64,
            version,
            cygwin32_path=cygwin32_path,
            cygwin64_path=cygwin64_path,
            platform=platform or detect_platform(),
        )

    @classmethod
    def visual_cpp(
        cls,
        generation: VisualStudioVersion,
        install: VisualStudioInstall,
        target_platform: Optional[str] = None,
        platform: Optional[PlatformInfo] = None,
    ) -> "ToolchainCandidate":
        visual_cpp = install.visual_cpp
        return cls(
            CandidateKind.VISUAL_CPP,
            ToolFamily.VISUAL_CPP,
            install.version,
            tuple(visual_cpp.path(target_platform)),
            install_dir=install.install_dir,
            compiler=visual_cpp.compiler_executable(target_platform),
            visual_studio=generation,
            platform=platform or detect_platform(),
        )

    @classmethod
    def swiftc(
        cls,
        bin_dir: Path,
        version: VersionNumber,
        path_entries: Sequence[Path] = (),
        platform: Optional[PlatformInfo] = None,
    ) -> "ToolchainCandidate":
        return cls(
            CandidateKind.SWIFTC,
            ToolFamily.SWIFTC,
            version,
            tuple(path_entries),
            bin_dir=bin_dir,
            platform=platform or detect_platform(),
        )

    @classmethod
    def unavailable(
        cls, family: ToolFamily, platform: Optional[PlatformInfo] = None
    ) -> "ToolchainCandidate":
        return cls(
            CandidateKind.UNAVAILABLE,
            family,
            platform=platform or detect_platform(),
        )

    # ------------------------------------------------------------------
    # Capability predicates
    # ------------------------------------------------------------------

    @property
    def is_available(self) -> bool:
        return self.kind is not CandidateKind.UNAVAILABLE

    @property
    def is_gcc_compatible(self) -> bool:
        return self.kind in _GCC_KINDS or self.kind is CandidateKind.CLANG

    @property
    def is_gcc(self) -> bool:
        return self.kind in _GCC_KINDS

    @property
    def is_windows_gcc(self) -> bool:
        return self.kind in _WINDOWS_GCC_KINDS

    @property
    def is_visual_cpp(self) -> bool:
        return self.kind is CandidateKind.VISUAL_CPP

    def meets(self, requirement: Any) -> bool:
        """
        Check whether this candidate satisfies a requirement.

        Never raises: anything that is not a requirement this candidate's
        family knows about yields False.
        """
        if not isinstance(requirement, ToolchainRequirement):
            return False
        return _MATCHERS[self.kind](self, requirement)

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    @property
    def display_name(self) -> str:
        """Family label plus version (version omitted when unknown)."""
        if self.kind is CandidateKind.VISUAL_CPP and self.visual_studio is not None:
            generation = self.visual_studio
            return f"{self.family.display_name} {generation.year} ({generation.version})"
        if self.version.is_unknown:
            return self.family.display_name
        return f"{self.family.display_name} {self.version}"

    @property
    def type_display_name(self) -> str:
        """Display name without the trailing version."""
        return _TRAILING_VERSION.sub("", self.display_name)

    @property
    def toolchain_id(self) -> str:
        """Short identifier used to name generated configuration blocks."""
        if self.kind is CandidateKind.GCC:
            return "gcc"
        if self.kind is CandidateKind.VISUAL_CPP:
            return "visualCpp"
        return re.sub(r"\W", "", self.display_name)

    @property
    def instance_display_name(self) -> str:
        if not self.is_available:
            return self.display_name
        return f"Tool chain '{self.toolchain_id}' ({_IMPLEMENTATION_CLASSES[self.kind][2]})"

    @property
    def implementation_class(self) -> Optional[str]:
        entry = _IMPLEMENTATION_CLASSES.get(self.kind)
        return entry[0] if entry else None

    @property
    def plugin_class(self) -> Optional[str]:
        entry = _IMPLEMENTATION_CLASSES.get(self.kind)
        return entry[1] if entry else None

    @property
    def unit_test_platform(self) -> Optional[str]:
        """
        Coarse platform tag for unit-test classification.

        One of 'osx', 'linux', 'mingw', 'cygwin', 'vs2013', 'vs2015', 'UNKNOWN',
        or None where classification does not apply (Swift, unavailable).
        """
        if self.kind in (CandidateKind.SWIFTC, CandidateKind.UNAVAILABLE):
            return None
        if self.kind is CandidateKind.VISUAL_CPP:
            return {12: "vs2013", 14: "vs2015"}.get(self.version.major, "UNKNOWN")
        if self.is_windows_gcc:
            if self.family is ToolFamily.MINGW_GCC:
                return "mingw"
            if self.family is ToolFamily.CYGWIN_GCC:
                return "cygwin"
            return "UNKNOWN"
        if self.platform.is_macos:
            return "osx"
        if self.platform.is_linux:
            return "linux"
        return "UNKNOWN"

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def _find(self, tool: str) -> Optional[Path]:
        if not self.is_gcc_compatible:
            raise ToolchainError(f"{self.display_name} is not GCC-compatible")
        first_dir = self.path_entries[0] if self.path_entries else self.cygwin64_path
        if first_dir is None:
            return self.platform.find_in_path(tool)
        return first_dir / self.platform.executable_name(tool)

    @property
    def c_compiler(self) -> Optional[Path]:
        return self._find("clang" if self.kind is CandidateKind.CLANG else "gcc")

    @property
    def cpp_compiler(self) -> Optional[Path]:
        if self.kind is CandidateKind.VISUAL_CPP:
            return self.compiler
        return self._find("clang++" if self.kind is CandidateKind.CLANG else "g++")

    @property
    def linker(self) -> Optional[Path]:
        return self.c_compiler

    @property
    def static_lib_archiver(self) -> Optional[Path]:
        return self._find("ar")

    def tool(self, name: str) -> Path:
        """Resolve a Swift tool inside the compiler's bin directory."""
        if self.bin_dir is None:
            raise ToolchainError(f"{self.display_name} has no tool directory")
        return self.bin_dir / self.platform.executable_name(name)

    # ------------------------------------------------------------------
    # Output files
    # ------------------------------------------------------------------

    def object_file(self, path: Any) -> Path:
        suffix = ".obj" if self.is_visual_cpp else self.platform.object_file_suffix
        return Path(str(path) + suffix)

    def executable(self, path: Any) -> Path:
        return Path(self.platform.executable_name(str(path)))

    def shared_library(self, path: Any) -> Path:
        return Path(self.platform.shared_library_name(str(path)))

    def static_library(self, path: Any) -> Path:
        return Path(self.platform.static_library_name(str(path)))

    # ------------------------------------------------------------------
    # Generated configuration and environment
    # ------------------------------------------------------------------

    def build_script_config(self) -> str:
        """
        Build-script configuration block declaring this toolchain.

        Raises:
            ToolchainUnavailableError: For the unavailable placeholder
        """
        if not self.is_available:
            raise ToolchainUnavailableError(self.display_name)

        toolchain_id = self.toolchain_id
        implementation = self.implementation_class

        if self.kind is CandidateKind.CYGWIN_GCC_64:
            config = ""
            for suffix, path, target in (
                ("32", self.cygwin32_path, "windows_x86"),
                ("64", self.cygwin64_path, "windows_x86_64"),
            ):
                config += f"{toolchain_id}_{suffix}({implementation}) {{\n"
                config += f"path file('{_uri(path)}')\n"
                config += f"targets = ['{target}']\n"
                config += "}\n"
            return config

        config = f"{toolchain_id}({implementation})\n"
        if self.kind is CandidateKind.VISUAL_CPP:
            if self.install_dir is not None:
                config += f"{toolchain_id}.installDir = file('{_uri(self.install_dir)}')\n"
            return config

        for path_entry in self.path_entries:
            config += f"{toolchain_id}.path file('{_uri(path_entry)}')\n"
        return config

    def runtime_env(self, environ: Optional[Mapping[str, str]] = None) -> List[str]:
        """
        Environment assignments needed to run a binary built by this toolchain.

        Toolchains link against the standard system locations, so this is empty
        except for Windows GCC and Swift, which need their directories on the
        search path.

        Args:
            environ: Environment mapping (default: os.environ)

        Returns:
            List of 'NAME=value' strings
        """
        if self.kind not in (CandidateKind.WINDOWS_GCC, CandidateKind.SWIFTC):
            return []
        if not self.path_entries:
            return []

        if environ is None:
            environ = os.environ
        path_var = self.platform.path_var
        separator = self.platform.path_separator
        prefix = separator.join(str(entry) for entry in self.path_entries)
        return [f"{path_var}={prefix}{separator}{environ.get(path_var, '')}"]

    def to_dict(self) -> Dict[str, Any]:
        """Dictionary representation for JSON output."""
        return {
            "id": self.toolchain_id,
            "name": self.display_name,
            "family": self.family.name,
            "kind": self.kind.value,
            "version": None if self.version.is_unknown else str(self.version),
            "available": self.is_available,
            "path_entries": [str(entry) for entry in self.path_entries],
            "install_dir": str(self.install_dir) if self.install_dir else None,
        }

    def __str__(self) -> str:
        return self.display_name


def _uri(path: Optional[Path]) -> str:
    if path is None:
        raise ToolchainError("Cannot build a URI for a missing path")
    return Path(path).absolute().as_uri()


# ----------------------------------------------------------------------
# Requirement matchers, one per candidate kind
# ----------------------------------------------------------------------


def _meets_nothing(candidate: ToolchainCandidate, requirement: ToolchainRequirement) -> bool:
    return False


def _gcc_meets(candidate: ToolchainCandidate, requirement: ToolchainRequirement) -> bool:
    return requirement in (
        R.GCC,
        R.GCC_COMPATIBLE,
        R.AVAILABLE,
        R.SUPPORTS_32,
        R.SUPPORTS_32_AND_64,
    )


def _windows_gcc_meets(
    candidate: ToolchainCandidate, requirement: ToolchainRequirement
) -> bool:
    if requirement in (R.SUPPORTS_32, R.WINDOWS_GCC):
        return True
    if requirement is R.SUPPORTS_32_AND_64:
        return candidate.family is ToolFamily.CYGWIN_GCC_64
    return _gcc_meets(candidate, requirement)


def _clang_meets(candidate: ToolchainCandidate, requirement: ToolchainRequirement) -> bool:
    if requirement in (R.AVAILABLE, R.CLANG, R.GCC_COMPATIBLE):
        return True
    if requirement in (R.SUPPORTS_32, R.SUPPORTS_32_AND_64):
        # Apple Clang 10 dropped 32-bit targets
        return (not candidate.platform.is_macos) or candidate.version < VersionNumber.parse(
            "10.0.0"
        )
    return False


_VISUAL_CPP_EXACT = {
    R.VISUALCPP_2013: VisualStudioVersion.VISUALSTUDIO_2013,
    R.VISUALCPP_2015: VisualStudioVersion.VISUALSTUDIO_2015,
    R.VISUALCPP_2017: VisualStudioVersion.VISUALSTUDIO_2017,
    R.VISUALCPP_2019: VisualStudioVersion.VISUALSTUDIO_2019,
    R.VISUALCPP_2022: VisualStudioVersion.VISUALSTUDIO_2022,
}

_VISUAL_CPP_OR_NEWER = {
    R.VISUALCPP_2012_OR_NEWER: VisualStudioVersion.VISUALSTUDIO_2012,
    R.VISUALCPP_2013_OR_NEWER: VisualStudioVersion.VISUALSTUDIO_2013,
    R.VISUALCPP_2015_OR_NEWER: VisualStudioVersion.VISUALSTUDIO_2015,
    R.VISUALCPP_2017_OR_NEWER: VisualStudioVersion.VISUALSTUDIO_2017,
    R.VISUALCPP_2019_OR_NEWER: VisualStudioVersion.VISUALSTUDIO_2019,
    R.VISUALCPP_2022_OR_NEWER: VisualStudioVersion.VISUALSTUDIO_2022,
}


def _visual_cpp_meets(
    candidate: ToolchainCandidate, requirement: ToolchainRequirement
) -> bool:
    if requirement in (R.AVAILABLE, R.VISUALCPP, R.SUPPORTS_32, R.SUPPORTS_32_AND_64):
        return True
    if requirement in _VISUAL_CPP_OR_NEWER:
        return candidate.version >= _VISUAL_CPP_OR_NEWER[requirement].version
    if requirement in _VISUAL_CPP_EXACT:
        # An install of the generation matches, whatever its minor/build numbers
        generation = VisualStudioVersion.for_version(candidate.version)
        return generation is _VISUAL_CPP_EXACT[requirement]
    return False


def _swiftc_meets(candidate: ToolchainCandidate, requirement: ToolchainRequirement) -> bool:
    if requirement is R.SWIFTC:
        return True
    if requirement is R.SWIFTC_3:
        return candidate.version.major == 3
    if requirement is R.SWIFTC_4:
        return candidate.version.major == 4
    return False


_MATCHERS: Dict[
    CandidateKind, Callable[[ToolchainCandidate, ToolchainRequirement], bool]
] = {
    CandidateKind.GCC: _gcc_meets,
    CandidateKind.WINDOWS_GCC: _windows_gcc_meets,
    CandidateKind.CYGWIN_GCC_64: _windows_gcc_meets,
    CandidateKind.CLANG: _clang_meets,
    CandidateKind.VISUAL_CPP: _visual_cpp_meets,
    CandidateKind.SWIFTC: _swiftc_meets,
    CandidateKind.UNAVAILABLE: _meets_nothing,
}


__all__ = ["CandidateKind", "ToolchainCandidate"]
