"""
Toolchain discovery strategies.

One searcher per toolchain family. Each searcher returns an ordered list of
candidates, newest version first (ties keep discovery order):

- PathCompilerSearcher: GCC or Clang executables in the search path, probed
  one by one
- VisualCppSearcher: Visual Studio installs from a VisualStudioLocator,
  restricted to the testable generations
- MinGWSearcher: MinGW at its fixed installation directory (no probe)
- CygwinSearcher: 32-bit and dual-architecture Cygwin at fixed directories (no probe)
- SwiftcSearcher: versioned installs under a Swift root plus swiftc in the search path

A searcher created with must_find=True yields the unavailable placeholder for
its family when nothing usable is found, so callers can always ask about
every family.
"""

import logging
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from ..core.platform import PlatformInfo, detect_platform
from ..core.version import VersionNumber
from .candidates import ToolchainCandidate
from .families import ToolFamily, VisualStudioVersion
from .metadata import GccMetadataProvider, MetadataProvider, SwiftcMetadataProvider
from .visualstudio import VisualStudioLocator

logger = logging.getLogger(__name__)


def sort_latest_first(candidates: Sequence[ToolchainCandidate]) -> List[ToolchainCandidate]:
    """
    Sort candidates by descending version.

    The sort is stable, so candidates with equal versions keep discovery order.
    """
    return sorted(candidates, key=lambda candidate: candidate.version, reverse=True)


class ToolchainSearcher:
    """
    Base class for family searchers.

    Attributes:
        family: Family this searcher reports
        must_find: Whether to yield the unavailable placeholder when nothing is found
        platform: Platform information
        environ: Environment used to read the search path (default: os.environ)
    """

    family: ToolFamily

    def __init__(
        self,
        must_find: bool = True,
        platform: Optional[PlatformInfo] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.must_find = must_find
        self.platform = platform or detect_platform()
        self.environ = environ

    def search(self) -> List[ToolchainCandidate]:
        """
        Search for this family's toolchains.

        Returns:
            Candidates, newest first
        """
        found = self._search()
        if not found:
            logger.debug(f"No {self.family.display_name} toolchain found")
            if self.must_find:
                return [ToolchainCandidate.unavailable(self.family, self.platform)]
            return []
        return sort_latest_first(found)

    def _search(self) -> List[ToolchainCandidate]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.family.name}, must_find={self.must_find})"


class PathCompilerSearcher(ToolchainSearcher):
    """
    Search the executable search path for GCC or Clang.

    Every executable with the compiler's name is probed; the ones that fail the
    probe are dropped. A kept compiler that is not the first executable of that
    name in the search path records its directory as a path entry, since the
    ambient search path would resolve to a different one.
    """

    def __init__(
        self,
        family: ToolFamily,
        provider: Optional[GccMetadataProvider] = None,
        must_find: bool = True,
        platform: Optional[PlatformInfo] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        super().__init__(must_find=must_find, platform=platform, environ=environ)
        if family is ToolFamily.GCC:
            self.executable = "g++"
            default_provider = GccMetadataProvider.for_gcc
        elif family is ToolFamily.CLANG:
            self.executable = "clang"
            default_provider = GccMetadataProvider.for_clang
        else:
            raise ValueError(f"PathCompilerSearcher supports GCC and Clang, not {family}")
        self.family = family
        self.provider = provider or default_provider(platform=self.platform)

    def _search(self) -> List[ToolchainCandidate]:
        candidates = self.platform.find_all_in_path(self.executable, self.environ)
        if not candidates:
            return []

        first_in_path = candidates[0]
        toolchains = []

        for candidate in candidates:
            result = self.provider.probe(candidate)
            if not result.available:
                logger.debug(f"Ignoring {candidate}: {result.diagnostic}")
                continue

            path_entries = ()
            if candidate != first_in_path:
                # Not the first in the path, needs the path variable updated
                path_entries = (candidate.parent,)

            version = result.component.version
            if self.family is ToolFamily.GCC:
                toolchain = ToolchainCandidate.gcc(version, path_entries, self.platform)
            else:
                toolchain = ToolchainCandidate.clang(version, path_entries, self.platform)

            logger.info(f"Found {toolchain.display_name} in PATH: {candidate}")
            toolchains.append(toolchain)

        return toolchains


class VisualCppSearcher(ToolchainSearcher):
    """Turn located Visual Studio installs into Visual C++ candidates."""

    family = ToolFamily.VISUAL_CPP

    def __init__(
        self,
        locator: VisualStudioLocator,
        must_find: bool = True,
        platform: Optional[PlatformInfo] = None,
    ):
        super().__init__(must_find=must_find, platform=platform)
        self.locator = locator

    def _search(self) -> List[ToolchainCandidate]:
        toolchains = []

        for install in self.locator.locate_all():
            generation = VisualStudioVersion.for_version(install.version)
            if generation is None:
                logger.debug(
                    f"Skipping Visual Studio {install.version} at {install.install_dir}: "
                    f"not a testable version"
                )
                continue

            toolchain = ToolchainCandidate.visual_cpp(
                generation, install, platform=self.platform
            )
            logger.info(f"Found {toolchain.display_name} at {install.install_dir}")
            toolchains.append(toolchain)

        return toolchains


class MinGWSearcher(ToolchainSearcher):
    """Look for MinGW at its installation root; presence of bin/g++ is enough."""

    family = ToolFamily.MINGW_GCC

    def __init__(
        self,
        root: Path = Path("C:/MinGW"),
        must_find: bool = True,
        platform: Optional[PlatformInfo] = None,
    ):
        super().__init__(must_find=must_find, platform=platform)
        self.root = root

    def _search(self) -> List[ToolchainCandidate]:
        compiler = self.root / "bin" / self.platform.executable_name("g++")
        if not compiler.is_file():
            logger.debug(f"MinGW compiler not found: {compiler}")
            return []

        logger.info(f"Found MinGW at {self.root}")
        return [
            ToolchainCandidate.windows_gcc(
                ToolFamily.MINGW_GCC,
                VersionNumber.UNKNOWN,
                (compiler.parent,),
                self.platform,
            )
        ]


class CygwinSearcher(ToolchainSearcher):
    """
    Look for Cygwin at its installation roots.

    Both the 64-bit and the 32-bit g++ present gives a dual-architecture
    candidate. The 64-bit install alone is not usable. The 32-bit install
    alone gives a plain Cygwin GCC candidate.
    """

    family = ToolFamily.CYGWIN_GCC

    def __init__(
        self,
        root32: Path = Path("C:/cygwin"),
        root64: Path = Path("C:/cygwin64"),
        must_find: bool = True,
        platform: Optional[PlatformInfo] = None,
    ):
        super().__init__(must_find=must_find, platform=platform)
        self.root32 = root32
        self.root64 = root64

    def _search(self) -> List[ToolchainCandidate]:
        compiler_name = self.platform.executable_name("g++")
        compiler32 = self.root32 / "bin" / compiler_name
        compiler64 = self.root64 / "bin" / compiler_name

        if compiler64.is_file():
            if compiler32.is_file():
                logger.info(f"Found Cygwin at {self.root32} and {self.root64}")
                return [
                    ToolchainCandidate.cygwin_gcc_64(
                        compiler32.parent, compiler64.parent, platform=self.platform
                    )
                ]
            logger.debug(f"Ignoring 64-bit Cygwin at {self.root64}: no 32-bit install")
            return []

        if compiler32.is_file():
            logger.info(f"Found Cygwin at {self.root32}")
            return [
                ToolchainCandidate.windows_gcc(
                    ToolFamily.CYGWIN_GCC,
                    VersionNumber.UNKNOWN,
                    (compiler32.parent,),
                    self.platform,
                )
            ]

        logger.debug(f"Cygwin compiler not found in {self.root32} or {self.root64}")
        return []


class SwiftcSearcher(ToolchainSearcher):
    """
    Look for Swift compilers.

    Two sources are pooled: versioned installs under the Swift root (each with
    usr/bin/swiftc, the 'latest' entry skipped) and swiftc in the search path.
    """

    family = ToolFamily.SWIFTC

    def __init__(
        self,
        root: Path = Path("/opt/swift"),
        provider: Optional[MetadataProvider] = None,
        must_find: bool = True,
        platform: Optional[PlatformInfo] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        super().__init__(must_find=must_find, platform=platform, environ=environ)
        self.root = root
        self.provider = provider or SwiftcMetadataProvider(platform=self.platform)

    def _installed_compilers(self) -> List[Path]:
        if not self.root.is_dir():
            logger.debug(f"Swift root does not exist: {self.root}")
            return []

        compilers = []
        for install in sorted(self.root.iterdir()):
            if not install.is_dir() or install.name == "latest":
                continue
            swiftc = install / "usr" / "bin" / self.platform.executable_name("swiftc")
            if swiftc.is_file():
                compilers.append(swiftc)
        return compilers

    def _search(self) -> List[ToolchainCandidate]:
        toolchains = []
        probed = set()

        executables = self._installed_compilers() + self.platform.find_all_in_path(
            "swiftc", self.environ
        )

        for swiftc in executables:
            key = swiftc.resolve()
            if key in probed:
                continue
            probed.add(key)

            result = self.provider.probe(swiftc)
            if not result.available:
                logger.debug(f"Ignoring {swiftc}: {result.diagnostic}")
                continue

            bin_dir = swiftc.parent
            toolchain = ToolchainCandidate.swiftc(
                bin_dir,
                result.component.version,
                (bin_dir, Path("/usr/bin")),
                self.platform,
            )
            logger.info(f"Found {toolchain.display_name} at {swiftc}")
            toolchains.append(toolchain)

        return toolchains


__all__ = [
    "sort_latest_first",
    "ToolchainSearcher",
    "PathCompilerSearcher",
    "VisualCppSearcher",
    "MinGWSearcher",
    "CygwinSearcher",
    "SwiftcSearcher",
]
