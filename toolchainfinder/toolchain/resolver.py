"""
Toolchain resolution.

ToolchainResolver runs the family searchers for the host OS once, caches the
combined candidate list for its lifetime, and answers:

- default_toolchain(): the first available candidate
- find_toolchain(requirement): the first candidate meeting a requirement

Searchers run in an OS-specific order:
- Windows: Visual C++, MinGW, Cygwin
- macOS: Clang, GCC, Swift
- Other: GCC, Clang, Swift

Each searcher lists its family newest first, so the first match is both the
preferred family for the OS and the newest version of that family.

Usage:
    resolver = ToolchainResolver()
    toolchain = resolver.find_toolchain(ToolchainRequirement.GCC_COMPATIBLE)
    if toolchain:
        print(toolchain.build_script_config())
"""

import logging
import threading
from typing import List, Mapping, Optional, Sequence, Tuple

from ..core.config import DiscoveryConfig
from ..core.platform import PlatformInfo, detect_platform
from .candidates import ToolchainCandidate
from .discovery import (
    CygwinSearcher,
    MinGWSearcher,
    PathCompilerSearcher,
    SwiftcSearcher,
    ToolchainSearcher,
    VisualCppSearcher,
)
from .families import ToolFamily, ToolchainRequirement
from .metadata import GccMetadataProvider, SwiftcMetadataProvider
from .visualstudio import VisualStudioLocator, VswhereLocator

logger = logging.getLogger(__name__)


class ToolchainResolver:
    """
    Discovers toolchains once and answers queries against the cached list.

    Discovery is guarded so that concurrent first calls run the (subprocess
    probing) searchers only once and all see the same list.

    Attributes:
        platform: Host platform
        config: Discovery configuration
    """

    def __init__(
        self,
        platform: Optional[PlatformInfo] = None,
        config: Optional[DiscoveryConfig] = None,
        environ: Optional[Mapping[str, str]] = None,
        searchers: Optional[Sequence[ToolchainSearcher]] = None,
        locator: Optional[VisualStudioLocator] = None,
    ):
        """
        Initialize resolver.

        Args:
            platform: Platform information (default: detected platform)
            config: Discovery configuration (default: built-in defaults)
            environ: Environment used to read the search path (default: os.environ)
            searchers: Explicit searchers, replacing the OS-specific defaults
            locator: Visual Studio locator (default: vswhere)
        """
        self.platform = platform or detect_platform()
        self.config = config or DiscoveryConfig()
        self.environ = environ
        self._locator = locator
        self._searchers = list(searchers) if searchers is not None else None
        self._lock = threading.Lock()
        self._toolchains: Optional[Tuple[ToolchainCandidate, ...]] = None

    def create_searchers(self) -> List[ToolchainSearcher]:
        """
        Create the searchers for the host OS, in priority order.

        Returns:
            List of searchers
        """
        config = self.config
        platform = self.platform

        if platform.is_windows:
            locator = self._locator or VswhereLocator(
                config.vswhere_path, timeout=config.probe_timeout, host_arch=platform.arch
            )
            return [
                VisualCppSearcher(locator, platform=platform),
                MinGWSearcher(config.mingw_root, platform=platform),
                CygwinSearcher(config.cygwin32_root, config.cygwin64_root, platform=platform),
            ]

        gcc_provider = GccMetadataProvider.for_gcc(
            timeout=config.probe_timeout, platform=platform
        )
        clang_provider = GccMetadataProvider.for_clang(
            timeout=config.probe_timeout, platform=platform
        )
        swiftc = SwiftcSearcher(
            config.swift_root,
            SwiftcMetadataProvider(timeout=config.probe_timeout, platform=platform),
            platform=platform,
            environ=self.environ,
        )

        if platform.is_macos:
            return [
                PathCompilerSearcher(
                    ToolFamily.CLANG, clang_provider, True, platform, self.environ
                ),
                PathCompilerSearcher(
                    ToolFamily.GCC, gcc_provider, False, platform, self.environ
                ),
                swiftc,
            ]

        return [
            PathCompilerSearcher(ToolFamily.GCC, gcc_provider, True, platform, self.environ),
            PathCompilerSearcher(
                ToolFamily.CLANG, clang_provider, False, platform, self.environ
            ),
            swiftc,
        ]

    def all_toolchains(self) -> Tuple[ToolchainCandidate, ...]:
        """
        All known toolchains for this platform, including unavailable placeholders.

        Discovery runs on the first call only.

        Returns:
            Candidates in resolution order
        """
        if self._toolchains is not None:
            return self._toolchains

        with self._lock:
            if self._toolchains is None:
                self._toolchains = self._discover()
        return self._toolchains

    def _discover(self) -> Tuple[ToolchainCandidate, ...]:
        searchers = self._searchers if self._searchers is not None else self.create_searchers()
        logger.info(f"Starting toolchain discovery on {self.platform}")

        toolchains: List[ToolchainCandidate] = []
        for searcher in searchers:
            logger.debug(f"Running {searcher!r}")
            try:
                found = searcher.search()
            except OSError as e:
                logger.warning(f"Searcher {searcher!r} failed: {e}")
                found = []
                if searcher.must_find:
                    found = [ToolchainCandidate.unavailable(searcher.family, self.platform)]
            logger.debug(f"{searcher!r} found {len(found)} toolchains")
            toolchains.extend(found)

        available = sum(1 for toolchain in toolchains if toolchain.is_available)
        logger.info(
            f"Detected {available} available toolchains ({len(toolchains)} candidates)"
        )
        return tuple(toolchains)

    def default_toolchain(self) -> Optional[ToolchainCandidate]:
        """
        The toolchain used by default on this machine.

        Returns:
            First available candidate, or None
        """
        for toolchain in self.all_toolchains():
            if toolchain.is_available:
                return toolchain
        return None

    def find_toolchain(
        self, requirement: ToolchainRequirement
    ) -> Optional[ToolchainCandidate]:
        """
        Find a toolchain meeting a requirement.

        Args:
            requirement: Capability the toolchain must have

        Returns:
            First candidate meeting the requirement, or None
        """
        for toolchain in self.all_toolchains():
            if toolchain.meets(requirement):
                return toolchain
        return None


__all__ = ["ToolchainResolver"]
