"""
Visual Studio installation discovery.

Uses vswhere.exe to enumerate Visual Studio installations (including legacy
2012-2015 installs) and locates the Visual C++ compiler inside each one.

Two install layouts are understood:
- VS 2017 and newer: VC/Tools/MSVC/<tools version>/bin/Host<X64|X86>/<target>/cl.exe
- VS 2015 and older: VC/bin/cl.exe (x86) and VC/bin/amd64/cl.exe (x64)

Windows only; on other platforms (or without vswhere) no installs are found.
"""

import json
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..core.config import DEFAULT_VSWHERE
from ..core.exceptions import InvalidVersionError
from ..core.version import VersionNumber

logger = logging.getLogger(__name__)

TARGET_PLATFORMS = ("x86", "x64")

# MSVC bin directory for each host architecture
HOST_DIRS = {"x64": "HostX64", "x86": "HostX86"}

_LEGACY_BIN_DIRS = {
    "x86": Path("VC") / "bin",
    "x64": Path("VC") / "bin" / "amd64",
}


@dataclass
class VisualCppInstall:
    """
    Visual C++ compiler inside a Visual Studio installation.

    Attributes:
        version: Visual C++ tools version
        bin_dirs: Compiler directory per target platform ('x86', 'x64')
        extra_path: Additional directories needed on the search path per target platform
    """

    version: VersionNumber
    bin_dirs: Dict[str, Path]
    extra_path: Dict[str, List[Path]] = field(default_factory=dict)

    @property
    def default_platform(self) -> str:
        if "x64" in self.bin_dirs:
            return "x64"
        return next(iter(self.bin_dirs))

    def _bin_dir(self, platform: Optional[str]) -> Path:
        platform = platform or self.default_platform
        if platform not in self.bin_dirs:
            raise ValueError(
                f"Visual C++ {self.version} does not support target platform '{platform}'"
            )
        return self.bin_dirs[platform]

    def compiler_executable(self, platform: Optional[str] = None) -> Path:
        """Path to cl.exe for the target platform."""
        return self._bin_dir(platform) / "cl.exe"

    def path(self, platform: Optional[str] = None) -> List[Path]:
        """Directories to put on the search path to run cl.exe for the target platform."""
        platform = platform or self.default_platform
        return [self._bin_dir(platform), *self.extra_path.get(platform, [])]


@dataclass
class VisualStudioInstall:
    """A located Visual Studio installation."""

    version: VersionNumber
    install_dir: Path
    visual_cpp: VisualCppInstall
    display_name: str = ""


class VisualStudioLocator:
    """Interface for Visual Studio discovery."""

    def locate_all(self) -> List[VisualStudioInstall]:
        raise NotImplementedError


class VswhereLocator(VisualStudioLocator):
    """
    Locate Visual Studio installations with vswhere.exe.

    Installs without a Visual C++ compiler are skipped.
    """

    def __init__(
        self,
        vswhere_path: Path = DEFAULT_VSWHERE,
        timeout: float = 10.0,
        host_arch: str = "x64",
    ):
        """
        Initialize locator.

        Args:
            vswhere_path: Path to vswhere.exe
            timeout: Seconds to wait for vswhere
            host_arch: Host architecture ('x64' or 'x86')
        """
        self.vswhere_path = vswhere_path
        self.timeout = timeout
        self.host_arch = "x64" if host_arch in ("x64", "arm64") else "x86"

    def locate_all(self) -> List[VisualStudioInstall]:
        """
        Locate all Visual Studio installations with Visual C++.

        Returns:
            Installs in vswhere order (empty if vswhere is missing or fails)
        """
        if not self.vswhere_path.exists():
            logger.debug(f"vswhere not found at {self.vswhere_path}, skipping MSVC detection")
            return []

        entries = self._run_vswhere()
        installs = []

        for entry in entries:
            install = self._create_install(entry)
            if install:
                logger.info(
                    f"Found Visual Studio {install.version} at {install.install_dir}"
                )
                installs.append(install)

        return installs

    def _run_vswhere(self) -> List[dict]:
        try:
            result = subprocess.run(
                [
                    str(self.vswhere_path),
                    "-all",
                    "-legacy",
                    "-prerelease",
                    "-products",
                    "*",
                    "-format",
                    "json",
                ],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.debug("vswhere timed out")
            return []
        except OSError as e:
            logger.debug(f"vswhere failed to start: {e}")
            return []

        if result.returncode != 0:
            logger.debug(f"vswhere returned {result.returncode}")
            return []

        try:
            entries = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as e:
            logger.debug(f"Could not parse vswhere output: {e}")
            return []

        if not isinstance(entries, list):
            logger.debug("Unexpected vswhere output, expected a JSON list")
            return []
        return entries

    def _create_install(self, entry: dict) -> Optional[VisualStudioInstall]:
        install_path = entry.get("installationPath")
        version_str = entry.get("installationVersion")
        if not install_path or not version_str:
            logger.debug(f"Skipping incomplete vswhere entry: {entry}")
            return None

        try:
            version = VersionNumber.parse(version_str)
        except InvalidVersionError:
            logger.debug(f"Skipping Visual Studio with invalid version {version_str!r}")
            return None

        install_dir = Path(install_path)
        if version.major >= 15:
            visual_cpp = self._find_modern_visual_cpp(install_dir)
        else:
            visual_cpp = self._find_legacy_visual_cpp(install_dir, version)

        if visual_cpp is None:
            logger.debug(f"No Visual C++ compiler found in {install_dir}")
            return None

        return VisualStudioInstall(
            version=version,
            install_dir=install_dir,
            visual_cpp=visual_cpp,
            display_name=entry.get("displayName", ""),
        )

    def _find_modern_visual_cpp(self, install_dir: Path) -> Optional[VisualCppInstall]:
        vc_tools = install_dir / "VC" / "Tools" / "MSVC"
        if not vc_tools.is_dir():
            logger.debug(f"VC/Tools/MSVC not found in {install_dir}")
            return None

        tool_versions = []
        for version_dir in vc_tools.iterdir():
            if not version_dir.is_dir():
                continue
            try:
                tool_versions.append((VersionNumber.parse(version_dir.name), version_dir))
            except InvalidVersionError:
                continue

        # Newest tools first
        for tools_version, version_dir in sorted(
            tool_versions, key=lambda item: item[0], reverse=True
        ):
            host_dir = version_dir / "bin" / HOST_DIRS[self.host_arch]
            bin_dirs = {}
            extra_path = {}
            for target in TARGET_PLATFORMS:
                bin_dir = host_dir / target
                if (bin_dir / "cl.exe").is_file():
                    bin_dirs[target] = bin_dir
                    if target != self.host_arch:
                        # Cross compilers load DLLs from the host directory
                        extra_path[target] = [host_dir / self.host_arch]
            if bin_dirs:
                return VisualCppInstall(tools_version, bin_dirs, extra_path)

        return None

    def _find_legacy_visual_cpp(
        self, install_dir: Path, version: VersionNumber
    ) -> Optional[VisualCppInstall]:
        common_ide = install_dir / "Common7" / "IDE"
        bin_dirs = {}
        extra_path = {}
        for target, relative in _LEGACY_BIN_DIRS.items():
            bin_dir = install_dir / relative
            if (bin_dir / "cl.exe").is_file():
                bin_dirs[target] = bin_dir
                extra_path[target] = [common_ide]

        if not bin_dirs:
            return None
        return VisualCppInstall(version, bin_dirs, extra_path)


__all__ = [
    "VisualCppInstall",
    "VisualStudioInstall",
    "VisualStudioLocator",
    "VswhereLocator",
]
