"""
Toolchain families, capability requirements and Visual Studio generations.
"""

from enum import Enum
from typing import Optional

from ..core.version import VersionNumber


class ToolFamily(Enum):
    """Compiler product lines. The value is the human-readable label."""

    GCC = "gcc"
    CLANG = "clang"
    VISUAL_CPP = "visual c++"
    MINGW_GCC = "mingw"
    CYGWIN_GCC = "gcc cygwin"
    CYGWIN_GCC_64 = "gcc cygwin64"
    SWIFTC = "swiftc"

    @property
    def display_name(self) -> str:
        return self.value


class ToolchainRequirement(Enum):
    """Capability tags a caller uses to select a toolchain."""

    AVAILABLE = "available"
    GCC = "gcc"
    GCC_COMPATIBLE = "gcc-compatible"
    CLANG = "clang"
    WINDOWS_GCC = "windows-gcc"
    VISUALCPP = "visualcpp"
    VISUALCPP_2012_OR_NEWER = "visualcpp-2012+"
    VISUALCPP_2013 = "visualcpp-2013"
    VISUALCPP_2013_OR_NEWER = "visualcpp-2013+"
    VISUALCPP_2015 = "visualcpp-2015"
    VISUALCPP_2015_OR_NEWER = "visualcpp-2015+"
    VISUALCPP_2017 = "visualcpp-2017"
    VISUALCPP_2017_OR_NEWER = "visualcpp-2017+"
    VISUALCPP_2019 = "visualcpp-2019"
    VISUALCPP_2019_OR_NEWER = "visualcpp-2019+"
    VISUALCPP_2022 = "visualcpp-2022"
    VISUALCPP_2022_OR_NEWER = "visualcpp-2022+"
    SUPPORTS_32 = "supports-32"
    SUPPORTS_32_AND_64 = "supports-32-and-64"
    SWIFTC = "swiftc"
    SWIFTC_3 = "swiftc-3"
    SWIFTC_4 = "swiftc-4"

    @classmethod
    def from_string(cls, text: str) -> "ToolchainRequirement":
        """
        Look up a requirement by value ('visualcpp-2015+') or name ('VISUALCPP_2015_OR_NEWER').

        Raises:
            ValueError: If no requirement matches
        """
        normalized = text.strip()
        for requirement in cls:
            if normalized.lower() == requirement.value or normalized.upper() == requirement.name:
                return requirement
        valid = ", ".join(r.value for r in cls)
        raise ValueError(f"Unknown requirement '{text}'. Valid requirements: {valid}")


class VisualStudioVersion(Enum):
    """Testable Visual Studio generations: (year, Visual C++ version)."""

    VISUALSTUDIO_2012 = ("2012", 11)
    VISUALSTUDIO_2013 = ("2013", 12)
    VISUALSTUDIO_2015 = ("2015", 14)
    VISUALSTUDIO_2017 = ("2017", 15)
    VISUALSTUDIO_2019 = ("2019", 16)
    VISUALSTUDIO_2022 = ("2022", 17)

    def __init__(self, year: str, major: int):
        self.year = year
        self.version = VersionNumber.version(major)

    @classmethod
    def for_version(cls, version: VersionNumber) -> Optional["VisualStudioVersion"]:
        """Find the generation with the same major version, if any."""
        for generation in cls:
            if generation.version.major == version.major:
                return generation
        return None


__all__ = ["ToolFamily", "ToolchainRequirement", "VisualStudioVersion"]
