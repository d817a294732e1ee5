"""
Toolchain discovery module for toolchainfinder.

This module provides functionality for:
- Probing compiler executables for their version
- Discovering GCC, Clang, MinGW, Cygwin, Visual C++ and Swift installations
- Matching toolchains against capability requirements
- Activating a toolchain in the process environment
"""

from toolchainfinder.toolchain.families import (
    ToolFamily,
    ToolchainRequirement,
    VisualStudioVersion,
)
from toolchainfinder.toolchain.metadata import (
    SearchResult,
    GccMetadata,
    SwiftcMetadata,
    MetadataProvider,
    GccMetadataProvider,
    SwiftcMetadataProvider,
)
from toolchainfinder.toolchain.visualstudio import (
    VisualCppInstall,
    VisualStudioInstall,
    VisualStudioLocator,
    VswhereLocator,
)
from toolchainfinder.toolchain.candidates import (
    CandidateKind,
    ToolchainCandidate,
)
from toolchainfinder.toolchain.discovery import (
    sort_latest_first,
    ToolchainSearcher,
    PathCompilerSearcher,
    VisualCppSearcher,
    MinGWSearcher,
    CygwinSearcher,
    SwiftcSearcher,
)
from toolchainfinder.toolchain.environment import (
    ActivationResult,
    EnvironmentActivator,
)
from toolchainfinder.toolchain.resolver import ToolchainResolver

__all__ = [
    # Families
    "ToolFamily",
    "ToolchainRequirement",
    "VisualStudioVersion",
    # Metadata
    "SearchResult",
    "GccMetadata",
    "SwiftcMetadata",
    "MetadataProvider",
    "GccMetadataProvider",
    "SwiftcMetadataProvider",
    # Visual Studio
    "VisualCppInstall",
    "VisualStudioInstall",
    "VisualStudioLocator",
    "VswhereLocator",
    # Candidates
    "CandidateKind",
    "ToolchainCandidate",
    # Discovery
    "sort_latest_first",
    "ToolchainSearcher",
    "PathCompilerSearcher",
    "VisualCppSearcher",
    "MinGWSearcher",
    "CygwinSearcher",
    "SwiftcSearcher",
    # Environment
    "ActivationResult",
    "EnvironmentActivator",
    # Resolver
    "ToolchainResolver",
]
