"""
Tests for toolchain candidates.

Tests cover:
- Naming (display name, id, implementation class)
- Requirement matching per candidate kind
- Tool and output file resolution
- Generated build-script configuration
- Runtime environment assignments
"""

from pathlib import Path

import pytest

from toolchainfinder.core.exceptions import ToolchainError, ToolchainUnavailableError
from toolchainfinder.core.platform import PlatformInfo
from toolchainfinder.core.version import VersionNumber
from toolchainfinder.toolchain.candidates import CandidateKind, ToolchainCandidate
from toolchainfinder.toolchain.families import (
    ToolFamily,
    ToolchainRequirement as R,
    VisualStudioVersion,
)
from toolchainfinder.toolchain.visualstudio import VisualCppInstall, VisualStudioInstall

V = VersionNumber.parse


def visual_studio_install(version: str, install_dir: Path = Path("C:/VS")) -> VisualStudioInstall:
    visual_cpp = VisualCppInstall(
        V(version),
        {"x86": install_dir / "VC" / "bin", "x64": install_dir / "VC" / "bin" / "amd64"},
        {
            "x86": [install_dir / "Common7" / "IDE"],
            "x64": [install_dir / "Common7" / "IDE"],
        },
    )
    return VisualStudioInstall(V(version), install_dir, visual_cpp)


@pytest.fixture
def gcc(platform_linux):
    return ToolchainCandidate.gcc(V("9.3.0"), platform=platform_linux)


@pytest.fixture
def mingw(platform_windows):
    return ToolchainCandidate.windows_gcc(
        ToolFamily.MINGW_GCC, path_entries=[Path("C:/MinGW/bin")], platform=platform_windows
    )


@pytest.fixture
def cygwin64(platform_windows):
    return ToolchainCandidate.cygwin_gcc_64(
        Path("C:/cygwin/bin"), Path("C:/cygwin64/bin"), platform=platform_windows
    )


@pytest.fixture
def vs2015(platform_windows):
    return ToolchainCandidate.visual_cpp(
        VisualStudioVersion.VISUALSTUDIO_2015,
        visual_studio_install("14.0"),
        platform=platform_windows,
    )


@pytest.fixture
def swift4(platform_linux):
    bin_dir = Path("/opt/swift/4.2.1/usr/bin")
    return ToolchainCandidate.swiftc(
        bin_dir, V("4.2.1"), (bin_dir, Path("/usr/bin")), platform=platform_linux
    )


class TestNaming:
    """Test candidate names."""

    def test_gcc(self, gcc):
        assert gcc.display_name == "gcc 9.3.0"
        assert gcc.type_display_name == "gcc"
        assert gcc.toolchain_id == "gcc"
        assert gcc.implementation_class == "Gcc"
        assert gcc.plugin_class == "GccCompilerPlugin"
        assert gcc.instance_display_name == "Tool chain 'gcc' (GNU GCC)"
        assert str(gcc) == "gcc 9.3.0"

    def test_clang(self, platform_linux):
        clang = ToolchainCandidate.clang(V("15.0.7"), platform=platform_linux)
        assert clang.display_name == "clang 15.0.7"
        assert clang.toolchain_id == "clang1507"
        assert clang.implementation_class == "Clang"

    def test_unknown_version_omitted(self, mingw):
        assert mingw.display_name == "mingw"
        assert mingw.toolchain_id == "mingw"

    def test_cygwin64(self, cygwin64):
        assert cygwin64.display_name == "gcc cygwin64"
        assert cygwin64.toolchain_id == "gcccygwin64"

    def test_visual_cpp(self, vs2015):
        assert vs2015.display_name == "visual c++ 2015 (14.0.0)"
        assert vs2015.type_display_name == "visual c++"
        assert vs2015.toolchain_id == "visualCpp"
        assert vs2015.plugin_class == "MicrosoftVisualCppCompilerPlugin"
        assert vs2015.instance_display_name == "Tool chain 'visualCpp' (Visual Studio)"

    def test_swiftc(self, swift4):
        assert swift4.display_name == "swiftc 4.2.1"
        assert swift4.toolchain_id == "swiftc421"
        assert swift4.implementation_class == "Swiftc"

    def test_unavailable(self, platform_linux):
        missing = ToolchainCandidate.unavailable(ToolFamily.SWIFTC, platform=platform_linux)
        assert missing.display_name == "swiftc"
        assert missing.instance_display_name == "swiftc"
        assert missing.implementation_class is None
        assert missing.plugin_class is None

    def test_windows_gcc_rejects_other_families(self, platform_windows):
        with pytest.raises(ValueError):
            ToolchainCandidate.windows_gcc(ToolFamily.GCC, platform=platform_windows)


class TestUnitTestPlatform:
    """Test unit-test platform tags."""

    def test_linux_gcc(self, gcc):
        assert gcc.unit_test_platform == "linux"

    def test_macos_clang(self, platform_macos):
        assert ToolchainCandidate.clang(V("15.0"), platform=platform_macos).unit_test_platform == "osx"

    def test_windows_gcc(self, mingw, cygwin64, platform_windows):
        cygwin = ToolchainCandidate.windows_gcc(ToolFamily.CYGWIN_GCC, platform=platform_windows)
        assert mingw.unit_test_platform == "mingw"
        assert cygwin.unit_test_platform == "cygwin"
        assert cygwin64.unit_test_platform == "UNKNOWN"

    def test_visual_cpp(self, vs2015, platform_windows):
        vs2013 = ToolchainCandidate.visual_cpp(
            VisualStudioVersion.VISUALSTUDIO_2013,
            visual_studio_install("12.0"),
            platform=platform_windows,
        )
        vs2017 = ToolchainCandidate.visual_cpp(
            VisualStudioVersion.VISUALSTUDIO_2017,
            visual_studio_install("15.9"),
            platform=platform_windows,
        )
        assert vs2015.unit_test_platform == "vs2015"
        assert vs2013.unit_test_platform == "vs2013"
        assert vs2017.unit_test_platform == "UNKNOWN"

    def test_not_applicable(self, swift4, platform_linux):
        assert swift4.unit_test_platform is None
        assert ToolchainCandidate.unavailable(ToolFamily.GCC, platform_linux).unit_test_platform is None


class TestMeets:
    """Test requirement matching."""

    def test_gcc(self, gcc):
        met = {r for r in R if gcc.meets(r)}
        assert met == {R.AVAILABLE, R.GCC, R.GCC_COMPATIBLE, R.SUPPORTS_32, R.SUPPORTS_32_AND_64}

    def test_mingw(self, mingw):
        met = {r for r in R if mingw.meets(r)}
        assert met == {R.AVAILABLE, R.GCC, R.GCC_COMPATIBLE, R.SUPPORTS_32, R.WINDOWS_GCC}

    def test_cygwin64_supports_both_architectures(self, cygwin64):
        assert cygwin64.meets(R.SUPPORTS_32_AND_64)
        assert cygwin64.meets(R.WINDOWS_GCC)
        assert cygwin64.meets(R.GCC)

    def test_clang_linux(self, platform_linux):
        clang = ToolchainCandidate.clang(V("15.0.7"), platform=platform_linux)
        met = {r for r in R if clang.meets(r)}
        assert met == {R.AVAILABLE, R.CLANG, R.GCC_COMPATIBLE, R.SUPPORTS_32, R.SUPPORTS_32_AND_64}

    def test_apple_clang_10_drops_32_bit(self, platform_macos):
        old = ToolchainCandidate.clang(V("9.1.0"), platform=platform_macos)
        new = ToolchainCandidate.clang(V("10.0.0"), platform=platform_macos)
        assert old.meets(R.SUPPORTS_32)
        assert not new.meets(R.SUPPORTS_32)
        assert not new.meets(R.SUPPORTS_32_AND_64)
        assert new.meets(R.GCC_COMPATIBLE)

    def test_visual_cpp_2015(self, vs2015):
        assert vs2015.meets(R.AVAILABLE)
        assert vs2015.meets(R.VISUALCPP)
        assert vs2015.meets(R.SUPPORTS_32_AND_64)
        assert vs2015.meets(R.VISUALCPP_2012_OR_NEWER)
        assert vs2015.meets(R.VISUALCPP_2013_OR_NEWER)
        assert vs2015.meets(R.VISUALCPP_2015_OR_NEWER)
        assert not vs2015.meets(R.VISUALCPP_2017_OR_NEWER)
        assert vs2015.meets(R.VISUALCPP_2015)
        assert not vs2015.meets(R.VISUALCPP_2013)
        assert not vs2015.meets(R.GCC_COMPATIBLE)

    def test_visual_cpp_exact_ignores_build_number(self, platform_windows):
        vs2019 = ToolchainCandidate.visual_cpp(
            VisualStudioVersion.VISUALSTUDIO_2019,
            visual_studio_install("16.11.34407.143"),
            platform=platform_windows,
        )
        assert vs2019.meets(R.VISUALCPP_2019)
        assert vs2019.meets(R.VISUALCPP_2017_OR_NEWER)
        assert not vs2019.meets(R.VISUALCPP_2022_OR_NEWER)

    def test_swiftc(self, swift4, platform_linux):
        swift3 = ToolchainCandidate.swiftc(Path("/x"), V("3.1"), platform=platform_linux)
        assert swift4.meets(R.SWIFTC)
        assert swift4.meets(R.SWIFTC_4)
        assert not swift4.meets(R.SWIFTC_3)
        assert swift3.meets(R.SWIFTC_3)
        assert not swift4.meets(R.AVAILABLE)
        assert not swift4.meets(R.GCC_COMPATIBLE)

    def test_unavailable_meets_nothing(self, platform_linux):
        missing = ToolchainCandidate.unavailable(ToolFamily.GCC, platform_linux)
        assert not any(missing.meets(r) for r in R)
        assert not missing.is_available

    @pytest.mark.parametrize("requirement", [None, "gcc", 42, ToolFamily.GCC])
    def test_non_requirement(self, gcc, requirement):
        """Test that matching never raises for foreign values."""
        assert gcc.meets(requirement) is False

    def test_meets_is_pure(self, gcc):
        first = [gcc.meets(r) for r in R]
        second = [gcc.meets(r) for r in R]
        assert first == second

    def test_layering(self, gcc, mingw, vs2015, platform_linux):
        clang = ToolchainCandidate.clang(V("15.0"), platform=platform_linux)
        assert mingw.is_windows_gcc and mingw.is_gcc and mingw.is_gcc_compatible
        assert gcc.is_gcc and not gcc.is_windows_gcc
        assert clang.is_gcc_compatible and not clang.is_gcc
        assert vs2015.is_visual_cpp and not vs2015.is_gcc_compatible


class TestTools:
    """Test tool resolution."""

    def test_gcc_in_ambient_path(self, gcc, make_executable, monkeypatch):
        gpp = make_executable("bin/g++")
        make_executable("bin/gcc")
        monkeypatch.setenv("PATH", str(gpp.parent))

        assert gcc.cpp_compiler == gpp
        assert gcc.c_compiler == gpp.parent / "gcc"
        assert gcc.linker == gcc.c_compiler

    def test_gcc_with_path_override(self, platform_linux):
        gcc = ToolchainCandidate.gcc(V("9.3.0"), [Path("/opt/gcc/bin")], platform_linux)
        assert gcc.cpp_compiler == Path("/opt/gcc/bin/g++")
        assert gcc.static_lib_archiver == Path("/opt/gcc/bin/ar")

    def test_clang_tools(self, platform_linux):
        clang = ToolchainCandidate.clang(V("15.0"), [Path("/opt/llvm/bin")], platform_linux)
        assert clang.c_compiler == Path("/opt/llvm/bin/clang")
        assert clang.cpp_compiler == Path("/opt/llvm/bin/clang++")

    def test_mingw_tools(self, mingw):
        assert mingw.cpp_compiler == Path("C:/MinGW/bin") / "g++.exe"

    def test_cygwin64_uses_64_bit_dir(self, cygwin64):
        assert cygwin64.c_compiler == Path("C:/cygwin64/bin") / "gcc.exe"

    def test_visual_cpp_compiler(self, vs2015):
        assert vs2015.cpp_compiler == Path("C:/VS") / "VC" / "bin" / "amd64" / "cl.exe"
        assert vs2015.path_entries == (
            Path("C:/VS") / "VC" / "bin" / "amd64",
            Path("C:/VS") / "Common7" / "IDE",
        )
        with pytest.raises(ToolchainError):
            vs2015.c_compiler

    def test_swift_tool(self, swift4):
        assert swift4.tool("swift-build") == Path("/opt/swift/4.2.1/usr/bin/swift-build")

    def test_tool_without_bin_dir(self, gcc):
        with pytest.raises(ToolchainError):
            gcc.tool("swift")


class TestOutputFiles:
    """Test output file naming."""

    def test_linux(self, gcc):
        assert gcc.object_file("main") == Path("main.o")
        assert gcc.executable("app") == Path("app")
        assert gcc.shared_library("foo") == Path("libfoo.so")
        assert gcc.static_library("foo") == Path("libfoo.a")

    def test_windows(self, mingw):
        assert mingw.executable("app") == Path("app.exe")
        assert mingw.shared_library("foo") == Path("foo.dll")
        assert mingw.static_library("foo") == Path("foo.lib")

    def test_visual_cpp_object_file(self, vs2015):
        assert vs2015.object_file("main") == Path("main.obj")


class TestBuildScriptConfig:
    """Test generated configuration blocks."""

    def test_gcc_without_path(self, gcc):
        assert gcc.build_script_config() == "gcc(Gcc)\n"

    def test_gcc_with_path(self, platform_linux, tmp_path):
        gcc = ToolchainCandidate.gcc(V("9.3.0"), [tmp_path], platform_linux)
        assert gcc.build_script_config() == (
            f"gcc(Gcc)\ngcc.path file('{tmp_path.absolute().as_uri()}')\n"
        )

    def test_cygwin64_blocks(self, platform_windows, tmp_path):
        bin32 = tmp_path / "cygwin" / "bin"
        bin64 = tmp_path / "cygwin64" / "bin"
        cygwin = ToolchainCandidate.cygwin_gcc_64(bin32, bin64, platform=platform_windows)

        config = cygwin.build_script_config()

        assert config == (
            "gcccygwin64_32(Gcc) {\n"
            f"path file('{bin32.absolute().as_uri()}')\n"
            "targets = ['windows_x86']\n"
            "}\n"
            "gcccygwin64_64(Gcc) {\n"
            f"path file('{bin64.absolute().as_uri()}')\n"
            "targets = ['windows_x86_64']\n"
            "}\n"
        )

    def test_visual_cpp(self, platform_windows, tmp_path):
        vs = ToolchainCandidate.visual_cpp(
            VisualStudioVersion.VISUALSTUDIO_2015,
            visual_studio_install("14.0", tmp_path),
            platform=platform_windows,
        )
        assert vs.build_script_config() == (
            f"visualCpp(VisualCpp)\nvisualCpp.installDir = file('{tmp_path.absolute().as_uri()}')\n"
        )

    def test_unavailable(self, platform_linux):
        missing = ToolchainCandidate.unavailable(ToolFamily.GCC, platform_linux)
        with pytest.raises(ToolchainUnavailableError, match="gcc"):
            missing.build_script_config()


class TestRuntimeEnv:
    """Test runtime environment assignments."""

    def test_gcc_needs_nothing(self, platform_linux):
        gcc = ToolchainCandidate.gcc(V("9.3.0"), [Path("/opt/gcc/bin")], platform_linux)
        assert gcc.runtime_env({"PATH": "/usr/bin"}) == []

    def test_mingw(self, mingw):
        assert mingw.runtime_env({"Path": "C:/Windows"}) == [
            f"Path={Path('C:/MinGW/bin')};C:/Windows"
        ]

    def test_swift(self, swift4):
        assert swift4.runtime_env({"PATH": "/bin"}) == ["PATH=/opt/swift/4.2.1/usr/bin:/usr/bin:/bin"]


class TestSerialization:
    def test_to_dict(self, gcc):
        assert gcc.to_dict() == {
            "id": "gcc",
            "name": "gcc 9.3.0",
            "family": "GCC",
            "kind": "gcc",
            "version": "9.3.0",
            "available": True,
            "path_entries": [],
            "install_dir": None,
        }

    def test_unknown_version_is_null(self, mingw):
        assert mingw.to_dict()["version"] is None

    def test_equality_ignores_platform(self, platform_linux, platform_macos):
        a = ToolchainCandidate.gcc(V("9.3.0"), platform=platform_linux)
        b = ToolchainCandidate.gcc(V("9.3"), platform=platform_macos)
        assert a == b
        assert a.kind is CandidateKind.GCC
