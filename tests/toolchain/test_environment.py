"""
Tests for search path activation.
"""

import os
from pathlib import Path

import pytest

from toolchainfinder.core.exceptions import EnvironmentActivationError, ToolchainUnavailableError
from toolchainfinder.core.version import VersionNumber
from toolchainfinder.toolchain.candidates import ToolchainCandidate
from toolchainfinder.toolchain.environment import EnvironmentActivator
from toolchainfinder.toolchain.families import ToolFamily


@pytest.fixture
def gcc_override(platform_linux):
    return ToolchainCandidate.gcc(
        VersionNumber.parse("9.3.0"), [Path("/opt/gcc/bin")], platform_linux
    )


@pytest.fixture
def gcc_plain(platform_linux):
    return ToolchainCandidate.gcc(VersionNumber.parse("11.4.0"), platform=platform_linux)


class TestActivate:
    """Test activate() and deactivate()."""

    def test_round_trip(self, platform_linux, gcc_override):
        """Test that deactivation restores the exact original value."""
        environ = {"PATH": "/usr/bin:/bin"}
        activator = EnvironmentActivator(platform_linux, environ)

        result = activator.activate(gcc_override)

        assert result.ok
        assert result.path_value == "/opt/gcc/bin:/usr/bin:/bin"
        assert environ["PATH"] == "/opt/gcc/bin:/usr/bin:/bin"
        assert activator.active is gcc_override

        restored = activator.deactivate(gcc_override)

        assert restored.ok
        assert environ == {"PATH": "/usr/bin:/bin"}
        assert activator.active is None

    def test_unset_variable_restored_as_unset(self, platform_linux, gcc_override):
        environ = {}
        activator = EnvironmentActivator(platform_linux, environ)

        activator.activate(gcc_override)
        assert environ["PATH"] == "/opt/gcc/bin"

        activator.deactivate(gcc_override)
        assert "PATH" not in environ

    def test_empty_variable_restored_as_empty(self, platform_linux, gcc_override):
        environ = {"PATH": ""}
        activator = EnvironmentActivator(platform_linux, environ)

        activator.activate(gcc_override)
        assert environ["PATH"] == "/opt/gcc/bin"

        activator.deactivate(gcc_override)
        assert environ == {"PATH": ""}

    def test_no_path_entries_is_noop(self, platform_linux, gcc_plain):
        environ = {"PATH": "/usr/bin"}
        activator = EnvironmentActivator(platform_linux, environ)

        assert activator.activate(gcc_plain).ok
        assert environ == {"PATH": "/usr/bin"}
        assert activator.deactivate(gcc_plain).ok
        assert environ == {"PATH": "/usr/bin"}

    def test_windows_variable(self, platform_windows):
        mingw = ToolchainCandidate.windows_gcc(
            ToolFamily.MINGW_GCC, path_entries=[Path("C:/MinGW/bin")], platform=platform_windows
        )
        environ = {"Path": "C:/Windows"}
        activator = EnvironmentActivator(platform_windows, environ)

        activator.activate(mingw)

        assert environ["Path"] == f"{Path('C:/MinGW/bin')};C:/Windows"

    def test_second_activation_rejected(self, platform_linux, gcc_override, gcc_plain):
        environ = {"PATH": "/usr/bin"}
        activator = EnvironmentActivator(platform_linux, environ)
        activator.activate(gcc_override)

        result = activator.activate(gcc_plain)

        assert not result.ok
        assert "still active" in result.error
        assert environ["PATH"] == "/opt/gcc/bin:/usr/bin"
        with pytest.raises(EnvironmentActivationError):
            result.raise_for_error()

    def test_deactivate_other_candidate_rejected(self, platform_linux, gcc_override, gcc_plain):
        activator = EnvironmentActivator(platform_linux, {"PATH": "/usr/bin"})
        activator.activate(gcc_override)

        result = activator.deactivate(gcc_plain)

        assert not result.ok
        assert activator.active is gcc_override

    def test_deactivate_without_activation(self, platform_linux, gcc_override):
        environ = {"PATH": "/usr/bin"}
        assert EnvironmentActivator(platform_linux, environ).deactivate(gcc_override).ok
        assert environ == {"PATH": "/usr/bin"}

    def test_unavailable(self, platform_linux):
        missing = ToolchainCandidate.unavailable(ToolFamily.GCC, platform_linux)
        environ = {"PATH": "/usr/bin"}
        activator = EnvironmentActivator(platform_linux, environ)

        result = activator.activate(missing)

        assert not result.ok
        assert result.unavailable
        assert environ == {"PATH": "/usr/bin"}
        with pytest.raises(ToolchainUnavailableError):
            result.raise_for_error()
        assert not activator.deactivate(missing).ok

    def test_activate_again_after_deactivate(self, platform_linux, gcc_override, gcc_plain):
        activator = EnvironmentActivator(platform_linux, {"PATH": "/usr/bin"})
        activator.activate(gcc_override)
        activator.deactivate(gcc_override)
        assert activator.activate(gcc_plain).ok


class TestActivated:
    """Test the activated() context manager."""

    def test_restores_on_exit(self, platform_linux, gcc_override):
        environ = {"PATH": "/usr/bin"}
        activator = EnvironmentActivator(platform_linux, environ)

        with activator.activated(gcc_override) as result:
            assert result.ok
            assert environ["PATH"].startswith("/opt/gcc/bin")

        assert environ == {"PATH": "/usr/bin"}

    def test_restores_on_error(self, platform_linux, gcc_override):
        environ = {"PATH": "/usr/bin"}
        activator = EnvironmentActivator(platform_linux, environ)

        with pytest.raises(RuntimeError):
            with activator.activated(gcc_override):
                raise RuntimeError("build failed")

        assert environ == {"PATH": "/usr/bin"}
        assert activator.active is None

    def test_unavailable_raises(self, platform_linux):
        missing = ToolchainCandidate.unavailable(ToolFamily.CLANG, platform_linux)
        activator = EnvironmentActivator(platform_linux, {})
        with pytest.raises(ToolchainUnavailableError, match="clang"):
            with activator.activated(missing):
                pass

    def test_defaults_to_os_environ(self, platform_linux, gcc_override, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin")
        activator = EnvironmentActivator(platform_linux)

        with activator.activated(gcc_override):
            assert os.environ["PATH"] == "/opt/gcc/bin:/usr/bin"

        assert os.environ["PATH"] == "/usr/bin"


class TestSharedEnvironment:
    """Test that activators on the same environment share one activation slot."""

    def test_second_activator_rejected_on_os_environ(self, platform_linux, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin")
        gcc_a = ToolchainCandidate.gcc(VersionNumber.parse("9.3.0"), [Path("/opt/a")], platform_linux)
        gcc_b = ToolchainCandidate.gcc(VersionNumber.parse("11.4.0"), [Path("/opt/b")], platform_linux)
        first = EnvironmentActivator(platform_linux)
        second = EnvironmentActivator(platform_linux)

        assert first.activate(gcc_a).ok
        result = second.activate(gcc_b)

        assert not result.ok
        assert "still active" in result.error
        assert second.active is gcc_a
        assert os.environ["PATH"] == "/opt/a:/usr/bin"

        assert second.deactivate(gcc_b).ok is False
        assert first.deactivate(gcc_a).ok
        assert os.environ["PATH"] == "/usr/bin"
        assert second.activate(gcc_b).ok
        assert second.deactivate(gcc_b).ok
        assert os.environ["PATH"] == "/usr/bin"

    def test_context_manager_blocks_other_activator(self, platform_linux, gcc_override, gcc_plain):
        environ = {"PATH": "/usr/bin"}
        first = EnvironmentActivator(platform_linux, environ)
        second = EnvironmentActivator(platform_linux, environ)

        with first.activated(gcc_override):
            with pytest.raises(EnvironmentActivationError, match="still active"):
                with second.activated(gcc_plain):
                    pass

        assert environ == {"PATH": "/usr/bin"}
        assert second.active is None

    def test_separate_mappings_are_independent(self, platform_linux, gcc_override):
        first_env = {"PATH": "/usr/bin"}
        second_env = {"PATH": "/bin"}
        first = EnvironmentActivator(platform_linux, first_env)
        second = EnvironmentActivator(platform_linux, second_env)

        assert first.activate(gcc_override).ok
        assert second.activate(gcc_override).ok
        assert second_env["PATH"] == "/opt/gcc/bin:/bin"

        first.deactivate(gcc_override)
        second.deactivate(gcc_override)
        assert first_env == {"PATH": "/usr/bin"}
        assert second_env == {"PATH": "/bin"}
