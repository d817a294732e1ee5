"""
Process environment activation for a selected toolchain.

Activating a toolchain prepends its path entries to the executable search
path variable so that downstream tools resolve its executables; deactivating
restores the exact value captured at activation (an unset variable is unset
again).

The search path is process-global state, so at most one activation may be
outstanding per environment mapping. The guard is shared by every
EnvironmentActivator working on the same mapping (normally os.environ): a
second activate() before the matching deactivate() is rejected instead of
overwriting the saved value.

Usage:
    activator = EnvironmentActivator(platform_info)

    with activator.activated(candidate):
        subprocess.run(["g++", "--version"])

    # Or explicitly
    result = activator.activate(candidate)
    result.raise_for_error()
    try:
        ...
    finally:
        activator.deactivate(candidate)
"""

import logging
import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, MutableMapping, Optional

from ..core.exceptions import EnvironmentActivationError, ToolchainUnavailableError
from ..core.platform import PlatformInfo, detect_platform
from .candidates import ToolchainCandidate

logger = logging.getLogger(__name__)

# Outstanding activations keyed by id() of the environment mapping. Each entry
# holds a reference to its mapping, so the id cannot be reused while it is active.
_activations_lock = threading.Lock()
_activations: Dict[int, "_Activation"] = {}


@dataclass
class ActivationResult:
    """
    Outcome of an activate() or deactivate() call.

    Attributes:
        ok: True when the operation succeeded (including no-op cases)
        candidate: Candidate the operation was requested for
        path_value: Search path value installed (activate) or restored (deactivate);
            None when the variable was left untouched or restored as unset
        error: Failure description when ok is False
        unavailable: True when the failure is because the candidate is the
            unavailable placeholder
    """

    ok: bool
    candidate: ToolchainCandidate
    path_value: Optional[str] = None
    error: Optional[str] = None
    unavailable: bool = False

    def raise_for_error(self) -> "ActivationResult":
        """
        Raise if the operation failed.

        Raises:
            ToolchainUnavailableError: The candidate is not available
            EnvironmentActivationError: Any other failure
        """
        if self.ok:
            return self
        if self.unavailable:
            raise ToolchainUnavailableError(self.candidate.display_name)
        raise EnvironmentActivationError(self.error or "Environment activation failed")


@dataclass
class _Activation:
    environ: MutableMapping[str, str]
    candidate: ToolchainCandidate
    original: Optional[str] = None
    mutated: bool = False


class EnvironmentActivator:
    """
    Scoped, reversible mutation of the search path environment variable.

    Activators sharing an environment mapping share its activation slot, so
    an activation made through one is visible to (and blocks) the others.

    Attributes:
        platform: Platform information (decides the variable name and separator)
        environ: Environment mapping that is mutated (default: os.environ)
    """

    def __init__(
        self,
        platform: Optional[PlatformInfo] = None,
        environ: Optional[MutableMapping[str, str]] = None,
    ):
        self.platform = platform or detect_platform()
        self.environ = environ if environ is not None else os.environ

    def _current(self) -> Optional[_Activation]:
        # Caller holds _activations_lock
        activation = _activations.get(id(self.environ))
        if activation is not None and activation.environ is self.environ:
            return activation
        return None

    @property
    def active(self) -> Optional[ToolchainCandidate]:
        """Candidate whose activation is outstanding on this environment, if any."""
        with _activations_lock:
            activation = self._current()
        return activation.candidate if activation else None

    def activate(self, candidate: ToolchainCandidate) -> ActivationResult:
        """
        Make the candidate's executables resolvable through the search path.

        Args:
            candidate: Toolchain to activate

        Returns:
            ActivationResult; ok is False for the unavailable placeholder or
            when another activation is outstanding on the same environment
        """
        if not candidate.is_available:
            return ActivationResult(
                ok=False,
                candidate=candidate,
                error=f"Toolchain is not available: {candidate.display_name}",
                unavailable=True,
            )

        path_var = self.platform.path_var

        with _activations_lock:
            current = self._current()
            if current is not None:
                return ActivationResult(
                    ok=False,
                    candidate=candidate,
                    error=(
                        f"Cannot activate {candidate.display_name}: "
                        f"{current.candidate.display_name} is still active"
                    ),
                )

            activation = _Activation(environ=self.environ, candidate=candidate)
            _activations[id(self.environ)] = activation
            if not candidate.path_entries:
                logger.debug(f"{candidate.display_name} needs no search path changes")
                return ActivationResult(ok=True, candidate=candidate)

            separator = self.platform.path_separator
            activation.original = self.environ.get(path_var)
            prefix = separator.join(str(entry) for entry in candidate.path_entries)
            if activation.original:
                path = prefix + separator + activation.original
            else:
                path = prefix

            logger.info(f"Using path {path}")
            self.environ[path_var] = path
            activation.mutated = True
            return ActivationResult(ok=True, candidate=candidate, path_value=path)

    def deactivate(self, candidate: ToolchainCandidate) -> ActivationResult:
        """
        Restore the search path captured when the candidate was activated.

        A no-op (ok) when nothing is active or the activation made no changes.

        Args:
            candidate: Toolchain to deactivate

        Returns:
            ActivationResult; ok is False for the unavailable placeholder or
            when a different toolchain is active
        """
        if not candidate.is_available:
            return ActivationResult(
                ok=False,
                candidate=candidate,
                error=f"Toolchain is not available: {candidate.display_name}",
                unavailable=True,
            )

        path_var = self.platform.path_var

        with _activations_lock:
            current = self._current()
            if current is None:
                return ActivationResult(ok=True, candidate=candidate)

            if current.candidate is not candidate:
                return ActivationResult(
                    ok=False,
                    candidate=candidate,
                    error=(
                        f"Cannot deactivate {candidate.display_name}: "
                        f"{current.candidate.display_name} is active"
                    ),
                )

            restored = None
            if current.mutated:
                if current.original is None:
                    self.environ.pop(path_var, None)
                else:
                    self.environ[path_var] = current.original
                restored = current.original
                logger.debug(f"Restored {path_var} after {candidate.display_name}")

            del _activations[id(self.environ)]
            return ActivationResult(ok=True, candidate=candidate, path_value=restored)

    @contextmanager
    def activated(self, candidate: ToolchainCandidate) -> Iterator[ActivationResult]:
        """
        Activate a candidate for the duration of a with-block.

        Raises:
            ToolchainUnavailableError: The candidate is not available
            EnvironmentActivationError: Another activation is outstanding
        """
        result = self.activate(candidate).raise_for_error()
        try:
            yield result
        finally:
            self.deactivate(candidate).raise_for_error()


__all__ = ["ActivationResult", "EnvironmentActivator"]
