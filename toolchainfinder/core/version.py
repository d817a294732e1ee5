"""
Version numbers for discovered toolchains.

Compiler banners report versions as dotted numeric strings ("9.3.0", "4.10",
"19.38.33133"). VersionNumber parses the leading numeric run of such a string
and compares component-wise, padding the shorter side with zeros, so
"4.10" > "4.2" and "4.10" == "4.10.0".

Installations located by fixed path rather than probed carry
VersionNumber.UNKNOWN. UNKNOWN is a real value: it sorts below every concrete
version (including "0") and equals only itself.

Usage:
    from toolchainfinder.core.version import VersionNumber

    v1 = VersionNumber.parse("4.10")
    v2 = VersionNumber.parse("4.2")
    assert v1 > v2
"""

import re
from typing import Optional, Tuple

from .exceptions import InvalidVersionError

_VERSION_PATTERN = re.compile(r"^\s*v?(\d+(?:\.\d+)*)")


class VersionNumber:
    """
    Comparable dotted version number.

    Example:
        >>> VersionNumber.parse("18.1.8").major
        18
        >>> VersionNumber.parse("4.10") > VersionNumber.parse("4.2")
        True
    """

    UNKNOWN: "VersionNumber"

    def __init__(self, components: Tuple[int, ...], text: Optional[str] = None):
        """
        Create a version from its numeric components.

        Args:
            components: Numeric components, most significant first. An empty
                tuple is reserved for UNKNOWN.
            text: Text used when rendering; defaults to the dotted components
        """
        self._components = tuple(components)
        self._text = text if text is not None else ".".join(map(str, components))

    @classmethod
    def parse(cls, text: str) -> "VersionNumber":
        """
        Parse a dotted version string.

        Anything after the leading numeric run is discarded ("5.9-dev" -> 5.9).

        Args:
            text: Version string

        Returns:
            Parsed VersionNumber

        Raises:
            InvalidVersionError: If the text does not start with a number
        """
        if text is None:
            raise InvalidVersionError("Version string is None")

        match = _VERSION_PATTERN.match(text)
        if not match:
            raise InvalidVersionError(f"Invalid version format: {text!r}")

        numeric = match.group(1)
        return cls(tuple(int(part) for part in numeric.split(".")), numeric)

    @classmethod
    def version(cls, major: int, minor: int = 0, micro: int = 0) -> "VersionNumber":
        """Build a three-component version."""
        return cls((major, minor, micro))

    @property
    def components(self) -> Tuple[int, ...]:
        return self._components

    @property
    def major(self) -> int:
        return self._component(0)

    @property
    def minor(self) -> int:
        return self._component(1)

    @property
    def micro(self) -> int:
        return self._component(2)

    @property
    def is_unknown(self) -> bool:
        return self is VersionNumber.UNKNOWN

    def _component(self, index: int) -> int:
        if index < len(self._components):
            return self._components[index]
        return 0

    def compare_to(self, other: "VersionNumber") -> int:
        """
        Compare two versions.

        Returns:
            Negative, zero or positive as self is lower than, equal to or
            higher than other
        """
        if self is other:
            return 0
        if self.is_unknown:
            return -1
        if other.is_unknown:
            return 1

        width = max(len(self._components), len(other._components))
        left = self._components + (0,) * (width - len(self._components))
        right = other._components + (0,) * (width - len(other._components))
        return (left > right) - (left < right)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionNumber):
            return NotImplemented
        return self.compare_to(other) == 0

    def __lt__(self, other: "VersionNumber") -> bool:
        return self.compare_to(other) < 0

    def __le__(self, other: "VersionNumber") -> bool:
        return self.compare_to(other) <= 0

    def __gt__(self, other: "VersionNumber") -> bool:
        return self.compare_to(other) > 0

    def __ge__(self, other: "VersionNumber") -> bool:
        return self.compare_to(other) >= 0

    def __hash__(self) -> int:
        if self.is_unknown:
            return hash("unknown-version")
        trimmed = list(self._components)
        while trimmed and trimmed[-1] == 0:
            trimmed.pop()
        return hash(tuple(trimmed))

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"VersionNumber({self._text!r})"


VersionNumber.UNKNOWN = VersionNumber((), "unknown")


__all__ = ["VersionNumber"]
