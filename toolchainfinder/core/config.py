"""
Discovery configuration.

Fixed installation locations and probe settings can be overridden with a YAML
file. The file is optional; every key has a default matching the standard
installation layout.

Example toolchainfinder.yaml:

    probe_timeout: 10
    mingw:
      root: C:/MinGW
    cygwin:
      root32: C:/cygwin
      root64: C:/cygwin64
    swift:
      root: /opt/swift
    visual_studio:
      vswhere: C:/Program Files (x86)/Microsoft Visual Studio/Installer/vswhere.exe
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TOOLCHAINFINDER_CONFIG"
DEFAULT_CONFIG_FILE = "toolchainfinder.yaml"

DEFAULT_VSWHERE = Path(
    "C:/Program Files (x86)/Microsoft Visual Studio/Installer/vswhere.exe"
)

_KNOWN_SECTIONS = {"probe_timeout", "mingw", "cygwin", "swift", "visual_studio"}


@dataclass
class DiscoveryConfig:
    """
    Settings used by the discovery strategies.

    Attributes:
        probe_timeout: Seconds to wait for a compiler probe before giving up
        mingw_root: MinGW installation root (expects bin/g++.exe)
        cygwin32_root: 32-bit Cygwin installation root
        cygwin64_root: 64-bit Cygwin installation root
        swift_root: Directory holding versioned Swift installations
        vswhere_path: Path to vswhere.exe
    """

    probe_timeout: float = 10.0
    mingw_root: Path = Path("C:/MinGW")
    cygwin32_root: Path = Path("C:/cygwin")
    cygwin64_root: Path = Path("C:/cygwin64")
    swift_root: Path = Path("/opt/swift")
    vswhere_path: Path = DEFAULT_VSWHERE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiscoveryConfig":
        """
        Build configuration from parsed YAML data.

        Args:
            data: Configuration dictionary

        Returns:
            DiscoveryConfig with defaults for missing keys

        Raises:
            ConfigurationError: If a value has the wrong type
        """
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )

        for key in data:
            if key not in _KNOWN_SECTIONS:
                logger.warning(f"Ignoring unknown configuration key: {key}")

        config = cls()

        if "probe_timeout" in data:
            timeout = data["probe_timeout"]
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
                raise ConfigurationError(
                    f"probe_timeout must be a number, got {timeout!r}"
                )
            if timeout <= 0:
                raise ConfigurationError(
                    f"probe_timeout must be positive, got {timeout}"
                )
            config.probe_timeout = float(timeout)

        mingw = _section(data, "mingw")
        config.mingw_root = _path(mingw, "root", "mingw", config.mingw_root)

        cygwin = _section(data, "cygwin")
        config.cygwin32_root = _path(cygwin, "root32", "cygwin", config.cygwin32_root)
        config.cygwin64_root = _path(cygwin, "root64", "cygwin", config.cygwin64_root)

        swift = _section(data, "swift")
        config.swift_root = _path(swift, "root", "swift", config.swift_root)

        visual_studio = _section(data, "visual_studio")
        config.vswhere_path = _path(
            visual_studio, "vswhere", "visual_studio", config.vswhere_path
        )

        return config


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Section '{name}' must be a mapping")
    return section


def _path(section: Dict[str, Any], key: str, section_name: str, default: Path) -> Path:
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ConfigurationError(f"{section_name}.{key} must be a path string")
    return Path(value)


def find_config_file(explicit: Optional[Path] = None) -> Optional[Path]:
    """
    Locate the configuration file.

    Order: explicit path, TOOLCHAINFINDER_CONFIG, ./toolchainfinder.yaml.

    Args:
        explicit: Path given on the command line

    Returns:
        Path to the configuration file, or None when no file applies
    """
    if explicit is not None:
        return explicit

    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)

    local = Path.cwd() / DEFAULT_CONFIG_FILE
    if local.exists():
        return local

    return None


def load_config(config_file: Optional[Path] = None) -> DiscoveryConfig:
    """
    Load discovery configuration.

    Args:
        config_file: Explicit configuration file (optional)

    Returns:
        DiscoveryConfig (defaults when no file applies)

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    path = find_config_file(config_file)
    if path is None:
        logger.debug("No configuration file, using defaults")
        return DiscoveryConfig()

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    logger.debug(f"Loading configuration from {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    return DiscoveryConfig.from_dict(data or {})


__all__ = [
    "DiscoveryConfig",
    "find_config_file",
    "load_config",
    "CONFIG_ENV_VAR",
]
