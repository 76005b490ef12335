"""
Configuration management for mpdev.

Loads and validates config.yaml: tool binaries, the autogen image, remote
URI schemes, the temp directory and logging settings.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


DEFAULT_AUTOGEN_IMAGE = "gcr.io/cloud-marketplace-tools/dm/autogen"
DEFAULT_REMOTE_SCHEMES = ["gs://"]


class ConfigError(Exception):
    """Configuration validation error."""
    pass


def get_mpdev_home() -> Path:
    """Return the mpdev home directory ($MPDEV_HOME or ~/.config/mpdev)."""
    home = os.environ.get("MPDEV_HOME")
    if home:
        return Path(home)
    return Path("~/.config/mpdev").expanduser()


def _mapping(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Return the `key` section of the config, which must be a mapping if set."""
    section = raw.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"{key} must be a mapping, got {section!r}")
    return section


class ApplyConfig:
    """Complete mpdev configuration."""

    def __init__(self, raw_config: Optional[Dict[str, Any]] = None, config_path: Optional[Path] = None):
        self.config_path = config_path
        self.raw_config = raw_config or {}
        if not isinstance(self.raw_config, dict):
            raise ConfigError("Configuration must be a mapping")

        tools = _mapping(self.raw_config, "tools")
        self.docker_bin = tools.get("docker", "docker")
        self.zip_bin = tools.get("zip", "zip")
        self.gsutil_bin = tools.get("gsutil", "gsutil")

        autogen = _mapping(self.raw_config, "autogen")
        self.autogen_image = autogen.get("image", DEFAULT_AUTOGEN_IMAGE)

        remote_schemes = self.raw_config.get("remote_schemes", DEFAULT_REMOTE_SCHEMES)
        if not isinstance(remote_schemes, list):
            raise ConfigError(f"remote_schemes must be a list, got {remote_schemes!r}")
        self.remote_schemes: List[str] = list(remote_schemes)
        self.temp_dir: Optional[str] = self.raw_config.get("temp_dir")

        # Logging
        self.logging = _mapping(self.raw_config, "logging")

    def is_remote(self, path: str) -> bool:
        """Check whether a destination is an object-storage URI."""
        return any(path.startswith(scheme) for scheme in self.remote_schemes)

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path with date interpolation, or None for console only."""
        log_output = self.logging.get("output")
        if not log_output:
            return None
        log_output = log_output.replace("{date}", datetime.now().strftime("%Y-%m-%d"))
        return Path(log_output).expanduser()

    def get_log_level(self) -> str:
        """Get logging level."""
        return str(self.logging.get("level", "INFO")).upper()

    def get_log_format(self) -> str:
        """Get log format (structured or pretty)."""
        return self.logging.get("format", "pretty")

    def should_log_to_console(self) -> bool:
        """Check if console logging is enabled."""
        return self.logging.get("console", True)

    def validate(self) -> None:
        """Validate entire configuration."""
        for key in ("docker_bin", "zip_bin", "gsutil_bin", "autogen_image"):
            value = getattr(self, key)
            if not isinstance(value, str) or not value:
                raise ConfigError(f"{key} must be a non-empty string")

        if not self.remote_schemes:
            raise ConfigError("remote_schemes must list at least one scheme")
        for scheme in self.remote_schemes:
            if not isinstance(scheme, str) or "://" not in scheme:
                raise ConfigError(f"Invalid remote scheme: {scheme!r}")

        if self.temp_dir is not None and not isinstance(self.temp_dir, str):
            raise ConfigError(f"temp_dir must be a path, got {self.temp_dir!r}")
        if self.temp_dir is not None and not Path(self.temp_dir).is_dir():
            raise ConfigError(f"temp_dir does not exist: {self.temp_dir}")

        if self.get_log_level() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"Invalid log level: {self.get_log_level()}")

        log_output = self.logging.get("output")
        if log_output is not None and not isinstance(log_output, str):
            raise ConfigError(f"logging.output must be a path, got {log_output!r}")

        if self.get_log_format() not in ("pretty", "structured"):
            raise ConfigError(
                f"Invalid log format: {self.get_log_format()} (expected 'pretty' or 'structured')"
            )

    def __repr__(self) -> str:
        return (
            f"ApplyConfig(docker={self.docker_bin}, zip={self.zip_bin}, "
            f"gsutil={self.gsutil_bin}, autogen_image={self.autogen_image})"
        )


def _load_yaml(config_path: Path) -> Dict[str, Any]:
    """Load and parse YAML configuration file."""
    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if not config:
        raise ConfigError(f"Configuration file is empty: {config_path}")
    if not isinstance(config, dict):
        raise ConfigError(f"Configuration must be a mapping: {config_path}")
    return config


def load_config(config_path: Optional[Path] = None) -> ApplyConfig:
    """
    Load mpdev configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to $MPDEV_HOME/config.yaml;
                     built-in defaults are used when that file does not exist.

    Returns:
        ApplyConfig instance

    Raises:
        ConfigError: If config is invalid, or an explicit path is missing
    """
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")
    else:
        config_path = get_mpdev_home() / "config.yaml"
        if not config_path.exists():
            return ApplyConfig()

    config = ApplyConfig(_load_yaml(config_path), config_path=config_path)
    config.validate()
    return config
