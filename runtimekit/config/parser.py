"""Configuration loading for RuntimeKit.

Setups are configured either from a YAML file:

    distribution: manifest
    version: "17"
    architecture: x64
    package-type: jdk
    check-latest: false
    manifest-url: https://example.com/releases.json
    tool-cache: /opt/hostedtoolcache

or from CI action inputs in the environment (INPUT_JAVA-VERSION,
INPUT_DISTRIBUTION, ...).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from runtimekit.core.exceptions import ConfigError
from runtimekit.distributions.models import InstallerOptions


@dataclass
class SetupConfig:
    """Complete configuration for one runtime setup."""

    distribution: str
    options: InstallerOptions
    manifest_url: Optional[str] = None

    def installer_kwargs(self) -> Dict[str, Any]:
        """Distribution-specific keyword arguments for get_installer()."""
        if self.manifest_url:
            return {"manifest_url": self.manifest_url}
        return {}


def load_config(config_path: Path) -> SetupConfig:
    """
    Parse a YAML setup configuration file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    return _parse_and_validate(data)


def config_from_env(environ: Mapping[str, str]) -> SetupConfig:
    """
    Build configuration from CI action inputs.

    Inputs are read from INPUT_<NAME> variables, upper-cased with dashes kept,
    as the runner exports them. Empty inputs count as unset.

    Raises:
        ConfigError: If required inputs are missing or invalid
    """

    def get_input(name: str) -> Optional[str]:
        value = environ.get(f"INPUT_{name.upper()}", "").strip()
        return value or None

    data: Dict[str, Any] = {
        "distribution": get_input("distribution"),
        "version": get_input("java-version") or get_input("version"),
        "architecture": get_input("architecture"),
        "package-type": get_input("java-package"),
        "manifest-url": get_input("manifest-url"),
        "tool-cache": get_input("tool-cache"),
    }

    check_latest = get_input("check-latest")
    if check_latest is not None:
        data["check-latest"] = _parse_bool("check-latest", check_latest)

    return _parse_and_validate({k: v for k, v in data.items() if v is not None})


def _parse_and_validate(data: dict) -> SetupConfig:
    """Parse and validate configuration data."""
    for required in ("distribution", "version"):
        if not data.get(required):
            raise ConfigError(f"Missing required field: {required}")

    check_latest = data.get("check-latest", False)
    if isinstance(check_latest, str):
        check_latest = _parse_bool("check-latest", check_latest)
    if not isinstance(check_latest, bool):
        raise ConfigError(f"check-latest must be a boolean, got {check_latest!r}")

    tool_cache = data.get("tool-cache")
    options = InstallerOptions(
        # YAML turns unquoted 17 or 11.0 into numbers
        version=str(data["version"]),
        architecture=str(data.get("architecture") or ""),
        package_type=str(data.get("package-type") or "jdk"),
        check_latest=check_latest,
        tool_cache_dir=str(tool_cache) if tool_cache else None,
    )

    return SetupConfig(
        distribution=str(data["distribution"]).lower(),
        options=options,
        manifest_url=data.get("manifest-url"),
    )


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ConfigError(f"{name} must be 'true' or 'false', got {value!r}")


__all__ = [
    "SetupConfig",
    "load_config",
    "config_from_env",
]
