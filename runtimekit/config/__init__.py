"""Configuration loading for RuntimeKit."""

from runtimekit.config.parser import SetupConfig, config_from_env, load_config

__all__ = [
    "SetupConfig",
    "config_from_env",
    "load_config",
]
