"""Vault configuration: models and loading."""

from ._load import config_from_dict, load_config
from ._loader import deep_merge, parse_env_vars, read_toml_file, set_nested_key
from ._models import (
    CacheConfiguration,
    LogFormat,
    LoggingConfiguration,
    LogLevel,
    StorageConfiguration,
    VaultConfiguration,
)

__all__ = [
    "CacheConfiguration",
    "LogFormat",
    "LogLevel",
    "LoggingConfiguration",
    "StorageConfiguration",
    "VaultConfiguration",
    "config_from_dict",
    "deep_merge",
    "load_config",
    "parse_env_vars",
    "read_toml_file",
    "set_nested_key",
]
