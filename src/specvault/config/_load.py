"""Configuration loading entry point."""

from pathlib import Path
from typing import Any

import pydantic

from specvault.exceptions import ConfigValidationError

from ._loader import deep_merge, parse_env_vars, read_toml_file
from ._models import VaultConfiguration

__all__ = ["config_from_dict", "load_config"]


def config_from_dict(data: dict[str, Any]) -> VaultConfiguration:  # pyright: ignore[reportExplicitAny]
    """Validate a configuration dictionary.

    Raises:
        ConfigValidationError: If a value fails validation. The first failing
            value is reported.
    """
    try:
        return VaultConfiguration.model_validate(data)
    except pydantic.ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in error["loc"])
        msg = f"Invalid configuration value for '{key}': {error['msg']}"
        raise ConfigValidationError(
            msg, key=key, value=error.get("input"), expected=error["msg"]
        ) from e


def load_config(
    path: Path | None = None,
    *,
    include_env: bool = True,
) -> VaultConfiguration:
    """Load the vault configuration.

    Sources are merged with later ones winning: built-in defaults, the TOML
    file at ``path``, then ``SPECVAULT_`` environment variables.

    Args:
        path: Optional TOML file; it must exist when given.
        include_env: Read ``SPECVAULT_`` environment variables.

    Returns:
        The validated configuration.

    Raises:
        ConfigLoadError: If the file is missing or is not valid TOML.
        ConfigValidationError: If a merged value fails validation.
    """
    data: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    if path is not None:
        data = read_toml_file(path)
    if include_env:
        data = deep_merge(data, parse_env_vars())
    return config_from_dict(data)
