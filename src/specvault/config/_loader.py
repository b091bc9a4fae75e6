# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""TOML configuration file loading, environment parsing and merging."""

import os
import tomllib
from pathlib import Path
from typing import Any

import orjson

from specvault.exceptions import ConfigLoadError

__all__ = ["deep_merge", "parse_env_vars", "read_toml_file", "set_nested_key"]

ENV_PREFIX = "SPECVAULT_"


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read and parse a TOML file.

    Raises:
        ConfigLoadError: If the file is missing or cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        msg = f"Config file not found: {path}"
        raise ConfigLoadError(msg, path=path) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        raise ConfigLoadError(
            msg,
            path=path,
            line=getattr(e, "lineno", None),
            column=getattr(e, "colno", None),
        ) from e


def deep_merge(
    base: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    override: dict[str, Any],  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Merge ``override`` into ``base`` and return a new dictionary.

    Dictionaries merge recursively; any other value in ``override`` replaces
    the value in ``base``. Neither input is modified.
    """
    result: dict[str, Any] = {k: _copy(v) for k, v in base.items()}  # pyright: ignore[reportExplicitAny]
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = _copy(value)
    return result


def parse_env_vars(
    prefix: str = ENV_PREFIX,
    environ: dict[str, str] | None = None,
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Parse prefixed environment variables into a nested dictionary.

    A double underscore separates sections:
    ``SPECVAULT_CACHE__MAX_ITEMS=10`` becomes ``{"cache": {"max_items": 10}}``.

    Args:
        prefix: Variable name prefix.
        environ: Variables to read; defaults to ``os.environ``.

    Returns:
        The parsed values.
    """
    source = os.environ if environ is None else environ
    result: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    for name, raw in source.items():
        if not name.startswith(prefix):
            continue
        config_key = name[len(prefix) :]
        if not config_key:
            continue
        set_nested_key(result, config_key.replace("__", ".").lower(), _parse_env_value(raw))
    return result


def set_nested_key(
    d: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    key_path: str,
    value: Any,  # pyright: ignore[reportExplicitAny]
) -> None:
    """Set a value at a dotted key path, creating dictionaries on the way.

    Example:
        >>> d = {}
        >>> set_nested_key(d, "logging.level", "debug")
        >>> d
        {'logging': {'level': 'debug'}}
    """
    *parents, leaf = key_path.split(".")
    current = d
    for part in parents:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[leaf] = value


def _parse_env_value(value: str) -> Any:  # pyright: ignore[reportExplicitAny]
    # Order: boolean, integer, float, JSON array or object, string.
    lower_value = value.lower()
    if lower_value in ("true", "false"):
        return lower_value == "true"

    try:
        return int(value)
    except ValueError:
        pass

    if "." in value:
        try:
            return float(value)
        except ValueError:
            pass

    if (value.startswith("[") and value.endswith("]")) or (
        value.startswith("{") and value.endswith("}")
    ):
        try:
            return orjson.loads(value)
        except orjson.JSONDecodeError:
            pass

    return value


def _copy(value: Any) -> Any:  # pyright: ignore[reportExplicitAny]
    if isinstance(value, dict):
        return {k: _copy(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy(item) for item in value]
    return value
