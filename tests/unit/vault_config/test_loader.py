from pathlib import Path

import pytest

from specvault.config import deep_merge, parse_env_vars, read_toml_file, set_nested_key
from specvault.exceptions import ConfigLoadError


class TestReadTomlFile:
    def test_reads_sections(self, tmp_path: Path) -> None:
        path = tmp_path / "specvault.toml"
        _ = path.write_text('[storage]\nbase_path = "/srv/vault"\n')

        assert read_toml_file(path) == {"storage": {"base_path": "/srv/vault"}}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="Config file not found"):
            _ = read_toml_file(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "specvault.toml"
        _ = path.write_text("[storage]\nbase_path = \n")

        with pytest.raises(ConfigLoadError) as exc_info:
            _ = read_toml_file(path)

        assert exc_info.value.path == path


class TestDeepMerge:
    def test_nested_values_merge(self) -> None:
        base = {"storage": {"base_path": "a", "default_folder": "active"}, "x": 1}
        override = {"storage": {"base_path": "b"}}

        assert deep_merge(base, override) == {
            "storage": {"base_path": "b", "default_folder": "active"},
            "x": 1,
        }

    def test_non_dict_replaces_dict(self) -> None:
        assert deep_merge({"a": {"b": 1}}, {"a": 2}) == {"a": 2}

    def test_inputs_are_not_modified(self) -> None:
        base = {"a": {"b": [1]}}
        override = {"a": {"c": 2}}

        merged = deep_merge(base, override)
        merged["a"]["b"].append(2)

        assert base == {"a": {"b": [1]}}
        assert override == {"a": {"c": 2}}


class TestParseEnvVars:
    def test_sections_and_types(self) -> None:
        environ = {
            "SPECVAULT_STORAGE__BASE_PATH": "/srv/vault",
            "SPECVAULT_CACHE__MAX_ITEMS": "10",
            "SPECVAULT_CACHE__REVALIDATE": "False",
            "SPECVAULT_RATIO": "0.5",
            "SPECVAULT_TAGS": '["a", "b"]',
            "SPECVAULT_BROKEN": "[not json]",
            "SPECVAULT_": "ignored",
            "OTHER_VALUE": "ignored",
        }

        assert parse_env_vars(environ=environ) == {
            "storage": {"base_path": "/srv/vault"},
            "cache": {"max_items": 10, "revalidate": False},
            "ratio": 0.5,
            "tags": ["a", "b"],
            "broken": "[not json]",
        }

    def test_yes_and_no_stay_strings(self) -> None:
        assert parse_env_vars(environ={"SPECVAULT_FLAG": "yes"}) == {"flag": "yes"}

    def test_custom_prefix(self) -> None:
        assert parse_env_vars("APP_", {"APP_LOGGING__LEVEL": "debug"}) == {
            "logging": {"level": "debug"}
        }


def test_set_nested_key_replaces_scalar_parent() -> None:
    data = {"logging": "debug"}

    set_nested_key(data, "logging.level", "info")

    assert data == {"logging": {"level": "info"}}
