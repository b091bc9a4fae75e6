import pendulum
import pytest

from specvault._identifiers import (
    is_semantic_version,
    timestamp_version_tag,
    validate_api_id,
    validate_folder_name,
    validate_version_tag,
)
from specvault.exceptions import ValidationError


class TestValidateApiId:
    @pytest.mark.parametrize("api_id", ["petstore", "pet-store-2", "a", "123"])
    def test_accepts_lowercase_alphanumeric_with_hyphens(self, api_id: str) -> None:
        assert validate_api_id(api_id) == api_id

    @pytest.mark.parametrize("api_id", ["", "PetStore", "pet_store", "pet store", "../x"])
    def test_rejects_other_identifiers(self, api_id: str) -> None:
        with pytest.raises(ValidationError, match="Invalid API id") as exc_info:
            _ = validate_api_id(api_id)

        assert exc_info.value.field == "api_id"
        assert exc_info.value.rule == "pattern"
        assert exc_info.value.received == api_id


class TestValidateVersionTag:
    @pytest.mark.parametrize("version", ["v1.0.0", "v10.20.30", "v20240115-093000"])
    def test_accepts_semver_and_timestamp_tags(self, version: str) -> None:
        assert validate_version_tag(version) == version

    @pytest.mark.parametrize(
        "version", ["1.0.0", "v1.0", "v1.0.0-beta", "v2024011-093000", "latest", ""]
    )
    def test_rejects_other_tags(self, version: str) -> None:
        with pytest.raises(ValidationError, match="Invalid version tag"):
            _ = validate_version_tag(version)

    def test_is_semantic_version(self) -> None:
        assert is_semantic_version("v1.2.3")
        assert not is_semantic_version("v20240115-093000")


class TestTimestampVersionTag:
    def test_formats_utc_instant(self) -> None:
        instant = pendulum.datetime(2024, 1, 15, 9, 30, 5, tz="UTC")

        assert timestamp_version_tag(instant) == "v20240115-093005"

    def test_converts_to_utc(self) -> None:
        instant = pendulum.datetime(2024, 1, 15, 10, 30, 5, tz="Europe/Berlin")

        assert timestamp_version_tag(instant) == "v20240115-093005"

    def test_default_tag_is_valid(self) -> None:
        assert validate_version_tag(timestamp_version_tag())


class TestValidateFolderName:
    @pytest.mark.parametrize("name", ["active", "team-a", "q3-2024", "ab"])
    def test_accepts_kebab_case(self, name: str) -> None:
        assert validate_folder_name(name) == name

    @pytest.mark.parametrize(
        ("name", "rule"),
        [
            ("a", "length"),
            ("x" * 65, "length"),
            ("con", "reserved"),
            ("lpt9", "reserved"),
            ("..", "reserved"),
            ("Team", "pattern"),
            ("team--a", "pattern"),
            ("-team", "pattern"),
            ("team_a", "pattern"),
        ],
    )
    def test_rejects_invalid_names(self, name: str, rule: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _ = validate_folder_name(name)

        assert exc_info.value.rule == rule
        assert exc_info.value.field == "name"
