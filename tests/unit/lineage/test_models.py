from typing import Any

import pendulum
import pytest

from specvault.diff import ChangeSummary
from specvault.exceptions import ValidationError
from specvault.lineage import ApiMetadata, VersionMetadata

CREATED = pendulum.datetime(2024, 1, 15, 9, 30, tz="UTC")


def _api(**overrides: Any) -> ApiMetadata:
    fields: dict[str, Any] = {
        "api_id": "petstore",
        "name": "Petstore",
        "owner": "pets-team",
        "created_at": CREATED,
        "folder": "active",
        "versions": ("v1.1.0", "v1.0.0"),
        "current_version": "v1.1.0",
        "latest_stable": "v1.0.0",
    }
    fields.update(overrides)
    return ApiMetadata(**fields)


class TestApiMetadata:
    def test_round_trip(self) -> None:
        metadata = _api(description="Pets", tags=("public",))

        assert ApiMetadata.from_dict(metadata.to_dict()) == metadata

    def test_optional_fields_are_omitted(self) -> None:
        data = _api().to_dict()

        assert "description" not in data
        assert "tags" not in data
        assert data["created_at"] == "2024-01-15T09:30:00Z"

    def test_rejects_duplicate_versions(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _ = _api(versions=("v1.0.0", "v1.0.0"), current_version="v1.0.0")

        assert exc_info.value.rule == "unique"

    @pytest.mark.parametrize("field", ["current_version", "latest_stable"])
    def test_pointers_must_be_versions(self, field: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _ = _api(**{field: "v9.0.0"})

        assert exc_info.value.field == field
        assert exc_info.value.rule == "membership"

    def test_rejects_bad_api_id(self) -> None:
        with pytest.raises(ValidationError):
            _ = _api(api_id="Pet_Store")

    def test_from_dict_reports_missing_field(self) -> None:
        data = _api().to_dict()
        del data["versions"]

        with pytest.raises(ValidationError, match="'versions'") as exc_info:
            _ = ApiMetadata.from_dict(data)

        assert exc_info.value.rule == "required"

    def test_from_dict_defaults_owner(self) -> None:
        data = _api().to_dict()
        del data["owner"]

        assert ApiMetadata.from_dict(data).owner == ""


class TestVersionMetadata:
    def test_round_trip(self) -> None:
        metadata = VersionMetadata(
            version="v1.1.0",
            created_at=CREATED,
            created_by="alice",
            description="Adds owners",
            parent_version="v1.0.0",
            changes=ChangeSummary(endpoints_added=("GET /owners",)),
        )

        assert VersionMetadata.from_dict(metadata.to_dict()) == metadata

    def test_defaults_from_sparse_record(self) -> None:
        metadata = VersionMetadata.from_dict(
            {"version": "v20240115-093000", "created_at": "2024-01-15T09:30:00"}
        )

        assert metadata.created_by == "system"
        assert metadata.parent_version is None
        assert metadata.changes.is_empty
        assert metadata.created_at == CREATED

    def test_rejects_bad_version_tag(self) -> None:
        with pytest.raises(ValidationError):
            _ = VersionMetadata(version="1.0", created_at=CREATED, created_by="alice")
