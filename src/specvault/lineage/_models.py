# pyright: reportAny=false, reportExplicitAny=false
"""Lineage records: per-API metadata and per-version metadata.

Both records are frozen dataclasses serialized as JSON objects with
snake_case keys. ``ApiMetadata`` checks its own invariants on construction,
so a record that violates them can never be built or loaded.
"""

from dataclasses import dataclass, field
from typing import Any, Self

import pendulum

from specvault._identifiers import validate_api_id, validate_version_tag
from specvault.diff import ChangeSummary
from specvault.exceptions import ValidationError
from specvault.utils import parse_timestamp

__all__ = ["ApiMetadata", "VersionMetadata"]


@dataclass(frozen=True, slots=True)
class ApiMetadata:
    """Lineage record for one API.

    Attributes:
        api_id: The API identifier.
        name: Display name.
        owner: Owning team or person.
        created_at: When the API was created (UTC).
        folder: The folder that owns this record.
        versions: Version tags, newest first.
        current_version: The version edits target by default.
        latest_stable: The version marked production-ready.
        description: Optional description.
        tags: Optional free-form tags.
    """

    api_id: str
    name: str
    owner: str
    created_at: pendulum.DateTime
    folder: str
    versions: tuple[str, ...]
    current_version: str
    latest_stable: str
    description: str | None = None
    tags: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        validate_api_id(self.api_id)
        if len(set(self.versions)) != len(self.versions):
            msg = f"Duplicate versions in lineage of {self.api_id}: {self.versions}"
            raise ValidationError(
                msg, field="versions", received=self.versions, rule="unique"
            )
        for name, value in (
            ("current_version", self.current_version),
            ("latest_stable", self.latest_stable),
        ):
            if value not in self.versions:
                msg = f"{name} {value!r} is not a version of {self.api_id}"
                raise ValidationError(
                    msg,
                    field=name,
                    expected=f"one of {list(self.versions)}",
                    received=value,
                    rule="membership",
                )

    def has_version(self, version: str) -> bool:
        return version in self.versions

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "api_id": self.api_id,
            "name": self.name,
            "owner": self.owner,
            "created_at": self.created_at.to_iso8601_string(),
            "folder": self.folder,
            "versions": list(self.versions),
            "current_version": self.current_version,
            "latest_stable": self.latest_stable,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.tags:
            data["tags"] = list(self.tags)
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Self:
        """Build a record from its stored form.

        Raises:
            ValidationError: If a field is missing or an invariant fails.
        """
        try:
            return cls(
                api_id=raw["api_id"],
                name=raw["name"],
                owner=raw.get("owner", ""),
                created_at=parse_timestamp(raw["created_at"]),
                folder=raw["folder"],
                versions=tuple(raw["versions"]),
                current_version=raw["current_version"],
                latest_stable=raw["latest_stable"],
                description=raw.get("description"),
                tags=tuple(raw.get("tags") or ()),
            )
        except KeyError as e:
            msg = f"API metadata is missing required field {e.args[0]!r}"
            raise ValidationError(msg, field=str(e.args[0]), rule="required") from e


@dataclass(frozen=True, slots=True)
class VersionMetadata:
    """Append-only record describing one version.

    Attributes:
        version: The version tag.
        created_at: When the version was created (UTC).
        created_by: Who created it.
        description: Free-text description of the version.
        parent_version: The version it was derived from, if any.
        changes: What changed relative to ``parent_version``.
    """

    version: str
    created_at: pendulum.DateTime
    created_by: str
    description: str = ""
    parent_version: str | None = None
    changes: ChangeSummary = field(default_factory=ChangeSummary)

    def __post_init__(self) -> None:
        validate_version_tag(self.version)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "created_at": self.created_at.to_iso8601_string(),
            "created_by": self.created_by,
            "description": self.description,
            "parent_version": self.parent_version,
            "changes": self.changes.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Self:
        try:
            return cls(
                version=raw["version"],
                created_at=parse_timestamp(raw["created_at"]),
                created_by=raw.get("created_by", "system"),
                description=raw.get("description", ""),
                parent_version=raw.get("parent_version"),
                changes=ChangeSummary.from_dict(raw.get("changes") or {}),
            )
        except KeyError as e:
            msg = f"Version metadata is missing required field {e.args[0]!r}"
            raise ValidationError(msg, field=str(e.args[0]), rule="required") from e
