# pyright: reportAny=false, reportExplicitAny=false
"""Folder records and the results of folder operations."""

from dataclasses import dataclass, field
from typing import Any, Self

import pendulum

from specvault.exceptions import ValidationError
from specvault.utils import parse_timestamp

__all__ = ["FolderMetadata", "GlobalStats", "MigrationResult", "MoveResult"]


@dataclass(frozen=True, slots=True)
class FolderMetadata:
    """Sentinel record of a folder.

    ``spec_count`` is derived. It is stored as 0 and recomputed when
    folders are listed with counts.

    Attributes:
        name: Folder name, also its top-level key.
        title: Display title.
        description: Free-text description.
        color: Display color, for example ``#10b981``.
        icon: Display icon name.
        created_at: When the folder was created (UTC).
        created_by: Who created it.
        spec_count: Number of APIs in the folder.
    """

    name: str
    title: str
    created_at: pendulum.DateTime
    description: str = ""
    color: str | None = None
    icon: str | None = None
    created_by: str = "system"
    spec_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "created_at": self.created_at.to_iso8601_string(),
            "created_by": self.created_by,
            "spec_count": self.spec_count,
        }
        if self.color is not None:
            data["color"] = self.color
        if self.icon is not None:
            data["icon"] = self.icon
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Self:
        try:
            return cls(
                name=raw["name"],
                title=raw.get("title") or raw["name"],
                created_at=parse_timestamp(raw["created_at"]),
                description=raw.get("description") or "",
                color=raw.get("color"),
                icon=raw.get("icon"),
                created_by=raw.get("created_by") or "system",
                spec_count=int(raw.get("spec_count") or 0),
            )
        except KeyError as e:
            msg = f"Folder metadata is missing required field {e.args[0]!r}"
            raise ValidationError(msg, field=str(e.args[0]), rule="required") from e


@dataclass(frozen=True, slots=True)
class GlobalStats:
    """Vault-wide counts.

    Attributes:
        folder_count: Number of folders.
        api_count: Number of APIs across all folders.
        folders: Spec count per folder name.
    """

    folder_count: int
    api_count: int
    folders: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "folder_count": self.folder_count,
            "api_count": self.api_count,
            "folders": dict(self.folders),
        }


@dataclass(frozen=True, slots=True)
class MoveResult:
    """Outcome of moving an API between folders."""

    api_id: str
    from_folder: str
    to_folder: str
    files_moved: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "api_id": self.api_id,
            "from_folder": self.from_folder,
            "to_folder": self.to_folder,
            "files_moved": self.files_moved,
        }


@dataclass(frozen=True, slots=True)
class MigrationResult:
    """Outcome of migrating a pre-folder vault into folders.

    Attributes:
        folders_created: Default folders created by the migration.
        specs_migrated: API identifiers moved into the target folder.
        errors: API identifier to error message for APIs that failed.
        skipped: True when the vault needed no migration.
    """

    folders_created: tuple[str, ...] = ()
    specs_migrated: tuple[str, ...] = ()
    errors: dict[str, str] = field(default_factory=dict)
    skipped: bool = False

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "folders_created": list(self.folders_created),
            "specs_migrated": list(self.specs_migrated),
            "errors": dict(self.errors),
            "skipped": self.skipped,
        }
