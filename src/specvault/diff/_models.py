# pyright: reportAny=false, reportExplicitAny=false
"""Data models for document comparison.

All models are frozen dataclasses with slots. ``ChangeSummary`` is what the
lineage layer persists with each version; ``SpecDiff`` adds the per-endpoint
and per-schema detail behind the summary for compare-style callers.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Self

__all__ = [
    "ChangeKind",
    "ChangeSummary",
    "EndpointChange",
    "EndpointModification",
    "EndpointRef",
    "SchemaRef",
    "SpecDiff",
]


class ChangeKind(StrEnum):
    """Shallow signals compared between two versions of one operation."""

    SUMMARY = "summary"
    PARAMETERS = "parameters"
    REQUEST_BODY_ADDED = "request_body_added"
    REQUEST_BODY_REMOVED = "request_body_removed"
    RESPONSES = "responses"


@dataclass(frozen=True, slots=True)
class EndpointChange:
    kind: ChangeKind
    description: str


@dataclass(frozen=True, slots=True)
class EndpointRef:
    """A path and the methods added or removed on it."""

    path: str
    methods: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class EndpointModification:
    """One operation present in both documents whose signals differ."""

    path: str
    method: str
    changes: tuple[EndpointChange, ...]

    @property
    def label(self) -> str:
        return f"{self.method.upper()} {self.path}"

    def has(self, kind: ChangeKind) -> bool:
        return any(c.kind is kind for c in self.changes)


@dataclass(frozen=True, slots=True)
class SchemaRef:
    name: str
    type: str | None = None


@dataclass(frozen=True, slots=True)
class ChangeSummary:
    """Summary of what changed between two versions.

    Endpoint entries are ``"METHOD path"`` strings, one per method.

    Attributes:
        endpoints_added: Operations only in the newer document.
        endpoints_modified: Operations in both whose shallow signals differ.
        endpoints_deleted: Operations only in the older document.
        schemas_added: Reusable schemas only in the newer document.
        schemas_modified: Reusable schemas in both whose content differs.
        schemas_deleted: Reusable schemas only in the older document.
        breaking_changes: Human-readable breaking-change findings.
    """

    endpoints_added: tuple[str, ...] = ()
    endpoints_modified: tuple[str, ...] = ()
    endpoints_deleted: tuple[str, ...] = ()
    schemas_added: tuple[str, ...] = ()
    schemas_modified: tuple[str, ...] = ()
    schemas_deleted: tuple[str, ...] = ()
    breaking_changes: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> Self:
        return cls()

    @property
    def has_breaking_changes(self) -> bool:
        return bool(self.breaking_changes)

    @property
    def is_empty(self) -> bool:
        return not any(
            (
                self.endpoints_added,
                self.endpoints_modified,
                self.endpoints_deleted,
                self.schemas_added,
                self.schemas_modified,
                self.schemas_deleted,
                self.breaking_changes,
            )
        )

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "endpoints_added": list(self.endpoints_added),
            "endpoints_modified": list(self.endpoints_modified),
            "endpoints_deleted": list(self.endpoints_deleted),
            "schemas_added": list(self.schemas_added),
            "schemas_modified": list(self.schemas_modified),
            "schemas_deleted": list(self.schemas_deleted),
            "breaking_changes": list(self.breaking_changes),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Self:
        return cls(
            endpoints_added=tuple(raw.get("endpoints_added", ())),
            endpoints_modified=tuple(raw.get("endpoints_modified", ())),
            endpoints_deleted=tuple(raw.get("endpoints_deleted", ())),
            schemas_added=tuple(raw.get("schemas_added", ())),
            schemas_modified=tuple(raw.get("schemas_modified", ())),
            schemas_deleted=tuple(raw.get("schemas_deleted", ())),
            breaking_changes=tuple(raw.get("breaking_changes", ())),
        )


@dataclass(frozen=True, slots=True)
class SpecDiff:
    """A change summary plus the detail it was computed from."""

    summary: ChangeSummary
    added_endpoints: tuple[EndpointRef, ...] = ()
    removed_endpoints: tuple[EndpointRef, ...] = ()
    modified_endpoints: tuple[EndpointModification, ...] = ()
    added_schemas: tuple[SchemaRef, ...] = ()
    removed_schemas: tuple[SchemaRef, ...] = ()
    modified_schemas: tuple[SchemaRef, ...] = ()
