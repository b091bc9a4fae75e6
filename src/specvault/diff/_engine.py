# pyright: reportAny=false, reportExplicitAny=false
"""Shallow, heuristic comparison of two documents.

The comparison is shallow. Operations are compared on four
signals only: summary text, parameter count, request body presence and
response count. Reusable schemas are compared by the bytes of their JSON
serialization, so any difference (including key order or a description
edit) marks a schema as modified. Breaking-change findings are heuristics
for a human reviewer, not a compatibility verdict.

Both functions are pure: no I/O, and the documents are not modified.
"""

from typing import Any

import orjson

from specvault.documents import Document

from ._models import (
    ChangeKind,
    ChangeSummary,
    EndpointChange,
    EndpointModification,
    EndpointRef,
    SchemaRef,
    SpecDiff,
)

__all__ = ["compare", "diff"]


def diff(old: Document, new: Document) -> ChangeSummary:
    """Summarize what changed from ``old`` to ``new``."""
    return compare(old, new).summary


def compare(old: Document, new: Document) -> SpecDiff:
    """Compare two documents and return the summary with its detail.

    Args:
        old: The base document.
        new: The document compared against the base.

    Returns:
        The change summary together with per-endpoint and per-schema detail.
    """
    old_ops = old.operations()
    new_ops = new.operations()

    added = _endpoint_difference(new_ops, old_ops)
    removed = _endpoint_difference(old_ops, new_ops)
    modified = _modified_endpoints(old_ops, new_ops)

    old_schemas = old.schemas()
    new_schemas = new.schemas()
    schemas_added = [n for n in new_schemas if n not in old_schemas]
    schemas_deleted = [n for n in old_schemas if n not in new_schemas]
    schemas_modified = [
        n
        for n in new_schemas
        if n in old_schemas
        and _serialized(old_schemas[n]) != _serialized(new_schemas[n])
    ]

    summary = ChangeSummary(
        endpoints_added=_labels(added),
        endpoints_modified=tuple(m.label for m in modified),
        endpoints_deleted=_labels(removed),
        schemas_added=tuple(schemas_added),
        schemas_modified=tuple(schemas_modified),
        schemas_deleted=tuple(schemas_deleted),
        breaking_changes=_breaking_changes(
            removed, modified, schemas_deleted, schemas_modified
        ),
    )

    return SpecDiff(
        summary=summary,
        added_endpoints=added,
        removed_endpoints=removed,
        modified_endpoints=modified,
        added_schemas=tuple(
            SchemaRef(n, _schema_type(new_schemas[n])) for n in schemas_added
        ),
        removed_schemas=tuple(
            SchemaRef(n, _schema_type(old_schemas[n])) for n in schemas_deleted
        ),
        modified_schemas=tuple(
            SchemaRef(n, _schema_type(new_schemas[n])) for n in schemas_modified
        ),
    )


# =============================================================================
# Endpoints
# =============================================================================


def _endpoint_difference(
    left: dict[str, dict[str, Any]], right: dict[str, dict[str, Any]]
) -> tuple[EndpointRef, ...]:
    """Methods present in ``left`` but not ``right``, grouped by path."""
    refs: list[EndpointRef] = []
    for path, operations in left.items():
        other = right.get(path, {})
        methods = tuple(m for m in operations if m not in other)
        if methods:
            refs.append(EndpointRef(path=path, methods=methods))
    return tuple(refs)


def _labels(refs: tuple[EndpointRef, ...]) -> tuple[str, ...]:
    return tuple(f"{m.upper()} {ref.path}" for ref in refs for m in ref.methods)


def _modified_endpoints(
    old_ops: dict[str, dict[str, Any]], new_ops: dict[str, dict[str, Any]]
) -> tuple[EndpointModification, ...]:
    modified: list[EndpointModification] = []
    for path, new_methods in new_ops.items():
        old_methods = old_ops.get(path)
        if old_methods is None:
            continue
        for method, new_op in new_methods.items():
            if method not in old_methods:
                continue
            changes = _operation_changes(
                _as_mapping(old_methods[method]), _as_mapping(new_op)
            )
            if changes:
                modified.append(
                    EndpointModification(path=path, method=method, changes=changes)
                )
    return tuple(modified)


def _operation_changes(
    old_op: dict[str, Any], new_op: dict[str, Any]
) -> tuple[EndpointChange, ...]:
    changes: list[EndpointChange] = []

    if old_op.get("summary") != new_op.get("summary"):
        changes.append(EndpointChange(ChangeKind.SUMMARY, "summary changed"))

    old_params = len(_as_list(old_op.get("parameters")))
    new_params = len(_as_list(new_op.get("parameters")))
    if old_params != new_params:
        changes.append(
            EndpointChange(
                ChangeKind.PARAMETERS,
                f"parameters changed ({old_params} -> {new_params})",
            )
        )

    old_body = "requestBody" in old_op
    new_body = "requestBody" in new_op
    if old_body and not new_body:
        changes.append(
            EndpointChange(ChangeKind.REQUEST_BODY_REMOVED, "request body removed")
        )
    elif new_body and not old_body:
        changes.append(
            EndpointChange(ChangeKind.REQUEST_BODY_ADDED, "request body added")
        )

    old_responses = len(_as_mapping(old_op.get("responses")))
    new_responses = len(_as_mapping(new_op.get("responses")))
    if old_responses != new_responses:
        changes.append(
            EndpointChange(
                ChangeKind.RESPONSES,
                f"responses changed ({old_responses} -> {new_responses})",
            )
        )

    return tuple(changes)


# =============================================================================
# Breaking changes
# =============================================================================


def _breaking_changes(
    removed: tuple[EndpointRef, ...],
    modified: tuple[EndpointModification, ...],
    schemas_deleted: list[str],
    schemas_modified: list[str],
) -> tuple[str, ...]:
    findings = [f"Removed endpoint: {label}" for label in _labels(removed)]

    for mod in modified:
        if mod.has(ChangeKind.REQUEST_BODY_REMOVED):
            findings.append(f"Breaking: {mod.label} - request body removed")
        if mod.has(ChangeKind.PARAMETERS):
            findings.append(f"Potentially breaking: {mod.label} - parameters changed")

    findings.extend(f"Removed schema: {name}" for name in schemas_deleted)

    if schemas_modified:
        findings.append(
            f"Modified schemas: {', '.join(schemas_modified)} (review required)"
        )
    return tuple(findings)


# =============================================================================
# Helpers
# =============================================================================


def _serialized(value: Any) -> bytes:
    return orjson.dumps(value, default=str, option=orjson.OPT_NON_STR_KEYS)


def _schema_type(schema: Any) -> str | None:
    if isinstance(schema, dict):
        schema_type = schema.get("type")
        if isinstance(schema_type, str):
            return schema_type
    return None


def _as_mapping(value: Any) -> dict[Any, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []
