# pyright: reportAny=false, reportExplicitAny=false
"""Document validation.

The vault only needs a validator that answers "is this document usable".
``StructuralValidator`` checks the top-level shape an OpenAPI document must
have; a full schema validator or linter can be plugged in through the
``DocumentValidator`` protocol.
"""

from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

from ._document import HTTP_METHODS, Document, SchemaVersion

__all__ = ["DocumentValidator", "StructuralValidator", "ValidationIssue"]


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A problem found in a document.

    Attributes:
        path: JSON-pointer-like location, e.g. ``paths./pets.get``.
        message: Human-readable description.
        severity: Errors make a document unusable; warnings do not.
    """

    path: str
    message: str
    severity: Literal["error", "warning"] = "error"


@runtime_checkable
class DocumentValidator(Protocol):
    """Validates a parsed document."""

    def validate(self, document: Document) -> list[ValidationIssue]:
        """Return every issue found; an empty list means the document is valid."""
        ...


class StructuralValidator:
    """Checks the top-level structure of an OpenAPI or Swagger document."""

    def validate(self, document: Document) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        content = document.content

        issues.extend(self._check_info(content.get("info")))

        paths = content.get("paths")
        if paths is None:
            # OpenAPI 3.1 permits a document with only webhooks or components.
            if document.schema_version is not SchemaVersion.OPENAPI_3_1:
                issues.append(ValidationIssue("paths", "Missing required 'paths'"))
        elif not isinstance(paths, dict):
            issues.append(ValidationIssue("paths", "'paths' must be a mapping"))
        else:
            issues.extend(self._check_paths(paths))

        components = content.get("components")
        if components is not None:
            if not isinstance(components, dict):
                issues.append(
                    ValidationIssue("components", "'components' must be a mapping")
                )
            elif not isinstance(components.get("schemas", {}), dict):
                issues.append(
                    ValidationIssue(
                        "components.schemas", "'components.schemas' must be a mapping"
                    )
                )

        return issues

    def _check_info(self, info: Any) -> list[ValidationIssue]:
        if info is None:
            return [ValidationIssue("info", "Missing required 'info'")]
        if not isinstance(info, dict):
            return [ValidationIssue("info", "'info' must be a mapping")]

        issues: list[ValidationIssue] = []
        for required in ("title", "version"):
            value = info.get(required)
            if value is None:
                issues.append(
                    ValidationIssue(f"info.{required}", f"Missing required '{required}'")
                )
            elif not isinstance(value, str):
                issues.append(
                    ValidationIssue(f"info.{required}", f"'{required}' must be a string")
                )
        return issues

    def _check_paths(self, paths: dict[Any, Any]) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for path, item in paths.items():
            location = f"paths.{path}"
            if not str(path).startswith("/"):
                issues.append(ValidationIssue(location, "Path must start with '/'"))
            if not isinstance(item, dict):
                issues.append(ValidationIssue(location, "Path item must be a mapping"))
                continue
            for method in (m for m in HTTP_METHODS if m in item):
                operation = item[method]
                op_location = f"{location}.{method}"
                if not isinstance(operation, dict):
                    issues.append(
                        ValidationIssue(op_location, "Operation must be a mapping")
                    )
                elif "responses" not in operation:
                    issues.append(
                        ValidationIssue(
                            op_location, "Operation has no responses", "warning"
                        )
                    )
        return issues

