# pyright: reportAny=false, reportExplicitAny=false
"""OpenAPI document model.

A document is kept as the plain mapping tree it was parsed from, so keys the
vault does not understand (``x-`` extensions, vendor sections) survive a
load/save round trip untouched. Typed accessors cover the sections the vault
reads itself.
"""

import copy
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final, Self

__all__ = ["HTTP_METHODS", "Document", "SchemaVersion", "detect_schema_version"]

HTTP_METHODS: Final = (
    "get",
    "post",
    "put",
    "delete",
    "patch",
    "options",
    "head",
    "trace",
)


class SchemaVersion(StrEnum):
    """OpenAPI / Swagger schema versions the vault understands."""

    SWAGGER_2_0 = "2.0"
    OPENAPI_3_0 = "3.0"
    OPENAPI_3_1 = "3.1"


def detect_schema_version(content: dict[str, Any]) -> SchemaVersion | None:
    """Detect the schema version declared by a document.

    Returns:
        The detected version, or None if the document declares none the
        vault understands.
    """
    swagger = content.get("swagger")
    if swagger is not None and str(swagger) == "2.0":
        return SchemaVersion.SWAGGER_2_0

    openapi = content.get("openapi")
    if isinstance(openapi, str):
        if openapi.startswith("3.0"):
            return SchemaVersion.OPENAPI_3_0
        if openapi.startswith("3.1"):
            return SchemaVersion.OPENAPI_3_1
    return None


@dataclass(slots=True)
class Document:
    """A loaded specification document.

    The caller that loaded a document owns it; the vault never keeps a
    reference past a single load or save.

    Attributes:
        content: The document tree, exactly as parsed.
        schema_version: The detected schema version.
    """

    content: dict[str, Any]
    schema_version: SchemaVersion

    @classmethod
    def skeleton(cls, title: str, version: str, description: str = "") -> Self:
        """Build a minimal OpenAPI 3.0 document with no paths."""
        return cls(
            content={
                "openapi": "3.0.0",
                "info": {"title": title, "version": version, "description": description},
                "paths": {},
            },
            schema_version=SchemaVersion.OPENAPI_3_0,
        )

    def info(self) -> dict[str, Any]:
        info = self.content.get("info")
        return info if isinstance(info, dict) else {}

    @property
    def title(self) -> str:
        return str(self.info().get("title", ""))

    def paths(self) -> dict[str, Any]:
        paths = self.content.get("paths")
        return paths if isinstance(paths, dict) else {}

    def operations(self) -> dict[str, dict[str, Any]]:
        """Map each path to its operations, keyed by lowercase HTTP method.

        Path-level keys that are not HTTP methods (``parameters``,
        ``summary``, ``$ref``, extensions) are skipped.
        """
        result: dict[str, dict[str, Any]] = {}
        for path, item in self.paths().items():
            if not isinstance(item, dict):
                result[str(path)] = {}
                continue
            result[str(path)] = {
                method: operation
                for method, operation in item.items()
                if method in HTTP_METHODS
            }
        return result

    def schemas(self) -> dict[str, Any]:
        """Reusable schemas: ``components.schemas`` and Swagger ``definitions``."""
        schemas: dict[str, Any] = {}
        definitions = self.content.get("definitions")
        if isinstance(definitions, dict):
            schemas.update(definitions)
        components = self.content.get("components")
        if isinstance(components, dict):
            component_schemas = components.get("schemas")
            if isinstance(component_schemas, dict):
                schemas.update(component_schemas)
        return schemas

    def copy(self) -> Self:
        """Deep copy, safe to mutate independently."""
        return type(self)(
            content=copy.deepcopy(self.content), schema_version=self.schema_version
        )
