# pyright: reportAny=false, reportExplicitAny=false
"""Parsing and serializing documents as JSON or YAML."""

from typing import Any, Protocol, runtime_checkable

import orjson
import yaml

from specvault.exceptions import DocumentParseError, DocumentValidationError
from specvault.storage import DocumentFormat

from ._document import Document, detect_schema_version
from ._validator import ValidationIssue

__all__ = ["DocumentParser", "OpenApiCodec"]


@runtime_checkable
class DocumentParser(Protocol):
    """Turns stored bytes into a document and back."""

    def parse(self, content: bytes) -> Document:
        """Parse document bytes.

        Raises:
            DocumentParseError: If the bytes are not a parseable document.
        """
        ...

    def serialize(self, document: Document, fmt: DocumentFormat) -> bytes:
        """Serialize a document in the requested format."""
        ...


class OpenApiCodec:
    """JSON/YAML codec for OpenAPI and Swagger documents.

    Parsing tries JSON first and falls back to YAML, so the stored file
    extension does not have to match the content.
    """

    def parse(self, content: bytes) -> Document:
        data = self._load(content)
        if not isinstance(data, dict):
            msg = f"Expected a mapping at document root, got {type(data).__name__}"
            raise DocumentParseError(msg)

        schema_version = detect_schema_version(data)
        if schema_version is None:
            msg = "Unsupported or missing OpenAPI version (expected 2.0, 3.0.x or 3.1.x)"
            raise DocumentValidationError(
                msg,
                issues=(ValidationIssue("openapi", msg),),
            )
        return Document(content=data, schema_version=schema_version)

    def serialize(self, document: Document, fmt: DocumentFormat) -> bytes:
        if fmt == "json":
            return orjson.dumps(
                document.content,
                option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS,
            )
        return yaml.safe_dump(
            document.content,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        ).encode("utf-8")

    def _load(self, content: bytes) -> Any:
        try:
            return orjson.loads(content)
        except orjson.JSONDecodeError:
            pass

        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            msg = f"Document is neither valid JSON nor valid YAML: {e}"
            raise DocumentParseError(msg, content_type="yaml", cause=e) from e
