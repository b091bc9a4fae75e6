"""OpenAPI documents: model, codec, validation and the document store."""

from ._codec import DocumentParser, OpenApiCodec
from ._document import HTTP_METHODS, Document, SchemaVersion, detect_schema_version
from ._store import DocumentStore, StoredDocument
from ._validator import DocumentValidator, StructuralValidator, ValidationIssue

__all__ = [
    "HTTP_METHODS",
    "Document",
    "DocumentParser",
    "DocumentStore",
    "DocumentValidator",
    "OpenApiCodec",
    "SchemaVersion",
    "StoredDocument",
    "StructuralValidator",
    "ValidationIssue",
    "detect_schema_version",
]
