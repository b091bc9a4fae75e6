"""Change detection between two versions of a document."""

from ._engine import compare, diff
from ._models import (
    ChangeKind,
    ChangeSummary,
    EndpointChange,
    EndpointModification,
    EndpointRef,
    SchemaRef,
    SpecDiff,
)

__all__ = [
    "ChangeKind",
    "ChangeSummary",
    "EndpointChange",
    "EndpointModification",
    "EndpointRef",
    "SchemaRef",
    "SpecDiff",
    "compare",
    "diff",
]
