"""Per-API version lineage."""

from ._manager import LineageManager
from ._models import ApiMetadata, VersionMetadata

__all__ = ["ApiMetadata", "LineageManager", "VersionMetadata"]
