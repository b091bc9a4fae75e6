"""Folders: named top-level groups of APIs."""

from ._manager import DEFAULT_FOLDERS, FolderManager
from ._migration import find_legacy_apis, migrate_legacy_layout
from ._models import FolderMetadata, GlobalStats, MigrationResult, MoveResult
from ._protocol import ApiRelocator, FolderLookup

__all__ = [
    "DEFAULT_FOLDERS",
    "ApiRelocator",
    "FolderLookup",
    "FolderManager",
    "FolderMetadata",
    "GlobalStats",
    "MigrationResult",
    "MoveResult",
    "find_legacy_apis",
    "migrate_legacy_layout",
]
