"""Cache key names used across the vault."""

from typing import Final

from ._cache import CacheLayer

__all__ = [
    "FOLDERS_LIST",
    "FOLDERS_LIST_BARE",
    "FOLDERS_LIST_PATTERN",
    "STATS_GLOBAL",
    "api_metadata_cache_key",
    "api_pattern",
    "folder_count_cache_key",
    "folder_pattern",
    "folder_specs_cache_key",
    "invalidate_folder_aggregates",
    "spec_cache_key",
    "spec_pattern",
    "version_metadata_cache_key",
]

FOLDERS_LIST: Final = "folders:list"
FOLDERS_LIST_BARE: Final = "folders:list:bare"
FOLDERS_LIST_PATTERN: Final = "folders:list*"
STATS_GLOBAL: Final = "stats:global"


def spec_cache_key(api_id: str, version: str) -> str:
    return f"specs:{api_id}:{version}"


def spec_pattern(api_id: str) -> str:
    return f"specs:{api_id}:*"


def folder_count_cache_key(folder: str) -> str:
    return f"folders:{folder}:count"


def folder_specs_cache_key(folder: str) -> str:
    return f"folders:{folder}:specs"


def folder_pattern(folder: str) -> str:
    return f"folders:{folder}:*"


def api_metadata_cache_key(api_id: str) -> str:
    return f"apis:{api_id}:metadata"


def version_metadata_cache_key(api_id: str, version: str) -> str:
    return f"apis:{api_id}:versions:{version}"


def api_pattern(api_id: str) -> str:
    return f"apis:{api_id}:*"


def invalidate_folder_aggregates(cache: CacheLayer, *folders: str) -> None:
    """Drop folder listings, the given folders' aggregates and global stats."""
    cache.invalidate(FOLDERS_LIST_PATTERN)
    for folder in folders:
        cache.invalidate(folder_pattern(folder))
    cache.invalidate(STATS_GLOBAL)
