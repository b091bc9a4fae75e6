"""Read-through cache in front of vault storage."""

from ._cache import DEFAULT_MAX_BYTES, DEFAULT_MAX_ITEMS, CacheLayer, CacheStats, Loader
from ._keys import (
    FOLDERS_LIST,
    FOLDERS_LIST_BARE,
    FOLDERS_LIST_PATTERN,
    STATS_GLOBAL,
    api_metadata_cache_key,
    api_pattern,
    folder_count_cache_key,
    folder_pattern,
    folder_specs_cache_key,
    invalidate_folder_aggregates,
    spec_cache_key,
    spec_pattern,
    version_metadata_cache_key,
)

__all__ = [
    "DEFAULT_MAX_BYTES",
    "DEFAULT_MAX_ITEMS",
    "FOLDERS_LIST",
    "FOLDERS_LIST_BARE",
    "FOLDERS_LIST_PATTERN",
    "STATS_GLOBAL",
    "CacheLayer",
    "CacheStats",
    "Loader",
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
