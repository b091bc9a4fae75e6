"""Storage providers and the vault key layout."""

from ._filesystem import FileSystemStorage
from ._keys import (
    AUDIT_PREFIX,
    DOCUMENT_FORMATS,
    FOLDER_SENTINEL,
    METADATA_FILE,
    DocumentFormat,
    api_metadata_key,
    api_prefix,
    audit_key,
    document_key,
    folder_sentinel_key,
    key_parts,
    validate_key,
    version_metadata_key,
)
from ._memory import MemoryStorage
from ._protocol import StorageProvider

__all__ = [
    "AUDIT_PREFIX",
    "DOCUMENT_FORMATS",
    "FOLDER_SENTINEL",
    "METADATA_FILE",
    "DocumentFormat",
    "FileSystemStorage",
    "MemoryStorage",
    "StorageProvider",
    "api_metadata_key",
    "api_prefix",
    "audit_key",
    "document_key",
    "folder_sentinel_key",
    "key_parts",
    "validate_key",
    "version_metadata_key",
]
