"""Storage key validation and the key layout of a vault.

Layout::

    {folder}/_folder.json                         folder sentinel
    {folder}/{api_id}/metadata.json               API lineage record
    {folder}/{api_id}/{version}/metadata.json     version record
    {folder}/{api_id}/{version}/spec.{yaml|json}  document bytes
    _audit/{api_id}.jsonl                         audit trail
"""

import re
from typing import Final, Literal

from specvault.exceptions import ValidationError

__all__ = [
    "AUDIT_PREFIX",
    "DOCUMENT_FORMATS",
    "FOLDER_SENTINEL",
    "METADATA_FILE",
    "DocumentFormat",
    "api_metadata_key",
    "api_prefix",
    "audit_key",
    "document_key",
    "folder_sentinel_key",
    "key_parts",
    "validate_key",
    "version_metadata_key",
]

DocumentFormat = Literal["yaml", "json"]

FOLDER_SENTINEL: Final = "_folder.json"
METADATA_FILE: Final = "metadata.json"
AUDIT_PREFIX: Final = "_audit"
DOCUMENT_FORMATS: Final[tuple[DocumentFormat, ...]] = ("yaml", "json")

_DRIVE_PATTERN: Final = re.compile(r"^/?[A-Za-z]:")


def validate_key(key: str, *, allow_empty: bool = False) -> str:
    """Validate a storage key.

    Keys are slash-separated relative paths. Traversal segments, absolute
    system paths, and backslashes are rejected.

    Args:
        key: The key to validate.
        allow_empty: Accept the empty key (the storage root), used for
            listing.

    Returns:
        The key with any single leading slash removed.

    Raises:
        ValidationError: If the key is malformed.
    """
    if not key:
        if allow_empty:
            return key
        msg = "Storage key cannot be empty"
        raise ValidationError(msg, field="key", received=key, rule="non_empty")

    if key.startswith("//") or _DRIVE_PATTERN.match(key) or "\\" in key:
        msg = f"Absolute paths are not allowed in storage keys: {key!r}"
        raise ValidationError(msg, field="key", received=key, rule="relative")

    if ".." in key.split("/"):
        msg = f"Path traversal is not allowed in storage keys: {key!r}"
        raise ValidationError(msg, field="key", received=key, rule="traversal")

    return key.removeprefix("/")


def key_parts(key: str) -> list[str]:
    """Split a key into its non-empty segments."""
    return [part for part in key.split("/") if part]


def folder_sentinel_key(folder: str) -> str:
    return f"{folder}/{FOLDER_SENTINEL}"


def api_prefix(folder: str, api_id: str) -> str:
    return f"{folder}/{api_id}"


def api_metadata_key(folder: str, api_id: str) -> str:
    return f"{folder}/{api_id}/{METADATA_FILE}"


def version_metadata_key(folder: str, api_id: str, version: str) -> str:
    return f"{folder}/{api_id}/{version}/{METADATA_FILE}"


def document_key(
    folder: str, api_id: str, version: str, fmt: DocumentFormat = "yaml"
) -> str:
    return f"{folder}/{api_id}/{version}/spec.{fmt}"


def audit_key(api_id: str) -> str:
    return f"{AUDIT_PREFIX}/{api_id}.jsonl"
