"""Identifier validation for API ids, version tags, and folder names."""

import re
from typing import Final

import pendulum

from specvault.exceptions import ValidationError

__all__ = [
    "FOLDER_NAME_MAX_LENGTH",
    "FOLDER_NAME_MIN_LENGTH",
    "RESERVED_FOLDER_NAMES",
    "is_semantic_version",
    "timestamp_version_tag",
    "validate_api_id",
    "validate_folder_name",
    "validate_version_tag",
]

_API_ID_PATTERN: Final = re.compile(r"^[a-z0-9-]+$")
_SEMVER_TAG_PATTERN: Final = re.compile(r"^v\d+\.\d+\.\d+$")
_TIMESTAMP_TAG_PATTERN: Final = re.compile(r"^v\d{8}-\d{6}$")
_FOLDER_NAME_PATTERN: Final = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

FOLDER_NAME_MIN_LENGTH: Final = 2
FOLDER_NAME_MAX_LENGTH: Final = 64

RESERVED_FOLDER_NAMES: Final = frozenset(
    {
        ".",
        "..",
        "con",
        "prn",
        "aux",
        "nul",
        *(f"com{i}" for i in range(1, 10)),
        *(f"lpt{i}" for i in range(1, 10)),
    }
)


def validate_api_id(api_id: str) -> str:
    """Validate an API identifier.

    Args:
        api_id: Candidate identifier.

    Returns:
        The identifier, unchanged.

    Raises:
        ValidationError: If the identifier is empty or not lowercase
            alphanumeric with hyphens.
    """
    if not _API_ID_PATTERN.fullmatch(api_id):
        msg = f"Invalid API id: {api_id!r} (lowercase letters, digits and hyphens)"
        raise ValidationError(
            msg,
            field="api_id",
            expected="^[a-z0-9-]+$",
            received=api_id,
            rule="pattern",
        )
    return api_id


def validate_version_tag(version: str) -> str:
    """Validate a version tag (``v1.2.3`` or ``v20240101-120000``).

    Raises:
        ValidationError: If the tag matches neither form.
    """
    if _SEMVER_TAG_PATTERN.fullmatch(version) or _TIMESTAMP_TAG_PATTERN.fullmatch(
        version
    ):
        return version
    msg = f"Invalid version tag: {version!r} (expected v1.2.3 or vYYYYMMDD-HHMMSS)"
    raise ValidationError(
        msg,
        field="version",
        expected="v<major>.<minor>.<patch> or v<YYYYMMDD-HHMMSS>",
        received=version,
        rule="pattern",
    )


def is_semantic_version(version: str) -> bool:
    """Return True if the tag is a ``v<major>.<minor>.<patch>`` tag."""
    return _SEMVER_TAG_PATTERN.fullmatch(version) is not None


def timestamp_version_tag(now: pendulum.DateTime | None = None) -> str:
    """Build a timestamp version tag for the given instant (default: now, UTC)."""
    instant = now if now is not None else pendulum.now("UTC")
    return f"v{instant.in_timezone('UTC').format('YYYYMMDD-HHmmss')}"


def validate_folder_name(name: str) -> str:
    """Validate a folder name.

    Folder names are kebab-case, between 2 and 64 characters, and may not
    collide with names reserved by common filesystems.

    Args:
        name: Candidate folder name.

    Returns:
        The name, unchanged.

    Raises:
        ValidationError: If any rule is violated.
    """
    if not FOLDER_NAME_MIN_LENGTH <= len(name) <= FOLDER_NAME_MAX_LENGTH:
        msg = (
            f"Folder name must be {FOLDER_NAME_MIN_LENGTH}-{FOLDER_NAME_MAX_LENGTH} "
            f"characters, got {len(name)}"
        )
        raise ValidationError(
            msg,
            field="name",
            expected=f"{FOLDER_NAME_MIN_LENGTH}-{FOLDER_NAME_MAX_LENGTH} characters",
            received=name,
            rule="length",
        )
    if name in RESERVED_FOLDER_NAMES:
        msg = f"Folder name {name!r} is reserved"
        raise ValidationError(
            msg,
            field="name",
            expected="a non-reserved name",
            received=name,
            rule="reserved",
        )
    if not _FOLDER_NAME_PATTERN.fullmatch(name):
        msg = f"Folder name must be kebab-case (e.g. 'my-folder'), got {name!r}"
        raise ValidationError(
            msg,
            field="name",
            expected="^[a-z0-9]+(-[a-z0-9]+)*$",
            received=name,
            rule="pattern",
        )
    return name
