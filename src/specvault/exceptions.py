"""specvault exceptions."""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from specvault.documents._validator import ValidationIssue

StorageOperation = Literal["read", "write", "delete", "list", "exists"]


class SpecVaultError(Exception):
    """Base exception for specvault errors."""


# =============================================================================
# Storage Exceptions
# =============================================================================


class StorageError(SpecVaultError):
    """Raised when a storage provider operation fails.

    Attributes:
        operation: The storage operation that failed.
        path: The storage key the operation targeted.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: StorageOperation,
        path: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and storage context.

        Args:
            message: Human-readable error message.
            operation: The storage operation that failed.
            path: The storage key the operation targeted.
            cause: The underlying exception, if any.
        """
        super().__init__(message)
        self.operation: StorageOperation = operation
        self.path: str = path
        self.cause: Exception | None = cause


class StorageNotFoundError(StorageError, KeyError):
    """Raised when a storage key does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


# =============================================================================
# Validation Exceptions
# =============================================================================


class ValidationError(SpecVaultError, ValueError):
    """Raised when an identifier, record, or document fails validation.

    Attributes:
        field: The field or identifier that failed validation.
        expected: Description of the expected value.
        received: The value that was rejected.
        rule: Short name of the rule that was violated.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        expected: str | None = None,
        received: Any = None,  # noqa: ANN401
        rule: str | None = None,
    ) -> None:
        """Initialize with error message and validation context.

        Args:
            message: Human-readable error message.
            field: The field or identifier that failed validation.
            expected: Description of the expected value.
            received: The value that was rejected.
            rule: Short name of the rule that was violated.
        """
        super().__init__(message)
        self.field: str | None = field
        self.expected: str | None = expected
        self.received: Any = received
        self.rule: str | None = rule


class DocumentParseError(ValidationError):
    """Raised when document bytes cannot be parsed as JSON or YAML."""

    def __init__(
        self,
        message: str,
        *,
        content_type: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and parse context."""
        super().__init__(message, rule="parse")
        self.content_type: str | None = content_type
        self.cause: Exception | None = cause


class DocumentValidationError(ValidationError):
    """Raised when a parsed document is rejected by the validator.

    Attributes:
        issues: Every issue the validator reported.
    """

    def __init__(
        self,
        message: str,
        *,
        issues: "tuple[ValidationIssue, ...]" = (),  # noqa: UP037
    ) -> None:
        """Initialize with error message and validator issues."""
        first = issues[0] if issues else None
        super().__init__(
            message,
            field=first.path if first is not None else None,
            rule="document",
        )
        self.issues: tuple[ValidationIssue, ...] = issues


# =============================================================================
# Reference Exceptions
# =============================================================================


class SpecReferenceError(SpecVaultError):
    """Raised when an internal ``$ref`` cannot be resolved.

    Attributes:
        ref_path: The unresolved reference, e.g. ``#/components/schemas/Pet``.
        location: Where in the document the reference appears.
    """

    def __init__(self, message: str, *, ref_path: str, location: str) -> None:
        """Initialize with error message and reference context."""
        super().__init__(message)
        self.ref_path: str = ref_path
        self.location: str = location


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(SpecVaultError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # noqa: ANN401
        expected: str,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value
        self.expected: str = expected


__all__ = [
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "DocumentParseError",
    "DocumentValidationError",
    "SpecReferenceError",
    "SpecVaultError",
    "StorageError",
    "StorageNotFoundError",
    "StorageOperation",
    "ValidationError",
]
