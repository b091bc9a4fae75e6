"""Document store: load and save one versioned document.

Documents live at ``{folder}/{api_id}/{version}/spec.{yaml|json}``. Reads go
through the cache as raw bytes under ``specs:{api_id}:{version}``; every load
parses and validates afresh, so the caller always owns the returned
``Document``.
"""

from dataclasses import dataclass
from typing import Final

from structlog.typing import FilteringBoundLogger

from specvault._identifiers import validate_api_id, validate_version_tag
from specvault.audit import AuditSink, make_event
from specvault.cache import (
    CacheLayer,
    invalidate_folder_aggregates,
    spec_cache_key,
)
from specvault.exceptions import DocumentValidationError, StorageNotFoundError
from specvault.folders._protocol import FolderLookup
from specvault.storage import (
    DOCUMENT_FORMATS,
    DocumentFormat,
    StorageProvider,
    document_key,
)
from specvault.utils import get_null_logger

from ._codec import DocumentParser, OpenApiCodec
from ._document import Document
from ._validator import DocumentValidator, StructuralValidator, ValidationIssue

__all__ = ["DocumentStore", "StoredDocument"]


@dataclass(frozen=True, slots=True)
class StoredDocument:
    """Raw document bytes as read from storage.

    Attributes:
        key: Storage key the bytes were read from.
        fmt: Format implied by the file extension.
        content: The bytes.
    """

    key: str
    fmt: DocumentFormat
    content: bytes


class DocumentStore:
    """Loads and saves versioned documents.

    When a caller omits the folder, the store asks the folder lookup which
    folder holds the API and falls back to ``default_folder`` if none does.

    Attributes:
        default_folder: Folder used when no folder holds the API yet.
    """

    __slots__: Final = (
        "_audit",
        "_cache",
        "_folders",
        "_logger",
        "_parser",
        "_storage",
        "_validator",
        "default_folder",
    )

    default_folder: str
    _storage: StorageProvider
    _cache: CacheLayer
    _folders: FolderLookup
    _parser: DocumentParser
    _validator: DocumentValidator
    _audit: AuditSink | None
    _logger: FilteringBoundLogger

    def __init__(  # noqa: PLR0913
        self,
        storage: StorageProvider,
        cache: CacheLayer,
        folders: FolderLookup,
        *,
        default_folder: str = "active",
        parser: DocumentParser | None = None,
        validator: DocumentValidator | None = None,
        audit: AuditSink | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the document store.

        Args:
            storage: Storage provider shared by the vault.
            cache: Cache layer shared by the vault.
            folders: Lookup used to resolve an API's folder.
            default_folder: Folder used when no folder holds the API.
            parser: Document parser; defaults to ``OpenApiCodec``.
            validator: Document validator; defaults to ``StructuralValidator``.
            audit: Optional audit sink for save and delete events.
            logger: Optional logger.
        """
        self.default_folder = default_folder
        self._storage = storage
        self._cache = cache
        self._folders = folders
        self._parser = parser if parser is not None else OpenApiCodec()
        self._validator = validator if validator is not None else StructuralValidator()
        self._audit = audit
        self._logger = logger if logger is not None else get_null_logger()

    # -------------------------------------------------------------------------
    # Folder resolution
    # -------------------------------------------------------------------------

    async def resolve_folder(self, api_id: str, folder: str | None = None) -> str:
        """Return ``folder`` if given, else the folder holding the API.

        Falls back to ``default_folder`` when no folder holds the API.
        """
        if folder is not None:
            return folder
        found = await self._folders.find_spec_folder(api_id)
        return found if found is not None else self.default_folder

    # -------------------------------------------------------------------------
    # Parser / validator contracts
    # -------------------------------------------------------------------------

    def parse(self, content: bytes) -> Document:
        """Parse raw bytes with the configured parser.

        Raises:
            DocumentParseError: If the bytes cannot be parsed.
        """
        return self._parser.parse(content)

    def validate(self, document: Document) -> list[ValidationIssue]:
        """Validate a document, raising if it has any error-level issue.

        Returns:
            Warning-level issues, which do not make a document unusable.

        Raises:
            DocumentValidationError: If any error-level issue is found.
        """
        issues = self._validator.validate(document)
        errors = tuple(i for i in issues if i.severity == "error")
        if errors:
            summary = "; ".join(f"{i.path}: {i.message}" for i in errors[:3])
            msg = f"Document failed validation ({len(errors)} error(s)): {summary}"
            raise DocumentValidationError(msg, issues=errors)
        return [i for i in issues if i.severity == "warning"]

    # -------------------------------------------------------------------------
    # Load / save
    # -------------------------------------------------------------------------

    async def load(
        self, api_id: str, version: str, folder: str | None = None
    ) -> Document:
        """Load, parse and validate one document.

        Args:
            api_id: The API identifier.
            version: The version tag.
            folder: Folder holding the API; resolved when omitted.

        Returns:
            A freshly parsed document owned by the caller.

        Raises:
            StorageNotFoundError: If no document file exists for the version.
            DocumentParseError: If the stored bytes cannot be parsed.
            DocumentValidationError: If the validator rejects the document.
        """
        validate_api_id(api_id)
        validate_version_tag(version)
        resolved = await self.resolve_folder(api_id, folder)

        async def load_raw() -> StoredDocument:
            return await self._read_raw(resolved, api_id, version)

        stored = await self._cache.get(spec_cache_key(api_id, version), load_raw)
        document = self._parser.parse(stored.content)
        self.validate(document)
        return document

    async def save(  # noqa: PLR0913
        self,
        api_id: str,
        version: str,
        document: Document,
        fmt: DocumentFormat = "yaml",
        folder: str | None = None,
        *,
        user: str = "system",
        reason: str | None = None,
    ) -> str:
        """Serialize and write one document.

        A stale file of the other format is removed so that a later load
        cannot pick it up.

        Args:
            api_id: The API identifier.
            version: The version tag.
            document: The document to write.
            fmt: Serialization format.
            folder: Folder holding the API; resolved when omitted.
            user: Who is saving, for the audit trail.
            reason: Why, for the audit trail.

        Returns:
            The storage key written.

        Raises:
            StorageError: If the write fails.
        """
        validate_api_id(api_id)
        validate_version_tag(version)
        resolved = await self.resolve_folder(api_id, folder)

        key = document_key(resolved, api_id, version, fmt)
        await self._storage.ensure_directory(f"{resolved}/{api_id}/{version}")
        await self._storage.write(key, self._parser.serialize(document, fmt))

        for other in DOCUMENT_FORMATS:
            other_key = document_key(resolved, api_id, version, other)
            if other != fmt and await self._storage.exists(other_key):
                await self._storage.delete(other_key)

        self._invalidate(api_id, version, resolved)
        self._logger.info(
            "spec_saved", api_id=api_id, version=version, folder=resolved, format=fmt
        )
        await self._emit(
            api_id,
            "spec_saved",
            user=user,
            version=version,
            reason=reason,
            folder=resolved,
            format=fmt,
        )
        return key

    async def exists(self, api_id: str, version: str, folder: str | None = None) -> bool:
        """Return True if a document file exists for the version."""
        resolved = await self.resolve_folder(api_id, folder)
        for fmt in DOCUMENT_FORMATS:
            if await self._storage.exists(document_key(resolved, api_id, version, fmt)):
                return True
        return False

    async def delete(
        self,
        api_id: str,
        version: str,
        folder: str | None = None,
        *,
        user: str = "system",
        reason: str | None = None,
    ) -> None:
        """Delete the document files of one version.

        Per-version metadata is left in place.

        Raises:
            StorageNotFoundError: If no document file exists for the version.
        """
        validate_api_id(api_id)
        validate_version_tag(version)
        resolved = await self.resolve_folder(api_id, folder)

        deleted = 0
        for fmt in DOCUMENT_FORMATS:
            key = document_key(resolved, api_id, version, fmt)
            if await self._storage.exists(key):
                await self._storage.delete(key)
                deleted += 1
        if not deleted:
            key = document_key(resolved, api_id, version)
            msg = f"No document for {api_id} {version} in folder '{resolved}'"
            raise StorageNotFoundError(msg, operation="delete", path=key)

        self._invalidate(api_id, version, resolved)
        self._logger.info("spec_deleted", api_id=api_id, version=version, folder=resolved)
        await self._emit(
            api_id,
            "spec_deleted",
            user=user,
            version=version,
            reason=reason,
            folder=resolved,
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _read_raw(self, folder: str, api_id: str, version: str) -> StoredDocument:
        for fmt in DOCUMENT_FORMATS:
            key = document_key(folder, api_id, version, fmt)
            try:
                content = await self._storage.read(key)
            except StorageNotFoundError:
                continue
            return StoredDocument(key=key, fmt=fmt, content=content)

        key = document_key(folder, api_id, version)
        msg = f"Spec not found: {api_id} {version} in folder '{folder}'"
        raise StorageNotFoundError(msg, operation="read", path=key)

    def _invalidate(self, api_id: str, version: str, folder: str) -> None:
        self._cache.delete(spec_cache_key(api_id, version))
        invalidate_folder_aggregates(self._cache, folder)

    async def _emit(  # noqa: PLR0913
        self,
        api_id: str,
        event: str,
        *,
        user: str,
        version: str | None = None,
        reason: str | None = None,
        **details: str,
    ) -> None:
        if self._audit is None:
            return
        await self._audit.record(
            make_event(api_id, event, user=user, version=version, reason=reason, **details)
        )
