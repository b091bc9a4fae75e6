# pyright: reportAny=false, reportExplicitAny=false
"""Lineage manager for per-API version history.

This module provides the LineageManager class, which owns the per-API
metadata record (ordered version list, current version, latest stable) and
the append-only per-version records. Every mutation reads the record straight
from storage, writes it back, and invalidates the cached copies and folder
aggregates that include it.
"""

import dataclasses
from collections.abc import Awaitable, Callable
from typing import Any, Final

import anyio
import pendulum
from structlog.typing import FilteringBoundLogger

from specvault._identifiers import validate_api_id, validate_version_tag
from specvault.audit import AuditSink, make_event
from specvault.cache import (
    CacheLayer,
    api_metadata_cache_key,
    api_pattern,
    invalidate_folder_aggregates,
    version_metadata_cache_key,
)
from specvault.diff import ChangeSummary, SpecDiff, compare, diff
from specvault.documents import Document, DocumentStore
from specvault.exceptions import StorageNotFoundError, ValidationError
from specvault.folders import FolderLookup
from specvault.storage import (
    DocumentFormat,
    StorageProvider,
    api_metadata_key,
    version_metadata_key,
)
from specvault.utils import decode_record, encode_record, get_null_logger

from ._models import ApiMetadata, VersionMetadata

__all__ = ["LineageManager"]


class LineageManager:
    """Manager for API lineage and version records.

    State per API: uninitialized until ``create_api_metadata``, then a
    non-empty newest-first version list with a current and a latest-stable
    version, both always members of the list.

    Mutations are serialized within the process by a lock; the vault
    assumes a single writer process.

    Attributes:
        default_folder: Folder used for new APIs when none is given.
    """

    __slots__: Final = (
        "_audit",
        "_cache",
        "_documents",
        "_folders",
        "_lock",
        "_logger",
        "_storage",
        "default_folder",
    )

    default_folder: str
    _storage: StorageProvider
    _cache: CacheLayer
    _documents: DocumentStore
    _folders: FolderLookup
    _audit: AuditSink | None
    _lock: anyio.Lock
    _logger: FilteringBoundLogger

    def __init__(  # noqa: PLR0913
        self,
        storage: StorageProvider,
        cache: CacheLayer,
        documents: DocumentStore,
        folders: FolderLookup,
        *,
        default_folder: str = "active",
        audit: AuditSink | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the lineage manager.

        Args:
            storage: Storage provider shared by the vault.
            cache: Cache layer shared by the vault.
            documents: Document store used to load and save version documents.
            folders: Lookup used to resolve an API's folder.
            default_folder: Folder used for new APIs when none is given.
            audit: Optional audit sink.
            logger: Optional logger.
        """
        self.default_folder = default_folder
        self._storage = storage
        self._cache = cache
        self._documents = documents
        self._folders = folders
        self._audit = audit
        self._lock = anyio.Lock()
        self._logger = logger if logger is not None else get_null_logger()

    # =========================================================================
    # API metadata
    # =========================================================================

    async def create_api_metadata(  # noqa: PLR0913
        self,
        api_id: str,
        name: str,
        owner: str,
        initial_version: str,
        folder: str | None = None,
        *,
        description: str | None = None,
        tags: tuple[str, ...] = (),
        user: str = "system",
        reason: str | None = None,
    ) -> ApiMetadata:
        """Create the lineage record for a new API.

        Args:
            api_id: The new API identifier.
            name: Display name.
            owner: Owning team or person.
            initial_version: First version; becomes current and latest stable.
            folder: Folder to create the API in (default folder if omitted).
            description: Optional description.
            tags: Optional tags.
            user: Who is creating the API, for the audit trail.
            reason: Why, for the audit trail.

        Returns:
            The created record.

        Raises:
            ValidationError: If an identifier is malformed or the API already
                exists in any folder.
            StorageNotFoundError: If the folder does not exist.
        """
        validate_api_id(api_id)
        validate_version_tag(initial_version)
        target = folder if folder is not None else self.default_folder

        async with self._lock:
            await self._check_new_api(api_id, target)
            metadata = await self._write_new_api(
                ApiMetadata(
                    api_id=api_id,
                    name=name,
                    owner=owner,
                    created_at=pendulum.now("UTC"),
                    folder=target,
                    versions=(initial_version,),
                    current_version=initial_version,
                    latest_stable=initial_version,
                    description=description,
                    tags=tags,
                )
            )

        await self._api_created(metadata, user=user, reason=reason)
        return metadata

    async def get_api_metadata(
        self, api_id: str, folder: str | None = None
    ) -> ApiMetadata:
        """Return the lineage record for an API, through the cache.

        Raises:
            StorageNotFoundError: If no folder holds the API.
        """
        validate_api_id(api_id)
        resolved = await self._locate(api_id, folder)

        async def load() -> ApiMetadata:
            return await self._read_metadata(api_id, resolved)

        return await self._cache.get(api_metadata_cache_key(api_id), load)

    async def update_api_metadata(  # noqa: PLR0913
        self,
        api_id: str,
        *,
        name: str | None = None,
        owner: str | None = None,
        description: str | None = None,
        tags: tuple[str, ...] | None = None,
        user: str = "system",
        reason: str | None = None,
    ) -> ApiMetadata:
        """Update descriptive fields of an API's lineage record.

        Version fields are changed only through the dedicated operations.
        """
        changes: dict[str, Any] = {
            key: value
            for key, value in (
                ("name", name),
                ("owner", owner),
                ("description", description),
                ("tags", tags),
            )
            if value is not None
        }

        async def apply(metadata: ApiMetadata) -> ApiMetadata:
            return dataclasses.replace(metadata, **changes)

        updated = await self._mutate(api_id, apply)
        await self._emit(
            api_id, "api_updated", user=user, reason=reason, fields=sorted(changes)
        )
        return updated

    async def list_versions(self, api_id: str) -> tuple[str, ...]:
        """Return the API's versions, newest first."""
        metadata = await self.get_api_metadata(api_id)
        return metadata.versions

    # =========================================================================
    # Version lifecycle
    # =========================================================================

    async def add_version(
        self,
        api_id: str,
        version: str,
        set_current: bool = True,  # noqa: FBT001, FBT002
        *,
        user: str = "system",
        reason: str | None = None,
    ) -> ApiMetadata:
        """Add a version to the front of the API's lineage.

        Args:
            api_id: The API identifier.
            version: The new version tag.
            set_current: Make the new version the current version.
            user: Who is adding the version, for the audit trail.
            reason: Why, for the audit trail.

        Returns:
            The updated record.

        Raises:
            ValidationError: If the version tag is malformed or already present.
            StorageNotFoundError: If the API does not exist.
        """
        validate_api_id(api_id)
        validate_version_tag(version)
        async with self._lock:
            updated = await self._prepend_version(api_id, version, set_current)
        await self._version_added(
            api_id, version, set_current=set_current, user=user, reason=reason
        )
        return updated

    async def set_current_version(
        self,
        api_id: str,
        version: str,
        *,
        user: str = "system",
        reason: str | None = None,
    ) -> ApiMetadata:
        """Point the API's current version at an existing version.

        Raises:
            ValidationError: If the version is not in the lineage.
        """

        async def apply(metadata: ApiMetadata) -> ApiMetadata:
            self._require_version(metadata, version)
            return dataclasses.replace(metadata, current_version=version)

        updated = await self._mutate(api_id, apply)
        await self._emit(
            api_id, "current_version_set", user=user, version=version, reason=reason
        )
        return updated

    async def set_latest_stable(
        self,
        api_id: str,
        version: str,
        *,
        user: str = "system",
        reason: str | None = None,
    ) -> ApiMetadata:
        """Mark an existing version as the latest stable version.

        Raises:
            ValidationError: If the version is not in the lineage.
        """

        async def apply(metadata: ApiMetadata) -> ApiMetadata:
            self._require_version(metadata, version)
            return dataclasses.replace(metadata, latest_stable=version)

        updated = await self._mutate(api_id, apply)
        await self._emit(
            api_id, "latest_stable_set", user=user, version=version, reason=reason
        )
        return updated

    async def delete_version(
        self,
        api_id: str,
        version: str,
        *,
        purge: bool = False,
        user: str = "system",
        reason: str | None = None,
    ) -> ApiMetadata:
        """Remove a version from the API's lineage.

        The version's metadata record is kept as history. With ``purge`` the
        version's document files are deleted as well.

        Args:
            api_id: The API identifier.
            version: The version to remove.
            purge: Also delete the version's document.
            user: Who is deleting, for the audit trail.
            reason: Why, for the audit trail.

        Returns:
            The updated record.

        Raises:
            ValidationError: If the version is not in the lineage, or is the
                current or latest stable version.
        """

        async def apply(metadata: ApiMetadata) -> ApiMetadata:
            self._require_version(metadata, version)
            if version in (metadata.current_version, metadata.latest_stable):
                role = (
                    "current" if version == metadata.current_version else "latest stable"
                )
                msg = f"Cannot delete a referenced version: {version} is the {role} version"
                raise ValidationError(
                    msg, field="version", received=version, rule="referenced"
                )
            return dataclasses.replace(
                metadata, versions=tuple(v for v in metadata.versions if v != version)
            )

        updated = await self._mutate(api_id, apply)
        if purge and await self._documents.exists(api_id, version, updated.folder):
            await self._documents.delete(
                api_id, version, updated.folder, user=user, reason=reason
            )

        self._logger.info("version_deleted", api_id=api_id, version=version, purge=purge)
        await self._emit(
            api_id,
            "version_deleted",
            user=user,
            version=version,
            reason=reason,
            purge=purge,
        )
        return updated

    async def move_api_to_folder(
        self,
        api_id: str,
        target_folder: str,
        *,
        from_folder: str | None = None,
        user: str = "system",
        reason: str | None = None,
    ) -> ApiMetadata:
        """Write the API's lineage record under ``target_folder``.

        Only the record moves. The document files and the source record are
        the folder manager's responsibility; call this only as part of
        ``FolderManager.move_spec``.

        Args:
            api_id: The API identifier.
            target_folder: The folder the record now belongs to.
            from_folder: The folder currently holding the record; resolved
                when omitted.
            user: Who is moving, for the audit trail.
            reason: Why, for the audit trail.

        Returns:
            The record as written to the target folder.
        """
        validate_api_id(api_id)
        async with self._lock:
            source = await self._locate(api_id, from_folder)
            metadata = await self._read_metadata(api_id, source)
            if source == target_folder:
                return metadata
            moved = dataclasses.replace(metadata, folder=target_folder)
            await self._write_metadata(moved)

        self._invalidate(api_id, source, target_folder)
        await self._emit(
            api_id,
            "api_moved",
            user=user,
            reason=reason,
            from_folder=source,
            to_folder=target_folder,
        )
        return moved

    # =========================================================================
    # Version metadata
    # =========================================================================

    async def create_version_metadata(
        self,
        api_id: str,
        metadata: VersionMetadata,
        folder: str | None = None,
    ) -> VersionMetadata:
        """Write the append-only record for one version.

        Raises:
            ValidationError: If a record already exists for the version.
        """
        validate_api_id(api_id)
        async with self._lock:
            resolved = await self._locate(api_id, folder)
            await self._check_new_version_record(api_id, metadata.version, resolved)
            await self._write_version_record(api_id, metadata, resolved)
        return metadata

    async def get_version_metadata(
        self, api_id: str, version: str, folder: str | None = None
    ) -> VersionMetadata:
        """Return the record for one version, through the cache.

        Raises:
            StorageNotFoundError: If no record exists for the version.
        """
        validate_api_id(api_id)
        validate_version_tag(version)
        resolved = await self._locate(api_id, folder)
        key = version_metadata_key(resolved, api_id, version)

        async def load() -> VersionMetadata:
            return VersionMetadata.from_dict(
                decode_record(await self._storage.read(key), key=key)
            )

        return await self._cache.get(version_metadata_cache_key(api_id, version), load)

    # =========================================================================
    # Version creation and comparison
    # =========================================================================

    async def create_version(  # noqa: PLR0913
        self,
        api_id: str,
        version: str,
        *,
        document: Document | None = None,
        source_version: str | None = None,
        description: str = "",
        set_current: bool = True,
        fmt: DocumentFormat = "yaml",
        folder: str | None = None,
        user: str = "system",
        reason: str | None = None,
    ) -> VersionMetadata:
        """Create a new version of an API.

        The new document is ``document`` if given, else a copy of
        ``source_version``, else a minimal OpenAPI 3.0 skeleton. When a
        source version is given, the stored change summary is the diff from
        the source to the new document.

        An API without lineage is created on its first version, in
        ``folder`` or the default folder.

        Args:
            api_id: The API identifier.
            version: The new version tag.
            document: Content for the new version.
            source_version: Version to copy from and diff against.
            description: Description stored with the version.
            set_current: Make the new version current.
            fmt: Serialization format for the document.
            folder: Folder for a brand-new API; ignored for existing APIs.
            user: Who is creating the version, for the audit trail.
            reason: Why, for the audit trail.

        Returns:
            The version's metadata record.

        Raises:
            ValidationError: If the version already exists (in the lineage or
                as a history record).
            StorageNotFoundError: If the source version cannot be loaded.
        """
        validate_api_id(api_id)
        validate_version_tag(version)

        # Checks and writes share one lock: a duplicate fails before any write.
        async with self._lock:
            current_folder = await self._folders.find_spec_folder(api_id)
            existing: ApiMetadata | None = None
            if current_folder is not None:
                existing = await self._read_metadata(api_id, current_folder)
                if existing.has_version(version):
                    msg = f"Version already exists: {api_id} {version}"
                    raise ValidationError(
                        msg, field="version", received=version, rule="unique"
                    )
            target = current_folder or folder or self.default_folder
            if existing is None:
                await self._check_new_api(api_id, target)
            await self._check_new_version_record(api_id, version, target)

            base: Document | None = None
            if source_version is not None:
                if existing is None or not existing.has_version(source_version):
                    msg = f"Source version does not exist: {api_id} {source_version}"
                    raise ValidationError(
                        msg,
                        field="source_version",
                        received=source_version,
                        rule="exists",
                    )
                base = await self._documents.load(api_id, source_version, target)

            if document is not None:
                new_document = document
            elif base is not None:
                new_document = base.copy()
            else:
                new_document = Document.skeleton(
                    title=f"{api_id} API",
                    version=version.removeprefix("v"),
                    description=description or "API specification",
                )

            await self._documents.save(
                api_id, version, new_document, fmt, target, user=user, reason=reason
            )

            created: ApiMetadata | None = None
            if existing is None:
                created = await self._write_new_api(
                    ApiMetadata(
                        api_id=api_id,
                        name=f"{api_id} API",
                        owner=user,
                        created_at=pendulum.now("UTC"),
                        folder=target,
                        versions=(version,),
                        current_version=version,
                        latest_stable=version,
                    )
                )
            else:
                _ = await self._prepend_version(api_id, version, set_current)

            changes = (
                diff(base, new_document) if base is not None else ChangeSummary.empty()
            )
            record = VersionMetadata(
                version=version,
                created_at=pendulum.now("UTC"),
                created_by=user,
                description=description or f"Version {version}",
                parent_version=source_version,
                changes=changes,
            )
            await self._write_version_record(api_id, record, target)

        if created is not None:
            await self._api_created(created, user=user, reason=reason)
        else:
            await self._version_added(
                api_id, version, set_current=set_current, user=user, reason=reason
            )
        self._logger.info(
            "version_created",
            api_id=api_id,
            version=version,
            source_version=source_version,
            breaking_changes=len(changes.breaking_changes),
        )
        await self._emit(
            api_id,
            "version_created",
            user=user,
            version=version,
            reason=reason,
            source_version=source_version,
            breaking_changes=list(changes.breaking_changes),
        )
        return record

    async def compare_versions(
        self, api_id: str, from_version: str, to_version: str
    ) -> SpecDiff:
        """Load two versions of an API and compare them."""
        old = await self._documents.load(api_id, from_version)
        new = await self._documents.load(api_id, to_version)
        return compare(old, new)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _locate(self, api_id: str, folder: str | None) -> str:
        if folder is not None:
            return folder
        found = await self._folders.find_spec_folder(api_id)
        if found is None:
            msg = f"API not found: {api_id}"
            raise StorageNotFoundError(
                msg, operation="read", path=f"*/{api_id}/metadata.json"
            )
        return found

    async def _read_metadata(self, api_id: str, folder: str) -> ApiMetadata:
        key = api_metadata_key(folder, api_id)
        return ApiMetadata.from_dict(decode_record(await self._storage.read(key), key=key))

    async def _write_metadata(self, metadata: ApiMetadata) -> None:
        key = api_metadata_key(metadata.folder, metadata.api_id)
        await self._storage.write(key, encode_record(metadata.to_dict()))

    async def _mutate(
        self, api_id: str, apply: Callable[[ApiMetadata], Awaitable[ApiMetadata]]
    ) -> ApiMetadata:
        validate_api_id(api_id)
        async with self._lock:
            return await self._mutate_locked(api_id, apply)

    async def _mutate_locked(
        self, api_id: str, apply: Callable[[ApiMetadata], Awaitable[ApiMetadata]]
    ) -> ApiMetadata:
        # Caller holds self._lock.
        folder = await self._locate(api_id, None)
        metadata = await self._read_metadata(api_id, folder)
        updated = await apply(metadata)
        await self._write_metadata(updated)
        self._invalidate(api_id, folder)
        return updated

    # The helpers below that touch storage expect self._lock to be held.

    async def _check_new_api(self, api_id: str, folder: str) -> None:
        if not await self._folders.folder_exists(folder):
            msg = f"Folder '{folder}' not found"
            raise StorageNotFoundError(msg, operation="read", path=folder)
        existing = await self._folders.find_spec_folder(api_id)
        if existing is not None:
            msg = f"API metadata already exists for '{api_id}' in folder '{existing}'"
            raise ValidationError(msg, field="api_id", received=api_id, rule="unique")

    async def _write_new_api(self, metadata: ApiMetadata) -> ApiMetadata:
        await self._write_metadata(metadata)
        self._invalidate(metadata.api_id, metadata.folder)
        return metadata

    async def _prepend_version(
        self, api_id: str, version: str, set_current: bool  # noqa: FBT001
    ) -> ApiMetadata:
        async def apply(metadata: ApiMetadata) -> ApiMetadata:
            if metadata.has_version(version):
                msg = f"Version already exists: {api_id} {version}"
                raise ValidationError(
                    msg, field="version", received=version, rule="unique"
                )
            return dataclasses.replace(
                metadata,
                versions=(version, *metadata.versions),
                current_version=version if set_current else metadata.current_version,
            )

        return await self._mutate_locked(api_id, apply)

    async def _check_new_version_record(
        self, api_id: str, version: str, folder: str
    ) -> None:
        if await self._storage.exists(version_metadata_key(folder, api_id, version)):
            msg = f"Version metadata already exists: {api_id} {version}"
            raise ValidationError(
                msg, field="version", received=version, rule="append_only"
            )

    async def _write_version_record(
        self, api_id: str, record: VersionMetadata, folder: str
    ) -> None:
        key = version_metadata_key(folder, api_id, record.version)
        await self._storage.write(key, encode_record(record.to_dict()))
        self._cache.delete(version_metadata_cache_key(api_id, record.version))

    async def _api_created(
        self, metadata: ApiMetadata, *, user: str, reason: str | None
    ) -> None:
        self._logger.info(
            "api_created",
            api_id=metadata.api_id,
            folder=metadata.folder,
            version=metadata.current_version,
        )
        await self._emit(
            metadata.api_id,
            "api_created",
            user=user,
            version=metadata.current_version,
            reason=reason,
            folder=metadata.folder,
            name=metadata.name,
        )

    async def _version_added(
        self,
        api_id: str,
        version: str,
        *,
        set_current: bool,
        user: str,
        reason: str | None,
    ) -> None:
        self._logger.info(
            "version_added", api_id=api_id, version=version, set_current=set_current
        )
        await self._emit(
            api_id,
            "version_added",
            user=user,
            version=version,
            reason=reason,
            set_current=set_current,
        )

    def _require_version(self, metadata: ApiMetadata, version: str) -> None:
        if not metadata.has_version(version):
            msg = f"Version does not exist: {metadata.api_id} {version}"
            raise ValidationError(
                msg,
                field="version",
                expected=f"one of {list(metadata.versions)}",
                received=version,
                rule="exists",
            )

    def _invalidate(self, api_id: str, *folders: str) -> None:
        self._cache.invalidate(api_pattern(api_id))
        invalidate_folder_aggregates(self._cache, *folders)

    async def _emit(  # noqa: PLR0913
        self,
        api_id: str,
        event: str,
        *,
        user: str,
        version: str | None = None,
        reason: str | None = None,
        **details: Any,
    ) -> None:
        if self._audit is None:
            return
        await self._audit.record(
            make_event(api_id, event, user=user, version=version, reason=reason, **details)
        )
