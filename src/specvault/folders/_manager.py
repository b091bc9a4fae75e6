# pyright: reportAny=false, reportExplicitAny=false
"""Folder manager: folders, their membership, and moving APIs between them.

A top-level directory is a folder only when it holds a ``_folder.json``
sentinel. An API belongs to a folder when ``{folder}/{api_id}/metadata.json``
exists; that record is the membership marker. Listings and counts are cached
and every mutation drops the aggregates it affects.
"""

import dataclasses
from typing import Final

import pendulum
from structlog.typing import FilteringBoundLogger

from specvault._identifiers import validate_api_id, validate_folder_name
from specvault.cache import (
    FOLDERS_LIST,
    FOLDERS_LIST_BARE,
    STATS_GLOBAL,
    CacheLayer,
    api_pattern,
    folder_count_cache_key,
    folder_specs_cache_key,
    invalidate_folder_aggregates,
    spec_pattern,
)
from specvault.exceptions import (
    SpecVaultError,
    StorageError,
    StorageNotFoundError,
    ValidationError,
)
from specvault.storage import (
    FOLDER_SENTINEL,
    METADATA_FILE,
    StorageProvider,
    api_metadata_key,
    api_prefix,
    folder_sentinel_key,
    key_parts,
)
from specvault.utils import decode_record, encode_record, get_null_logger

from ._migration import migrate_legacy_layout
from ._models import FolderMetadata, GlobalStats, MigrationResult, MoveResult
from ._protocol import ApiRelocator

__all__ = ["DEFAULT_FOLDERS", "FolderManager"]

DEFAULT_FOLDERS: Final[tuple[dict[str, str], ...]] = (
    {
        "name": "active",
        "title": "Active Projects",
        "description": "Currently active API specifications",
        "color": "#10b981",
        "icon": "rocket",
    },
    {
        "name": "recycled",
        "title": "Recycle Bin",
        "description": "Archived and deleted API specifications",
        "color": "#ef4444",
        "icon": "trash",
    },
)


class FolderManager:
    """Manager for vault folders.

    The lineage manager is bound after construction with ``bind_lineage``;
    ``move_spec`` needs it to rewrite the API's lineage record.
    """

    __slots__: Final = ("_cache", "_lineage", "_logger", "_storage")

    _storage: StorageProvider
    _cache: CacheLayer
    _lineage: ApiRelocator | None
    _logger: FilteringBoundLogger

    def __init__(
        self,
        storage: StorageProvider,
        cache: CacheLayer,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._storage = storage
        self._cache = cache
        self._lineage = None
        self._logger = logger if logger is not None else get_null_logger()

    def bind_lineage(self, lineage: ApiRelocator) -> None:
        """Attach the lineage manager used by ``move_spec``."""
        self._lineage = lineage

    # =========================================================================
    # Folders
    # =========================================================================

    async def list_folders(
        self,
        include_spec_count: bool = True,  # noqa: FBT001, FBT002
    ) -> tuple[FolderMetadata, ...]:
        """List folders sorted by name.

        Args:
            include_spec_count: Fill in each folder's ``spec_count``.

        Returns:
            Folder records. Without counts, ``spec_count`` is the stored 0.
        """
        key = FOLDERS_LIST if include_spec_count else FOLDERS_LIST_BARE

        async def load() -> tuple[FolderMetadata, ...]:
            return await self._scan_folders(include_spec_count=include_spec_count)

        return await self._cache.get(key, load)

    async def folder_exists(self, name: str) -> bool:
        return await self._storage.exists(folder_sentinel_key(name))

    async def create_folder(  # noqa: PLR0913
        self,
        name: str,
        *,
        title: str | None = None,
        description: str = "",
        color: str | None = None,
        icon: str | None = None,
        created_by: str = "system",
    ) -> FolderMetadata:
        """Create a folder by writing its sentinel.

        Raises:
            ValidationError: If the name is invalid or the folder exists.
        """
        validate_folder_name(name)
        if await self.folder_exists(name):
            msg = f"Folder '{name}' already exists"
            raise ValidationError(msg, field="name", received=name, rule="unique")

        metadata = FolderMetadata(
            name=name,
            title=title or name,
            created_at=pendulum.now("UTC"),
            description=description,
            color=color,
            icon=icon,
            created_by=created_by,
        )
        await self._write_folder(metadata)
        invalidate_folder_aggregates(self._cache, name)
        self._logger.info("folder_created", folder=name, created_by=created_by)
        return metadata

    async def get_folder_metadata(self, name: str) -> FolderMetadata:
        """Read a folder's sentinel record.

        Raises:
            StorageNotFoundError: If the folder does not exist.
        """
        key = folder_sentinel_key(name)
        try:
            content = await self._storage.read(key)
        except StorageNotFoundError as e:
            msg = f"Folder '{name}' not found"
            raise StorageNotFoundError(msg, operation="read", path=key, cause=e) from e
        return FolderMetadata.from_dict(decode_record(content, key=key))

    async def update_folder_metadata(  # noqa: PLR0913
        self,
        name: str,
        *,
        title: str | None = None,
        description: str | None = None,
        color: str | None = None,
        icon: str | None = None,
    ) -> FolderMetadata:
        """Update a folder's display fields; omitted fields are kept."""
        current = await self.get_folder_metadata(name)
        updated = dataclasses.replace(
            current,
            title=title if title is not None else current.title,
            description=description if description is not None else current.description,
            color=color if color is not None else current.color,
            icon=icon if icon is not None else current.icon,
            spec_count=0,
        )
        await self._write_folder(updated)
        invalidate_folder_aggregates(self._cache, name)
        self._logger.info("folder_updated", folder=name)
        return updated

    async def delete_folder(self, name: str) -> None:
        """Delete an empty folder.

        The spec count is computed from storage, never from the cache. Files
        left under the folder without a membership marker are removed with
        the sentinel.

        Raises:
            StorageNotFoundError: If the folder does not exist.
            ValidationError: If the folder still holds APIs.
        """
        _ = await self.get_folder_metadata(name)
        api_ids = await self._scan_specs(name)
        if api_ids:
            msg = f"Cannot delete folder '{name}' - it contains {len(api_ids)} spec(s)"
            raise ValidationError(
                msg, field="name", received=name, rule="not_empty"
            )

        sentinel = folder_sentinel_key(name)
        await self._storage.delete(sentinel)
        leftovers = [k for k in await self._storage.list(name) if k != sentinel]
        for key in leftovers:
            await self._storage.delete(key)

        invalidate_folder_aggregates(self._cache, name)
        self._logger.warning("folder_deleted", folder=name, leftovers=len(leftovers))

    async def ensure_default_folders(self, created_by: str = "system") -> tuple[str, ...]:
        """Create the ``active`` and ``recycled`` folders when missing.

        Returns:
            Names of the folders created.
        """
        created: list[str] = []
        for spec in DEFAULT_FOLDERS:
            if await self.folder_exists(spec["name"]):
                continue
            _ = await self.create_folder(
                spec["name"],
                title=spec["title"],
                description=spec["description"],
                color=spec["color"],
                icon=spec["icon"],
                created_by=created_by,
            )
            created.append(spec["name"])
        return tuple(created)

    # =========================================================================
    # Membership
    # =========================================================================

    async def list_specs_in_folder(self, name: str) -> tuple[str, ...]:
        """List the API identifiers in a folder, sorted.

        Raises:
            StorageNotFoundError: If the folder does not exist.
        """

        async def load() -> tuple[str, ...]:
            _ = await self.get_folder_metadata(name)
            return await self._scan_specs(name)

        return await self._cache.get(folder_specs_cache_key(name), load)

    async def get_spec_count(self, name: str) -> int:
        """Return the number of APIs in a folder, through the cache."""

        async def load() -> int:
            return len(await self.list_specs_in_folder(name))

        return await self._cache.get(folder_count_cache_key(name), load)

    async def find_spec_folder(self, api_id: str) -> str | None:
        """Return the folder holding ``api_id``, or None."""
        for folder in await self.list_folders(include_spec_count=False):
            if await self._storage.exists(api_metadata_key(folder.name, api_id)):
                return folder.name
        return None

    async def api_exists(self, api_id: str) -> bool:
        validate_api_id(api_id)
        return await self.find_spec_folder(api_id) is not None

    async def list_apis(self) -> tuple[str, ...]:
        """List the API identifiers in every folder, sorted."""
        api_ids: set[str] = set()
        for folder in await self.list_folders(include_spec_count=False):
            api_ids.update(await self.list_specs_in_folder(folder.name))
        return tuple(sorted(api_ids))

    async def global_stats(self) -> GlobalStats:
        """Return folder and API counts for the whole vault."""

        async def load() -> GlobalStats:
            folders = await self.list_folders(include_spec_count=True)
            counts = {f.name: f.spec_count for f in folders}
            return GlobalStats(
                folder_count=len(folders),
                api_count=sum(counts.values()),
                folders=counts,
            )

        return await self._cache.get(STATS_GLOBAL, load)

    # =========================================================================
    # Moving
    # =========================================================================

    async def move_spec(
        self,
        api_id: str,
        from_folder: str,
        to_folder: str,
        *,
        user: str = "system",
        reason: str | None = None,
    ) -> MoveResult:
        """Move an API with all of its versions to another folder.

        Every precondition is checked before the first write. The move then
        runs in three steps:

        1. Copy every file except the membership marker to the destination,
           confirming each write.
        2. Write the destination marker through the lineage manager. From
           here on the API belongs to the destination.
        3. Delete the source marker, then the remaining source files.

        If copying fails the destination has no marker, so the partial copy
        is invisible to listings and the source is untouched.

        Args:
            api_id: The API to move.
            from_folder: The folder currently holding the API.
            to_folder: The destination folder.
            user: Who is moving, for the audit trail.
            reason: Why, for the audit trail.

        Returns:
            The folders involved and the number of files moved.

        Raises:
            StorageNotFoundError: If either folder does not exist.
            ValidationError: If the folders are equal, the API is not in the
                source folder, or it already exists in the destination.
        """
        validate_api_id(api_id)
        if self._lineage is None:
            msg = "FolderManager.move_spec requires a bound lineage manager"
            raise SpecVaultError(msg)

        if from_folder == to_folder:
            msg = f"API '{api_id}' is already in folder '{to_folder}'"
            raise ValidationError(
                msg, field="to_folder", received=to_folder, rule="distinct"
            )
        _ = await self.get_folder_metadata(from_folder)
        _ = await self.get_folder_metadata(to_folder)

        source_marker = api_metadata_key(from_folder, api_id)
        if not await self._storage.exists(source_marker):
            msg = f"API '{api_id}' not found in folder '{from_folder}'"
            raise ValidationError(
                msg, field="api_id", received=api_id, rule="membership"
            )
        if await self._storage.exists(api_metadata_key(to_folder, api_id)):
            msg = f"API '{api_id}' already exists in folder '{to_folder}'"
            raise ValidationError(msg, field="api_id", received=api_id, rule="unique")

        source_prefix = api_prefix(from_folder, api_id)
        target_prefix = api_prefix(to_folder, api_id)
        files = [k for k in await self._storage.list(source_prefix) if k != source_marker]

        try:
            for key in files:
                target = target_prefix + key.removeprefix(source_prefix)
                await self._storage.write(target, await self._storage.read(key))
                if not await self._storage.exists(target):
                    msg = f"Copied file is not visible after write: {target}"
                    raise StorageError(msg, operation="write", path=target)
        except SpecVaultError:
            self._logger.exception(
                "spec_move_copy_failed",
                api_id=api_id,
                from_folder=from_folder,
                to_folder=to_folder,
            )
            raise

        _ = await self._lineage.move_api_to_folder(
            api_id, to_folder, from_folder=from_folder, user=user, reason=reason
        )

        await self._storage.delete(source_marker)
        for key in files:
            await self._storage.delete(key)

        invalidate_folder_aggregates(self._cache, from_folder, to_folder)
        self._cache.invalidate(spec_pattern(api_id))
        self._cache.invalidate(api_pattern(api_id))

        self._logger.info(
            "spec_moved",
            api_id=api_id,
            from_folder=from_folder,
            to_folder=to_folder,
            files_moved=len(files) + 1,
        )
        return MoveResult(
            api_id=api_id,
            from_folder=from_folder,
            to_folder=to_folder,
            files_moved=len(files) + 1,
        )

    async def migrate_legacy_layout(self, target_folder: str = "active") -> MigrationResult:
        """Move APIs stored in the pre-folder layout into ``target_folder``."""
        created = await self.ensure_default_folders(created_by="system:migration")
        result = await migrate_legacy_layout(
            self._storage, target_folder, folders_created=created, logger=self._logger
        )
        if result.specs_migrated:
            invalidate_folder_aggregates(self._cache, target_folder)
            for api_id in result.specs_migrated:
                self._cache.invalidate(spec_pattern(api_id))
                self._cache.invalidate(api_pattern(api_id))
        return result

    # =========================================================================
    # Internals
    # =========================================================================

    async def _scan_folders(
        self, *, include_spec_count: bool
    ) -> tuple[FolderMetadata, ...]:
        names = sorted(
            parts[0]
            for parts in map(key_parts, await self._storage.list(""))
            if len(parts) == 2 and parts[1] == FOLDER_SENTINEL  # noqa: PLR2004
        )
        folders: list[FolderMetadata] = []
        for name in names:
            try:
                metadata = await self.get_folder_metadata(name)
            except ValidationError:
                self._logger.warning("folder_metadata_unreadable", folder=name)
                continue
            if include_spec_count:
                count = await self.get_spec_count(name)
                metadata = dataclasses.replace(metadata, spec_count=count)
            folders.append(metadata)
        return tuple(folders)

    async def _scan_specs(self, name: str) -> tuple[str, ...]:
        return tuple(
            sorted(
                parts[1]
                for parts in map(key_parts, await self._storage.list(name))
                if len(parts) == 3 and parts[2] == METADATA_FILE  # noqa: PLR2004
            )
        )

    async def _write_folder(self, metadata: FolderMetadata) -> None:
        key = folder_sentinel_key(metadata.name)
        await self._storage.write(key, encode_record(metadata.to_dict()))
