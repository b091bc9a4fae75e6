# pyright: reportAny=false, reportExplicitAny=false
"""Migration from the pre-folder layout.

Before folders existed, an API lived at the top level of the vault as
``{api_id}/metadata.json`` with its versions beside it. Migration moves each
such API under a folder, recording the folder in its lineage record, using
the same copy-then-commit order as ``FolderManager.move_spec``.
"""

from structlog.typing import FilteringBoundLogger

from specvault.exceptions import SpecVaultError, ValidationError
from specvault.storage import (
    AUDIT_PREFIX,
    FOLDER_SENTINEL,
    METADATA_FILE,
    StorageProvider,
    api_metadata_key,
    folder_sentinel_key,
    key_parts,
)
from specvault.utils import decode_record, encode_record

from ._models import MigrationResult

__all__ = ["find_legacy_apis", "migrate_legacy_layout"]


async def find_legacy_apis(storage: StorageProvider) -> tuple[str, ...]:
    """Return the top-level directories that hold a pre-folder API."""
    keys = await storage.list("")
    folders = {
        parts[0]
        for parts in map(key_parts, keys)
        if len(parts) == 2 and parts[1] == FOLDER_SENTINEL  # noqa: PLR2004
    }
    return tuple(
        sorted(
            parts[0]
            for parts in map(key_parts, keys)
            if len(parts) == 2  # noqa: PLR2004
            and parts[1] == METADATA_FILE
            and parts[0] not in folders
            and parts[0] != AUDIT_PREFIX
            and not parts[0].startswith((".", "_"))
        )
    )


async def migrate_legacy_layout(
    storage: StorageProvider,
    target_folder: str,
    *,
    folders_created: tuple[str, ...] = (),
    logger: FilteringBoundLogger,
) -> MigrationResult:
    """Move every pre-folder API into ``target_folder``.

    An API that fails to migrate is reported in ``errors`` and left where it
    was; the others still migrate.

    Args:
        storage: The vault's storage provider.
        target_folder: Folder receiving the APIs; it must exist.
        folders_created: Folders created for this migration, reported back.
        logger: Logger for progress events.

    Returns:
        What was created, migrated and what failed.
    """
    if not await storage.exists(folder_sentinel_key(target_folder)):
        msg = f"Migration target folder '{target_folder}' does not exist"
        raise ValidationError(
            msg, field="target_folder", received=target_folder, rule="exists"
        )

    api_ids = await find_legacy_apis(storage)
    if not api_ids and not folders_created:
        logger.info("migration_skipped", reason="nothing to migrate")
        return MigrationResult(skipped=True)

    logger.info("migration_started", target_folder=target_folder, apis=len(api_ids))
    migrated: list[str] = []
    errors: dict[str, str] = {}
    for api_id in api_ids:
        try:
            files = await _migrate_api(storage, api_id, target_folder)
        except SpecVaultError as e:
            errors[api_id] = str(e)
            logger.exception("migration_api_failed", api_id=api_id)
            continue
        migrated.append(api_id)
        logger.info("migration_api_moved", api_id=api_id, files=files)

    logger.info(
        "migration_completed",
        specs_migrated=len(migrated),
        folders_created=len(folders_created),
        errors=len(errors),
    )
    return MigrationResult(
        folders_created=folders_created,
        specs_migrated=tuple(migrated),
        errors=errors,
    )


async def _migrate_api(storage: StorageProvider, api_id: str, target_folder: str) -> int:
    marker = f"{api_id}/{METADATA_FILE}"
    target_marker = api_metadata_key(target_folder, api_id)
    if await storage.exists(target_marker):
        msg = f"API '{api_id}' already exists in folder '{target_folder}'"
        raise ValidationError(msg, field="api_id", received=api_id, rule="unique")

    files = [k for k in await storage.list(api_id) if k != marker]
    for key in files:
        await storage.write(f"{target_folder}/{key}", await storage.read(key))

    record = decode_record(await storage.read(marker), key=marker)
    record["folder"] = target_folder
    await storage.write(target_marker, encode_record(record))

    await storage.delete(marker)
    for key in files:
        await storage.delete(key)
    return len(files) + 1
