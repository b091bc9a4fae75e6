import orjson
import pytest

from specvault.exceptions import ValidationError
from specvault.folders import find_legacy_apis, migrate_legacy_layout
from specvault.storage import MemoryStorage
from specvault.utils import get_null_logger
from specvault.vault import SpecVault

pytestmark = pytest.mark.anyio

LEGACY_RECORD = {
    "api_id": "petstore",
    "name": "Petstore",
    "owner": "pets-team",
    "created_at": "2023-06-01T10:00:00Z",
    "versions": ["v1.0.0"],
    "current_version": "v1.0.0",
    "latest_stable": "v1.0.0",
}


async def _write_legacy(storage: MemoryStorage, api_id: str = "petstore") -> None:
    record = {**LEGACY_RECORD, "api_id": api_id}
    await storage.write(f"{api_id}/metadata.json", orjson.dumps(record))
    await storage.write(f"{api_id}/v1.0.0/spec.yaml", b"openapi: 3.0.0\n")
    await storage.write(f"{api_id}/v1.0.0/metadata.json", b"{}")


async def test_find_legacy_apis(storage: MemoryStorage) -> None:
    await _write_legacy(storage)
    await storage.write("active/_folder.json", b"{}")
    await storage.write("active/metadata.json", b"{}")
    await storage.write("_audit/metadata.json", b"{}")
    await storage.write(".cache/metadata.json", b"{}")

    assert await find_legacy_apis(storage) == ("petstore",)


async def test_migrates_into_default_folder(
    vault: SpecVault, storage: MemoryStorage
) -> None:
    await _write_legacy(storage)
    await _write_legacy(storage, "orders")

    result = await vault.folders.migrate_legacy_layout()

    assert result.success
    assert result.folders_created == ("active", "recycled")
    assert result.specs_migrated == ("orders", "petstore")
    assert await find_legacy_apis(storage) == ()
    assert await storage.exists("active/petstore/v1.0.0/spec.yaml")
    metadata = await vault.lineage.get_api_metadata("petstore")
    assert metadata.folder == "active"
    assert metadata.owner == "pets-team"
    assert await vault.folders.get_spec_count("active") == 2


async def test_nothing_to_migrate_is_skipped(seeded_vault: SpecVault) -> None:
    result = await seeded_vault.folders.migrate_legacy_layout()

    assert result.skipped
    assert result.to_dict()["success"] is True


async def test_new_vault_reports_created_folders(vault: SpecVault) -> None:
    result = await vault.folders.migrate_legacy_layout()

    assert not result.skipped
    assert result.folders_created == ("active", "recycled")
    assert result.specs_migrated == ()


async def test_conflicting_api_is_reported_and_left_in_place(
    seeded_vault: SpecVault, storage: MemoryStorage
) -> None:
    await _write_legacy(storage)
    await _write_legacy(storage, "orders")
    await storage.write("active/petstore/metadata.json", b"{}")

    result = await seeded_vault.folders.migrate_legacy_layout()

    assert result.specs_migrated == ("orders",)
    assert set(result.errors) == {"petstore"}
    assert not result.success
    assert await storage.exists("petstore/metadata.json")


async def test_missing_target_folder(storage: MemoryStorage) -> None:
    with pytest.raises(ValidationError, match="does not exist"):
        _ = await migrate_legacy_layout(storage, "archive", logger=get_null_logger())
