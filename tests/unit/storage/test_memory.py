import pytest

from specvault.exceptions import StorageNotFoundError, ValidationError
from specvault.storage import MemoryStorage, StorageProvider

pytestmark = pytest.mark.anyio


class TestMemoryStorage:
    def test_satisfies_provider_protocol(self) -> None:
        assert isinstance(MemoryStorage(), StorageProvider)

    async def test_write_then_read(self, storage: MemoryStorage) -> None:
        await storage.write("active/petstore/metadata.json", b"{}")

        assert await storage.read("active/petstore/metadata.json") == b"{}"
        assert await storage.exists("active/petstore/metadata.json")

    async def test_read_missing_raises_not_found(self, storage: MemoryStorage) -> None:
        with pytest.raises(StorageNotFoundError, match="Key not found") as exc_info:
            _ = await storage.read("active/missing.json")

        assert exc_info.value.operation == "read"
        assert exc_info.value.path == "active/missing.json"

    async def test_delete_missing_raises_not_found(self, storage: MemoryStorage) -> None:
        with pytest.raises(StorageNotFoundError) as exc_info:
            await storage.delete("active/missing.json")

        assert exc_info.value.operation == "delete"

    async def test_delete_removes_key(self, storage: MemoryStorage) -> None:
        await storage.write("a/b", b"x")
        await storage.delete("a/b")

        assert not await storage.exists("a/b")
        assert len(storage) == 0

    async def test_list_is_recursive_and_sorted(self, storage: MemoryStorage) -> None:
        for key in ("b/2", "a/1", "a/sub/3", "ab/4"):
            await storage.write(key, b"")

        assert await storage.list("a") == ("a/1", "a/sub/3")
        assert await storage.list("a/") == ("a/1", "a/sub/3")
        assert await storage.list("") == ("a/1", "a/sub/3", "ab/4", "b/2")

    async def test_list_missing_prefix_is_empty(self, storage: MemoryStorage) -> None:
        assert await storage.list("nothing") == ()

    async def test_rejects_traversal(self, storage: MemoryStorage) -> None:
        with pytest.raises(ValidationError):
            await storage.write("../escape", b"")

    def test_initial_contents(self) -> None:
        storage = MemoryStorage({"/a/b": b"1"})

        assert storage.keys() == ("a/b",)
