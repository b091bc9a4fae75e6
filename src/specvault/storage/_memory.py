"""In-memory storage provider.

Keeps every value in a dictionary. Used for tests and for embedding a vault
that does not need persistence. Each operation yields to the event loop once
so that concurrent callers interleave the way they would against real I/O.
"""

from typing import Final

import anyio.lowlevel

from specvault.exceptions import StorageNotFoundError

from ._keys import validate_key

__all__ = ["MemoryStorage"]


class MemoryStorage:
    """Storage provider holding values in process memory."""

    __slots__: Final = ("_data",)

    _data: dict[str, bytes]

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data = {}
        for key, value in (initial or {}).items():
            self._data[validate_key(key)] = value

    async def read(self, key: str) -> bytes:
        key = validate_key(key)
        await anyio.lowlevel.checkpoint()
        try:
            return self._data[key]
        except KeyError as e:
            msg = f"Key not found: {key}"
            raise StorageNotFoundError(msg, operation="read", path=key) from e

    async def write(self, key: str, data: bytes) -> None:
        key = validate_key(key)
        await anyio.lowlevel.checkpoint()
        self._data[key] = bytes(data)

    async def exists(self, key: str) -> bool:
        key = validate_key(key)
        await anyio.lowlevel.checkpoint()
        return key in self._data

    async def delete(self, key: str) -> None:
        key = validate_key(key)
        await anyio.lowlevel.checkpoint()
        try:
            del self._data[key]
        except KeyError as e:
            msg = f"Key not found: {key}"
            raise StorageNotFoundError(msg, operation="delete", path=key) from e

    async def list(self, prefix: str = "") -> tuple[str, ...]:
        prefix = validate_key(prefix, allow_empty=True).rstrip("/")
        await anyio.lowlevel.checkpoint()
        if not prefix:
            return tuple(sorted(self._data))
        return tuple(
            sorted(
                key
                for key in self._data
                if key == prefix or key.startswith(f"{prefix}/")
            )
        )

    async def ensure_directory(self, prefix: str) -> None:
        validate_key(prefix, allow_empty=True)
        await anyio.lowlevel.checkpoint()

    def keys(self) -> tuple[str, ...]:
        """Return every stored key, sorted."""
        return tuple(sorted(self._data))

    def __len__(self) -> int:
        return len(self._data)
