"""Storage provider protocol.

This module defines the protocol every storage backend implements. The vault
treats storage as an opaque async key/value capability over bytes; keys are
slash-separated relative paths (see ``specvault.storage._keys``).
"""

from typing import Protocol, runtime_checkable

__all__ = ["StorageProvider"]


@runtime_checkable
class StorageProvider(Protocol):
    """Async byte storage addressed by slash-separated keys.

    Implementations must make each ``write`` atomic for its key. No atomicity
    is promised across keys.
    """

    async def read(self, key: str) -> bytes:
        """Read the bytes stored at ``key``.

        Raises:
            StorageNotFoundError: If nothing is stored at ``key``.
            StorageError: If the read fails for any other reason.
        """
        ...

    async def write(self, key: str, data: bytes) -> None:
        """Store ``data`` at ``key``, replacing any previous value.

        Raises:
            StorageError: If the write fails.
        """
        ...

    async def exists(self, key: str) -> bool:
        """Return True if a value is stored at ``key``."""
        ...

    async def delete(self, key: str) -> None:
        """Delete the value stored at ``key``.

        Raises:
            StorageNotFoundError: If nothing is stored at ``key``.
            StorageError: If the delete fails for any other reason.
        """
        ...

    async def list(self, prefix: str = "") -> tuple[str, ...]:
        """List every key under ``prefix``, recursively and sorted.

        A prefix that matches nothing yields an empty tuple.
        """
        ...

    async def ensure_directory(self, prefix: str) -> None:
        """Make sure keys under ``prefix`` can be written."""
        ...
