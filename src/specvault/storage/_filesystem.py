# pyright: reportUnusedCallResult=false
"""File system storage provider.

Values are files under a base directory. Writes go to a temporary file in the
target directory which is then renamed over the destination, so a reader
never observes a partially written value.
"""

import tempfile
from pathlib import Path
from typing import Final

import anyio
import anyio.to_thread
from structlog.typing import FilteringBoundLogger

from specvault.exceptions import StorageError, StorageNotFoundError
from specvault.utils import get_null_logger

from ._keys import validate_key

__all__ = ["FileSystemStorage"]

_TEMP_SUFFIX: Final = ".tmp"


def _atomic_write(path: Path, content: bytes) -> None:
    """Write content to a file atomically.

    Writes to a temporary file in the same directory, then renames to the
    target path.

    Raises:
        OSError: If any step fails. The temporary file is removed first.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb", dir=path.parent, delete=False, suffix=_TEMP_SUFFIX
        ) as f:
            f.write(content)
            temp_path = Path(f.name)
        temp_path.replace(path)
    except OSError:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def _walk_files(root: Path, start: Path) -> list[str]:
    """Collect every file under ``start`` as a key relative to ``root``."""
    if start.is_file():
        return [start.relative_to(root).as_posix()]
    if not start.is_dir():
        return []
    return sorted(
        p.relative_to(root).as_posix()
        for p in start.rglob("*")
        if p.is_file() and not p.name.endswith(_TEMP_SUFFIX)
    )


class FileSystemStorage:
    """Storage provider backed by a directory tree.

    Attributes:
        base_path: Root directory holding every key.
    """

    __slots__: Final = ("_logger", "base_path")

    base_path: Path
    _logger: FilteringBoundLogger

    def __init__(
        self,
        base_path: Path | str,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            base_path: Root directory. Created lazily on first write.
            logger: Optional logger for storage operations.
        """
        self.base_path = Path(base_path)
        self._logger = logger if logger is not None else get_null_logger()

    def _full_path(self, key: str, *, allow_empty: bool = False) -> Path:
        return self.base_path / validate_key(key, allow_empty=allow_empty)

    async def read(self, key: str) -> bytes:
        path = anyio.Path(self._full_path(key))
        try:
            data = await path.read_bytes()
        except FileNotFoundError as e:
            msg = f"Key not found: {key}"
            raise StorageNotFoundError(
                msg, operation="read", path=key, cause=e
            ) from e
        except OSError as e:
            self._logger.warning("storage_read_failed", key=key, error=str(e))
            msg = f"Failed to read {key}: {e}"
            raise StorageError(msg, operation="read", path=key, cause=e) from e
        self._logger.debug("storage_read", key=key, size=len(data))
        return data

    async def write(self, key: str, data: bytes) -> None:
        path = self._full_path(key)
        try:
            await anyio.to_thread.run_sync(_atomic_write, path, data)
        except OSError as e:
            self._logger.warning("storage_write_failed", key=key, error=str(e))
            msg = f"Failed to write {key}: {e}"
            raise StorageError(msg, operation="write", path=key, cause=e) from e
        self._logger.debug("storage_write", key=key, size=len(data))

    async def exists(self, key: str) -> bool:
        path = anyio.Path(self._full_path(key))
        try:
            return await path.is_file()
        except OSError as e:
            msg = f"Failed to check {key}: {e}"
            raise StorageError(msg, operation="exists", path=key, cause=e) from e

    async def delete(self, key: str) -> None:
        path = anyio.Path(self._full_path(key))
        try:
            await path.unlink()
        except FileNotFoundError as e:
            msg = f"Key not found: {key}"
            raise StorageNotFoundError(
                msg, operation="delete", path=key, cause=e
            ) from e
        except OSError as e:
            self._logger.warning("storage_delete_failed", key=key, error=str(e))
            msg = f"Failed to delete {key}: {e}"
            raise StorageError(msg, operation="delete", path=key, cause=e) from e
        self._logger.debug("storage_delete", key=key)

    async def list(self, prefix: str = "") -> tuple[str, ...]:
        start = self._full_path(prefix, allow_empty=True)
        try:
            keys = await anyio.to_thread.run_sync(_walk_files, self.base_path, start)
        except OSError as e:
            msg = f"Failed to list {prefix!r}: {e}"
            raise StorageError(msg, operation="list", path=prefix, cause=e) from e
        return tuple(keys)

    async def ensure_directory(self, prefix: str) -> None:
        path = anyio.Path(self._full_path(prefix, allow_empty=True))
        try:
            await path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Failed to create directory {prefix!r}: {e}"
            raise StorageError(msg, operation="write", path=prefix, cause=e) from e

    def __repr__(self) -> str:
        return f"FileSystemStorage({str(self.base_path)!r})"
