"""Protocols connecting the folder layer to its neighbours."""

from typing import Protocol, runtime_checkable

__all__ = ["ApiRelocator", "FolderLookup"]


@runtime_checkable
class FolderLookup(Protocol):
    """Finds the folder holding an API."""

    async def find_spec_folder(self, api_id: str) -> str | None:
        """Return the folder holding ``api_id``, or None if no folder does."""
        ...

    async def folder_exists(self, name: str) -> bool:
        """Return True if the folder's sentinel record exists."""
        ...


@runtime_checkable
class ApiRelocator(Protocol):
    """Rewrites an API's lineage record for a new folder."""

    async def move_api_to_folder(
        self,
        api_id: str,
        target_folder: str,
        *,
        from_folder: str | None = None,
        user: str = "system",
        reason: str | None = None,
    ) -> object:
        """Write the API's lineage record under ``target_folder``."""
        ...
