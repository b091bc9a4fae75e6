# pyright: reportUnusedFunction=false
# ruff: noqa: T201
"""Folder commands."""

from typing import Annotated

from cyclopts import App, Parameter

from specvault.cli._shared import format_json, format_table, run_with_vault
from specvault.folders import FolderMetadata
from specvault.vault import SpecVault

app = App(name="folder", help="Manage vault folders", help_on_error=True)


@app.command(name="list")
def list_folders(
    *,
    json: Annotated[bool, Parameter(help="Print JSON instead of a table")] = False,
) -> None:
    """List folders with their spec counts."""

    async def _list(vault: SpecVault) -> tuple[FolderMetadata, ...]:
        return await vault.folders.list_folders()

    folders = run_with_vault(_list)
    if json:
        print(format_json([f.to_dict() for f in folders]))
        return
    if not folders:
        print("No folders.")
        return
    print(
        format_table(
            ["Name", "Title", "Specs", "Description"],
            [[f.name, f.title, f.spec_count, f.description] for f in folders],
        )
    )


@app.command(name="create")
def create_folder(  # noqa: PLR0913
    name: str,
    /,
    *,
    title: Annotated[str | None, Parameter(help="Display title")] = None,
    description: Annotated[str, Parameter(help="Folder description")] = "",
    color: Annotated[str | None, Parameter(help="Display color")] = None,
    icon: Annotated[str | None, Parameter(help="Display icon")] = None,
    created_by: Annotated[str, Parameter(help="Creator recorded on the folder")] = "cli",
) -> None:
    """Create a folder.

    Args:
        name: Folder name (kebab-case, 2-64 characters).
        title: Display title; defaults to the name.
        description: Folder description.
        color: Display color.
        icon: Display icon.
        created_by: Creator recorded on the folder.
    """

    async def _create(vault: SpecVault) -> FolderMetadata:
        return await vault.folders.create_folder(
            name,
            title=title,
            description=description,
            color=color,
            icon=icon,
            created_by=created_by,
        )

    folder = run_with_vault(_create)
    print(f"Created folder '{folder.name}'")


@app.command(name="delete")
def delete_folder(name: str, /) -> None:
    """Delete an empty folder.

    Args:
        name: Folder name.
    """

    async def _delete(vault: SpecVault) -> None:
        await vault.folders.delete_folder(name)

    run_with_vault(_delete)
    print(f"Deleted folder '{name}'")
