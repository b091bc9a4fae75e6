# pyright: reportUnusedFunction=false
# ruff: noqa: T201, TC003
"""Version commands."""

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter

from specvault.cli._shared import (
    ExitCode,
    exit_with_error,
    format_json,
    format_table,
    run_with_vault,
)
from specvault.diff import SpecDiff
from specvault.lineage import ApiMetadata, VersionMetadata
from specvault.storage import DocumentFormat
from specvault.vault import SpecVault

app = App(name="version", help="Create and inspect API versions", help_on_error=True)


@app.command(name="list")
def list_versions(
    api_id: str,
    /,
    *,
    json: Annotated[bool, Parameter(help="Print JSON instead of a table")] = False,
) -> None:
    """List an API's versions, newest first.

    Args:
        api_id: The API identifier.
        json: Print JSON instead of a table.
    """

    async def _metadata(vault: SpecVault) -> ApiMetadata:
        return await vault.lineage.get_api_metadata(api_id)

    metadata = run_with_vault(_metadata)
    if json:
        print(format_json(metadata.to_dict()))
        return

    rows: list[list[str]] = []
    for version in metadata.versions:
        marks = [
            label
            for label, ref in (
                ("current", metadata.current_version),
                ("stable", metadata.latest_stable),
            )
            if ref == version
        ]
        rows.append([version, ", ".join(marks)])
    print(format_table(["Version", "Marks"], rows))


@app.command(name="compare")
def compare_versions(
    api_id: str,
    from_version: str,
    to_version: str,
    /,
    *,
    json: Annotated[bool, Parameter(help="Print JSON instead of text")] = False,
) -> None:
    """Compare two versions of an API.

    Args:
        api_id: The API identifier.
        from_version: The base version.
        to_version: The version compared against the base.
        json: Print JSON instead of text.
    """

    async def _compare(vault: SpecVault) -> SpecDiff:
        return await vault.lineage.compare_versions(api_id, from_version, to_version)

    summary = run_with_vault(_compare).summary
    if json:
        print(format_json(summary.to_dict()))
        return
    if summary.is_empty:
        print(f"No changes between {from_version} and {to_version}.")
        return

    sections = (
        ("Endpoints added", summary.endpoints_added),
        ("Endpoints modified", summary.endpoints_modified),
        ("Endpoints deleted", summary.endpoints_deleted),
        ("Schemas added", summary.schemas_added),
        ("Schemas modified", summary.schemas_modified),
        ("Schemas deleted", summary.schemas_deleted),
        ("Breaking changes", summary.breaking_changes),
    )
    for title, items in sections:
        if not items:
            continue
        print(f"{title}:")
        for item in items:
            print(f"  - {item}")


@app.command(name="create")
def create_version(  # noqa: PLR0913
    api_id: str,
    version: str,
    /,
    *,
    file: Annotated[Path | None, Parameter(help="OpenAPI document to store")] = None,
    source: Annotated[
        str | None, Parameter(name="--from", help="Version to copy and diff against")
    ] = None,
    description: Annotated[str, Parameter(help="Version description")] = "",
    fmt: Annotated[
        DocumentFormat, Parameter(name="--format", help="Storage format")
    ] = "yaml",
    current: Annotated[bool, Parameter(help="Make this the current version")] = True,
) -> None:
    """Create a new version of an API.

    Without --file the document is copied from --from, or a minimal
    skeleton is stored when neither is given.

    Args:
        api_id: The API identifier.
        version: The new version tag, e.g. v1.2.0.
        file: OpenAPI document to store.
        source: Version to copy and diff against.
        description: Version description.
        fmt: Storage format.
        current: Make this the current version.
    """
    content: bytes | None = None
    if file is not None:
        try:
            content = file.read_bytes()
        except OSError as e:
            exit_with_error(f"Cannot read {file}: {e}", ExitCode.IO_ERROR)

    async def _create(vault: SpecVault) -> VersionMetadata:
        document = vault.documents.parse(content) if content is not None else None
        return await vault.lineage.create_version(
            api_id,
            version,
            document=document,
            source_version=source,
            description=description,
            set_current=current,
            fmt=fmt,
            user="cli",
        )

    record = run_with_vault(_create)
    print(f"Created {api_id} {record.version}")
    for finding in record.changes.breaking_changes:
        print(f"  ! {finding}")
