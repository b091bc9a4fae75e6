# ruff: noqa: T201
"""Vault initialization command."""

from typing import Annotated

from cyclopts import Parameter

from specvault.cli._shared import ExitCode, exit_with_error, format_json, run_with_vault
from specvault.folders import MigrationResult
from specvault.vault import SpecVault


def init(
    *,
    target: Annotated[
        str, Parameter(help="Folder receiving APIs from the pre-folder layout")
    ] = "active",
    json: Annotated[bool, Parameter(help="Print JSON instead of text")] = False,
) -> None:
    """Create the default folders and migrate any pre-folder layout.

    Safe to run repeatedly; a vault that is already set up is left as is.
    """

    async def _init(vault: SpecVault) -> MigrationResult:
        return await vault.folders.migrate_legacy_layout(target)

    result = run_with_vault(_init)
    if json:
        print(format_json(result.to_dict()))
    elif result.skipped:
        print("Vault already initialized.")
    else:
        _print_result(result, target)
    if result.errors:
        exit_with_error(
            f"{len(result.errors)} API(s) failed to migrate", ExitCode.VALIDATION_ERROR
        )


def _print_result(result: MigrationResult, target: str) -> None:
    for name in result.folders_created:
        print(f"Created folder '{name}'")
    for api_id in result.specs_migrated:
        print(f"Migrated '{api_id}' into '{target}'")
    for api_id, error in result.errors.items():
        print(f"Failed to migrate '{api_id}': {error}")
