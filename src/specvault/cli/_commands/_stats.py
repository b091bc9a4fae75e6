# ruff: noqa: T201
"""Vault statistics command."""

from typing import Annotated

from cyclopts import Parameter

from specvault.cli._shared import format_json, format_table, run_with_vault
from specvault.folders import GlobalStats
from specvault.vault import SpecVault


def stats(
    *,
    json: Annotated[bool, Parameter(help="Print JSON instead of a table")] = False,
) -> None:
    """Show folder and API counts."""

    async def _stats(vault: SpecVault) -> GlobalStats:
        return await vault.folders.global_stats()

    result = run_with_vault(_stats)
    if json:
        print(format_json(result.to_dict()))
        return
    rows = [[name, count] for name, count in sorted(result.folders.items())]
    rows.append(["total", result.api_count])
    print(format_table(["Folder", "Specs"], rows))
