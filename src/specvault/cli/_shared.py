# pyright: reportExplicitAny=false
"""Shared CLI utilities: exit codes, output formatting and vault access."""

from collections.abc import Awaitable, Callable
from enum import IntEnum
from typing import Any, Never

import anyio
import orjson
from pytablewriter import MarkdownTableWriter
from rich.console import Console

from specvault.exceptions import (
    ConfigError,
    SpecVaultError,
    StorageError,
    StorageNotFoundError,
    ValidationError,
)
from specvault.vault import SpecVault

from ._context import CLIContext

FormattableData = dict[str, Any] | list[Any]

__all__ = [
    "ExitCode",
    "FormattableData",
    "exit_code_for_exception",
    "exit_with_error",
    "format_json",
    "format_table",
    "get_error_console",
    "run_with_vault",
]


class ExitCode(IntEnum):
    """Exit codes for specvault CLI commands."""

    SUCCESS = 0
    NOT_FOUND = 1
    VALIDATION_ERROR = 2
    IO_ERROR = 4
    INTERNAL_ERROR = 5


def exit_code_for_exception(exc: BaseException) -> ExitCode:
    """Map an exception to the exit code reported for it."""
    if isinstance(exc, StorageNotFoundError):
        return ExitCode.NOT_FOUND
    if isinstance(exc, ValidationError | ConfigError):
        return ExitCode.VALIDATION_ERROR
    if isinstance(exc, StorageError | OSError):
        return ExitCode.IO_ERROR
    return ExitCode.INTERNAL_ERROR


def format_json(data: FormattableData) -> str:
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode("utf-8")


def format_table(headers: list[str], rows: list[list[Any]]) -> str:
    """Format rows as a Markdown table."""
    writer = MarkdownTableWriter(headers=headers, value_matrix=rows, margin=1)
    return writer.dumps()


def get_error_console() -> Console:
    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with ``code``.

    Raises:
        SystemExit: Always.
    """
    if console is None:
        console = get_error_console()
    console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(code)


def run_with_vault[T](operation: Callable[[SpecVault], Awaitable[T]]) -> T:
    """Open the configured vault, run ``operation`` in it, and return its result.

    Vault errors end the command with the matching exit code.
    """
    ctx = CLIContext.get_current()

    async def _run() -> T:
        async with SpecVault.from_config(ctx.config, logger=ctx.logger) as vault:
            return await operation(vault)

    try:
        return anyio.run(_run)
    except SpecVaultError as e:
        exit_with_error(str(e), exit_code_for_exception(e))
