"""CLI context for global state.

The context is set once at CLI startup and read by commands through a
context variable.
"""

import contextvars
from dataclasses import dataclass, field
from typing import Self

from structlog.typing import FilteringBoundLogger

from specvault.config import VaultConfiguration


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global CLI context.

    Attributes:
        config: Loaded configuration.
        logger: Structured logger for commands.
    """

    config: VaultConfiguration = field(default_factory=VaultConfiguration, repr=False)
    logger: FilteringBoundLogger | None = field(default=None, repr=False)

    @classmethod
    def get_current(cls) -> Self:
        """Return the active context, or a default one if none is set."""
        ctx = _current_cli_context.get()
        return ctx if isinstance(ctx, cls) else cls()

    @classmethod
    def set_current(cls, ctx: Self) -> None:
        _current_cli_context.set(ctx)  # pyright: ignore[reportUnusedCallResult]

    @classmethod
    def reset(cls) -> None:
        """Reset to the default context."""
        _current_cli_context.set(None)  # pyright: ignore[reportUnusedCallResult]


_current_cli_context: contextvars.ContextVar[CLIContext | None] = contextvars.ContextVar(
    "cli_context", default=None
)
