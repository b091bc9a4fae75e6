"""The command-line interface for specvault."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from specvault.config import load_config
from specvault.exceptions import ConfigError
from specvault.utils import create_logger

from ._commands import register_commands
from ._context import CLIContext
from ._shared import exit_code_for_exception, exit_with_error

APP_HELP = "Versioned storage for OpenAPI specifications."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Build the CLI application.

    Args:
        console: Console for regular output.
        error_console: Console for errors.
        exit_on_error: Exit on parse errors instead of raising.

    Returns:
        The application, with global options handled by its meta app.
    """
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="specvault",
        help=APP_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
    ) -> None:
        """Run a specvault command with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            config: Path to a TOML config file.
        """
        try:
            loaded = load_config(config)
        except ConfigError as e:
            exit_with_error(str(e), exit_code_for_exception(e), console=error_console)

        # Without a log file only warnings reach stderr.
        level = loaded.logging.level.value if loaded.logging.file else "warning"
        logger = create_logger(
            level=level,
            log_format=loaded.logging.format.value,  # pyright: ignore[reportArgumentType]
            log_file=loaded.logging.file,
        )

        CLIContext.set_current(CLIContext(config=loaded, logger=logger))
        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


def main() -> None:
    """Default entrypoint for the ``specvault`` CLI."""
    app = create_app()
    app.meta()


if __name__ == "__main__":
    main()
