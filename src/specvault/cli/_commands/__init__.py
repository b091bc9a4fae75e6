"""specvault CLI commands."""

from cyclopts import App

from ._folder import app as folder_app
from ._init import init
from ._spec import app as spec_app
from ._stats import stats
from ._version import app as version_app

__all__ = ["folder_app", "init", "register_commands", "spec_app", "stats", "version_app"]


def register_commands(app: App) -> None:
    app.command(init, name="init")
    app.command(folder_app)
    app.command(spec_app)
    app.command(version_app)
    app.command(stats, name="stats")
