import os
from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from specvault.cli import create_app

RunCli = Callable[..., int]


@pytest.fixture
def vault_path(tmp_path: Path) -> Path:
    return tmp_path / "vault"


@pytest.fixture
def config_path(tmp_path: Path, vault_path: Path) -> Path:
    path = tmp_path / "specvault.toml"
    _ = path.write_text(f'[storage]\nbase_path = "{vault_path.as_posix()}"\n')
    return path


@pytest.fixture
def run_cli(
    config_path: Path, console: Console, monkeypatch: pytest.MonkeyPatch
) -> RunCli:
    """Return a function that runs the CLI and returns its exit code."""
    for name in list(os.environ):
        if name.startswith("SPECVAULT_"):
            monkeypatch.delenv(name)

    def _run(*args: str) -> int:
        app = create_app(console, console)
        try:
            app.meta(["--config", str(config_path), *args])
        except SystemExit as e:
            return int(e.code or 0)
        return 0

    return _run
