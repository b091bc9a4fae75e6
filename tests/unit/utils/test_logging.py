"""Unit tests for logging utilities."""

import logging
from pathlib import Path

import orjson
import pytest
from pyfakefs.fake_filesystem import FakeFilesystem

from specvault.utils import create_logger, get_null_logger, log_level_from_string


class TestLogLevelFromString:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            ("warning", logging.WARNING),
            ("error", logging.ERROR),
            ("nonsense", logging.INFO),
        ],
    )
    def test_names(
        self, name: str, expected: int, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("SPECVAULT_DEBUG", raising=False)

        assert log_level_from_string(name) == expected

    def test_debug_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECVAULT_DEBUG", "1")

        assert log_level_from_string("error") == logging.DEBUG
        assert log_level_from_string("error", respect_env=False) == logging.ERROR


class TestCreateLogger:
    def test_creates_log_directory_if_missing(self, fs: FakeFilesystem) -> None:
        log_path = Path("/logs/vault/specvault.log")
        assert not log_path.parent.exists()

        _ = create_logger(log_file=str(log_path))

        assert log_path.parent.exists()

    def test_default_format_is_json(self, fs: FakeFilesystem) -> None:
        logger = create_logger(log_file="/logs/specvault.log")

        logger.info("spec_saved", api_id="petstore")

        line = Path("/logs/specvault.log").read_text().splitlines()[0]
        entry = orjson.loads(line)
        assert entry["event"] == "spec_saved"
        assert entry["api_id"] == "petstore"
        assert entry["level"] == "info"
        assert "timestamp" in entry

    def test_text_format(self, fs: FakeFilesystem) -> None:
        logger = create_logger(log_file="/logs/specvault.log", log_format="text")

        logger.info("spec_saved", api_id="petstore")

        log_content = Path("/logs/specvault.log").read_text()
        assert "spec_saved" in log_content
        assert "api_id=petstore" in log_content

    def test_respects_level(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("SPECVAULT_DEBUG", raising=False)
        logger = create_logger(level="warning", log_file="/logs/specvault.log")

        logger.info("dropped")
        logger.warning("kept")

        log_content = Path("/logs/specvault.log").read_text()
        assert "dropped" not in log_content
        assert "kept" in log_content

    def test_appends_to_existing_file(self, fs: FakeFilesystem) -> None:
        _ = fs.create_file("/logs/specvault.log", contents="earlier\n")

        create_logger(log_file="/logs/specvault.log").info("later")

        assert Path("/logs/specvault.log").read_text().startswith("earlier\n")

    def test_stderr_when_no_file(self, capsys: pytest.CaptureFixture[str]) -> None:
        create_logger().warning("to_stderr")

        assert "to_stderr" in capsys.readouterr().err


def test_null_logger_drops_everything(capsys: pytest.CaptureFixture[str]) -> None:
    logger = get_null_logger()

    logger.error("ignored", key="value")
    logger.exception("ignored")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""
