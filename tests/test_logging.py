"""Unit tests for taskboard/logging_config.py."""

from collections.abc import Generator
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from taskboard import logging_config

if TYPE_CHECKING:
    from _pytest.monkeypatch import MonkeyPatch
    from pytest_mock.plugin import MockerFixture


@pytest.fixture
def fresh_logging(monkeypatch: "MonkeyPatch") -> Generator[None, None, None]:
    """Allow setup_logging to run again and drop the handlers it installs."""
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    monkeypatch.setattr(logging_config, "_logging_configured", False)
    yield
    for handler in list(root_logger.handlers):
        if handler not in saved_handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(saved_level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_creates_handlers_and_files(self, tmp_path: Path, fresh_logging: None) -> None:
        log_dir = tmp_path / "logs"

        logging_config.setup_logging(log_dir)

        root_logger = logging.getLogger()
        assert log_dir.is_dir()
        assert len(root_logger.handlers) == 3
        assert root_logger.level == logging.INFO
        file_names = sorted(
            Path(handler.baseFilename).name
            for handler in root_logger.handlers
            if isinstance(handler, logging.FileHandler)
        )
        assert file_names == ["taskboard.log", "taskboard_errors.log"]
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_debug_level(self, tmp_path: Path, fresh_logging: None) -> None:
        logging_config.setup_logging(tmp_path, debug=True)

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("taskboard.tasks").level == logging.DEBUG

    def test_is_idempotent(self, tmp_path: Path, fresh_logging: None, mocker: "MockerFixture") -> None:
        logging_config.setup_logging(tmp_path)
        mkdir = mocker.patch.object(Path, "mkdir")

        logging_config.setup_logging(tmp_path / "other")

        mkdir.assert_not_called()
        assert len(logging.getLogger().handlers) == 3

    def test_errors_reach_error_log(self, tmp_path: Path, fresh_logging: None) -> None:
        logging_config.setup_logging(tmp_path)

        logging.getLogger("taskboard.tasks").error("storage failed")
        logging.getLogger("taskboard.tasks").info("just info")
        for handler in logging.getLogger().handlers:
            handler.flush()

        errors = (tmp_path / "taskboard_errors.log").read_text(encoding="utf-8")
        assert "storage failed" in errors
        assert "just info" not in errors
