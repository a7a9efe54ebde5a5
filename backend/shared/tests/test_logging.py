import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog

from ledger.types import AggregationKey, FormLabel
from shared.logging import _serialize_enums, setup_logging


@pytest.fixture(autouse=True)
def _cleanup_root_logger():
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    for name in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _allow_file_logging():
    """Disable the pytest guard so file handlers are really created."""
    with patch("shared.logging._is_test", return_value=False):
        yield


class TestSetupLogging:
    def test_stdout_handler_only_without_log_dir(self):
        result = setup_logging()
        root = logging.getLogger()

        assert result is None
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_file_handler_in_log_dir(self, tmp_path):
        log_dir = tmp_path / "tracker"
        log_path = setup_logging(log_dir=log_dir)
        root = logging.getLogger()

        file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert log_path is not None
        assert Path(file_handlers[0].baseFilename) == log_path
        assert log_path.parent == log_dir

    def test_log_file_named_after_start_time(self, tmp_path):
        fixed_time = datetime(2025, 3, 15, 19, 30, 5, tzinfo=UTC)
        with patch("shared.logging.datetime") as mock_dt:
            mock_dt.now.return_value = fixed_time
            log_path = setup_logging(log_dir=tmp_path)

        assert log_path is not None
        assert log_path.name == "2025-03-15_19-30-05.log"

    def test_skips_file_handler_under_pytest(self, tmp_path):
        with patch("shared.logging._is_test", return_value=True):
            result = setup_logging(log_dir=tmp_path / "tracker")

        assert result is None
        assert not (tmp_path / "tracker").exists()

    def test_accepts_string_path_and_creates_directories(self, tmp_path):
        log_dir = tmp_path / "nested" / "logs"
        log_path = setup_logging(log_dir=str(log_dir))

        structlog.get_logger("test.nested").info("score recorded", points=30)

        assert log_dir.is_dir()
        assert log_path is not None
        assert "score recorded" in log_path.read_text()

    def test_repeated_calls_replace_handlers(self):
        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_quiets_chatty_libraries(self):
        setup_logging(level=logging.DEBUG)

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_explicit_level_wins_over_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(level=logging.DEBUG)

        assert logging.getLogger().level == logging.DEBUG

    def test_level_from_env_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        setup_logging()

        assert logging.getLogger().level == logging.WARNING

    def test_invalid_log_level_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "loud")
        with pytest.raises(ValueError, match="Invalid LOG_LEVEL"):
            setup_logging()

    def test_invalid_log_format_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "xml")
        with pytest.raises(ValueError, match="Invalid LOG_FORMAT"):
            setup_logging()

    def test_json_lines_carry_context_and_enum_values(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log_path = setup_logging(log_dir=tmp_path)

        structlog.contextvars.bind_contextvars(game_id="g-1")
        structlog.get_logger("test.json").info("form computed", form=FormLabel.HOT)

        assert log_path is not None
        parsed = json.loads(log_path.read_text().strip().splitlines()[0])
        assert parsed["event"] == "form computed"
        assert parsed["game_id"] == "g-1"
        assert parsed["form"] == "hot"
        assert parsed["level"] == "info"


class TestSerializeEnums:
    def test_replaces_top_level_enums(self):
        event_dict = {"key": AggregationKey.PROFILE, "form": FormLabel.NO_DATA, "wins": 3}

        result = _serialize_enums(None, "", event_dict)

        assert result == {"key": "profile", "form": "no_data", "wins": 3}

    def test_leaves_other_values_alone(self):
        event_dict = {"player_id": "p-1", "points": -50}

        assert _serialize_enums(None, "", event_dict) == {"player_id": "p-1", "points": -50}
