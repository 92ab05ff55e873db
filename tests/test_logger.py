import logging
from pathlib import Path

import pytest

from codesplit.logger import configure_logging, get_logger, redirect_logging_to_file, resolve_level
from codesplit.settings import settings


def test_redirect_logging_to_file(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "codesplit.log"
    try:
        redirect_logging_to_file(log_path)
        get_logger("codesplit.tests").info("logger_test_event", rows=3)
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_path.read_text(encoding="utf-8")
        assert "logger_test_event" in content
        assert "rows=3" in content
    finally:
        configure_logging(enable_console=False)


def test_console_can_be_disabled() -> None:
    configure_logging(level=logging.DEBUG, enable_console=False)
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert all(isinstance(handler, logging.NullHandler) for handler in root.handlers)


def test_json_output(tmp_path: Path) -> None:
    import json

    log_path = tmp_path / "codesplit.jsonl"
    try:
        redirect_logging_to_file(log_path, json_output=True)
        get_logger("codesplit.tests").warning("json_event", file="a.py")
        for handler in logging.getLogger().handlers:
            handler.flush()

        (line,) = log_path.read_text(encoding="utf-8").splitlines()
        payload = json.loads(line)
        assert payload["event"] == "json_event"
        assert payload["file"] == "a.py"
        assert payload["level"] == "warning"
    finally:
        configure_logging(enable_console=False)


def test_level_names_are_resolved() -> None:
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Warning ") == logging.WARNING
    assert resolve_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ValueError, match="Unknown log level"):
        resolve_level("chatty")


def test_settings_supply_default_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "log_level", "WARNING")
    try:
        configure_logging(enable_console=False)
        assert logging.getLogger().level == logging.WARNING
    finally:
        configure_logging(level=logging.INFO, enable_console=False)


def test_settings_switch_file_output_to_json(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import json

    monkeypatch.setattr(settings, "log_json", True)
    log_path = tmp_path / "events.jsonl"
    try:
        redirect_logging_to_file(log_path, level="info")
        get_logger("codesplit.tests").info("settings_json_event")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert json.loads(log_path.read_text(encoding="utf-8"))["event"] == "settings_json_event"
    finally:
        configure_logging(level=logging.INFO, enable_console=False, json_output=False)
