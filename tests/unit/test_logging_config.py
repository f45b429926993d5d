"""Unit tests for structured logging."""

import json
import logging

import pytest

from fastapi_view.logging_config import get_logger, log_with_context, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_console_only(restore_root_logger):
    """Test console-only setup installs a single stream handler."""
    root = setup_logging("warning")

    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], logging.StreamHandler)


def test_log_with_context_writes_json_fields(tmp_path, restore_root_logger):
    """Test extra fields end up in the JSON log file."""
    log_file = tmp_path / "logs" / "views.log"
    setup_logging("DEBUG", log_file)
    logger = get_logger("fastapi_view.test")

    log_with_context(logger, "info", "Render delivered", page="index.html", event_type="render_delivered")
    for handler in logging.getLogger().handlers:
        handler.flush()

    record = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert record["message"] == "Render delivered"
    assert record["page"] == "index.html"
    assert record["event_type"] == "render_delivered"
    assert record["levelname"] == "INFO"
