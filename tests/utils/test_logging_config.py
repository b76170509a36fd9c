# tests/utils/test_logging_config.py
"""Unit tests for logging configuration utility.
=================================================

Tests for the logging setup utility in `bufcycle.utils.logging_config`.

This module verifies that `setup_logging`:
- Creates rotating file handlers for the main log and a separate error log
  when `separate_error_log` is enabled.
- Honors the configured levels for each handler.
- Can disable console logging when `log_to_console` is set to False.
- Enables key tracing only when `BUFCYCLE_KEYTRACE` asks for it.

The tests run in a temporary working directory to avoid touching real files.
"""

import logging

import pytest

from bufcycle.utils import logging_config


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def test_setup_logging_creates_handlers(tmp_path, monkeypatch) -> None:
    """`setup_logging` should add rotating file handlers with proper levels.

    Scenario:
    - Console logging is disabled.
    - Separate error log is requested.
    - File handler level is INFO.
    - Error file handler level is ERROR.
    """
    monkeypatch.chdir(tmp_path)

    logging_config.setup_logging(
        {
            "logging": {
                "file_level": "INFO",
                "console_level": "ERROR",
                "log_to_console": False,
                "separate_error_log": True,
            }
        }
    )

    root = logging.getLogger()
    names = {type(h).__name__ for h in root.handlers}

    assert "RotatingFileHandler" in names
    # Exactly two handlers: main file + error file
    assert len(root.handlers) == 2
    assert root.handlers[0].level == logging.INFO
    assert root.handlers[1].level == logging.ERROR
    assert (tmp_path / "bufcycle.log").exists()


def test_console_handler_and_repeat_setup(tmp_path, monkeypatch) -> None:
    """Calling `setup_logging` twice replaces handlers instead of stacking them."""
    monkeypatch.chdir(tmp_path)
    config = {"logging": {"log_to_console": True, "console_level": "warning"}}

    logging_config.setup_logging(config)
    logging_config.setup_logging(config)

    root = logging.getLogger()
    assert len(root.handlers) == 2
    console = [h for h in root.handlers if type(h) is logging.StreamHandler]
    assert len(console) == 1
    assert console[0].level == logging.WARNING


def test_log_dir_is_created(tmp_path) -> None:
    log_dir = tmp_path / "nested" / "logs"
    logging_config.setup_logging({"logging": {"log_dir": str(log_dir), "log_to_console": False}})
    assert (log_dir / "bufcycle.log").exists()


def test_key_tracing_follows_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    monkeypatch.delenv(logging_config.KEYTRACE_ENV, raising=False)
    logging_config.setup_logging({"logging": {"log_to_console": False}})
    assert logging_config.KEY_LOGGER.disabled

    monkeypatch.setenv(logging_config.KEYTRACE_ENV, "1")
    logging_config.setup_logging({"logging": {"log_to_console": False}})
    assert not logging_config.KEY_LOGGER.disabled
    assert not logging_config.KEY_LOGGER.propagate
    logging_config.KEY_LOGGER.debug("key=14")
    for handler in logging_config.KEY_LOGGER.handlers:
        handler.flush()
    assert "key=14" in (tmp_path / "keytrace.log").read_text(encoding="utf-8")

    for handler in logging_config.KEY_LOGGER.handlers:
        handler.close()
    logging_config.KEY_LOGGER.handlers = []
