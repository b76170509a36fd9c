# bufcycle/utils/logging_config.py
"""bufcycle.utils.logging_config
===============================

Logging setup for the bufcycle viewer.

Defines the global logger objects and a single entry point, `setup_logging`,
which attaches handlers to the root logger according to the ``[logging]``
section of the application configuration.

Features:
    - Rotating file logging for general application events (bufcycle.log).
    - Optional console logging to stderr with configurable log level.
    - Optional separate error log file (error.log) for ERROR and CRITICAL events.
    - Optional key event tracing (keytrace.log) enabled via the BUFCYCLE_KEYTRACE
      environment variable.
    - Configurable log directory, with fallback to the system temp directory.
    - Safe reconfiguration: existing handlers are replaced, never duplicated.
    - Never raises; setup problems are reported on stderr.

Globals:
    logger: Main application logger ("bufcycle").
    KEY_LOGGER: Logger for raw key-press trace events ("bufcycle.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
logger = logging.getLogger("bufcycle")
KEY_LOGGER = logging.getLogger("bufcycle.keyevents")

KEYTRACE_ENV = "BUFCYCLE_KEYTRACE"


def _resolve_log_dir(log_dir: str) -> str:
    """Return a usable directory for log files, creating it when needed.

    An empty string means the current working directory. If the requested
    directory cannot be created, the system temp directory is used instead.
    """
    if not log_dir:
        return ""
    log_dir = os.path.expanduser(log_dir)
    if os.path.isdir(log_dir):
        return log_dir
    try:
        os.makedirs(log_dir, exist_ok=True)
        return log_dir
    except OSError as e_mkdir:
        print(f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr)
        fallback = tempfile.gettempdir()
        print(f"Logging to temporary directory: '{fallback}'", file=sys.stderr)
        return fallback


def _rotating_handler(
    filename: str, max_bytes: int, backup_count: int
) -> Optional[logging.handlers.RotatingFileHandler]:
    try:
        return logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except Exception as e_fh:
        print(
            f"Error setting up file logger for '{filename}': {e_fh}. File logging may be impaired.",
            file=sys.stderr,
        )
        return None


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    Up to four independent handlers are installed:

    1. File handler: rotating ``bufcycle.log`` capturing everything from
       ``file_level`` (default DEBUG) upward.
    2. Console handler: optional ``stderr`` output whose threshold is
       ``console_level`` (default WARNING).
    3. Error-file handler: optional rotating ``error.log`` that stores only
       ERROR and CRITICAL events.
    4. Key-event handler: rotating ``keytrace.log`` attached to the
       ``bufcycle.keyevents`` logger when ``BUFCYCLE_KEYTRACE`` is set to
       ``1/true/yes``.

    Existing handlers on the root logger are cleared, so calling this more
    than once (as the tests do) never produces duplicate records.

    Args:
        config (dict | None): Application configuration. Only the
            ``["logging"]`` sub-section is consulted; recognised keys are
            ``file_level``, ``console_level``, ``log_to_console``,
            ``separate_error_log`` and ``log_dir``.

    Example:
        >>> setup_logging({"logging": {"file_level": "INFO", "log_to_console": False}})
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})
    log_dir = _resolve_log_dir(str(logging_config.get("log_dir", "") or ""))

    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
    )

    log_filename = os.path.join(log_dir, "bufcycle.log")
    file_handler = _rotating_handler(log_filename, 2 * 1024 * 1024, 5)
    if file_handler:
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)

    # Console Handler
    console_handler = None
    if logging_config.get("log_to_console", True):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_log_level = getattr(logging, console_level_str, logging.WARNING)
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s")
        )
        console_handler.setLevel(console_log_level)

    # Optional Separate Error Log File
    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_file_handler = _rotating_handler(
            os.path.join(log_dir, "error.log"), 1 * 1024 * 1024, 3
        )
        if error_file_handler:
            error_file_handler.setFormatter(file_formatter)
            error_file_handler.setLevel(logging.ERROR)

    root_logger = logging.getLogger()
    root_logger.handlers = []  # Clear existing root handlers to avoid duplicates

    for handler in (file_handler, console_handler, error_file_handler):
        if handler:
            root_logger.addHandler(handler)

    root_logger.setLevel(log_file_level)

    # Key Event Logger
    key_event_logger = logging.getLogger("bufcycle.keyevents")
    key_event_logger.propagate = False
    key_event_logger.setLevel(logging.DEBUG)
    key_event_logger.handlers = []
    key_event_logger.disabled = False

    if os.environ.get(KEYTRACE_ENV, "").lower() in {"1", "true", "yes"}:
        key_trace_filename = os.path.join(log_dir, "keytrace.log")
        key_trace_handler = _rotating_handler(key_trace_filename, 1 * 1024 * 1024, 3)
        if key_trace_handler:
            key_trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            key_event_logger.addHandler(key_trace_handler)
            logging.info("Key event tracing enabled, logging to '%s'.", key_trace_filename)
        else:
            key_event_logger.disabled = True
    else:
        key_event_logger.addHandler(logging.NullHandler())
        key_event_logger.disabled = True
        logging.debug("Key event tracing is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(
            "File logging to '%s' at level: %s.",
            log_filename,
            logging.getLevelName(file_handler.level),
        )
    if console_handler:
        logging.info(
            "Console logging to stderr at level: %s.",
            logging.getLevelName(console_handler.level),
        )
    if error_file_handler:
        logging.info("Error logging to 'error.log' at level: ERROR.")
