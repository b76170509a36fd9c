#!/usr/bin/env python3
# /bufcycle/main.py
"""
bufcycle Main Entry Point
=========================

This script is the primary entry point for launching the bufcycle viewer. It performs:
1) Environment Loading: reads ~/.config/bufcycle/.env early (e.g. BUFCYCLE_KEYTRACE).
2) Path Setup: ensures the bufcycle package is importable from a source checkout.
3) Configuration & Logging: loads config and initializes logging ASAP.
4) Core Import: imports the BufferViewer class after logging is ready.
5) Curses Wrapper: safely initializes/tears down curses to avoid terminal corruption.
6) Application Run: opens every file named on the command line and runs the main loop.
"""

from __future__ import annotations

import curses
import locale
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# --- Step 1: Load Environment Variables from the User's Config Directory ---
try:
    load_dotenv(dotenv_path=Path.home() / ".config" / "bufcycle" / ".env")
except OSError:
    # No HOME or unreadable file; tracing simply stays off.
    pass

# --- Step 2: Set up the Python Path ---
src_root = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if os.path.isdir(src_root) and src_root not in sys.path:
    sys.path.insert(0, src_root)

# --- Step 3: Immediate Logging and Configuration Setup ---
try:
    from bufcycle.utils.logging_config import setup_logging
    from bufcycle.utils.utils import load_config

    config: dict[str, Any] = load_config()
    setup_logging(config)
    logger = logging.getLogger("bufcycle")
except Exception as e:
    print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
    import traceback
    traceback.print_exc()
    sys.exit(1)

# --- Step 4: Import the Core Application ---
try:
    from bufcycle.core import BufferViewer
except ImportError as e:
    logger.critical("Failed to import a critical application component: %s", e, exc_info=True)
    sys.exit(1)


def main_app_runner(stdscr: curses.window, config: dict[str, Any], files: list[str]) -> None:
    """
    Target for `curses.wrapper`. Creates the viewer, opens `files` and runs it.

    The first file given on the command line ends up as the current buffer.
    """
    try:
        curses.set_escdelay(25)
    except AttributeError:
        os.environ.setdefault("ESCDELAY", "25")

    viewer = BufferViewer(stdscr, config=config)

    if hasattr(signal, "SIGTSTP"):
        try:
            signal.signal(signal.SIGTSTP, signal.SIG_IGN)
        except (OSError, ValueError):
            pass

    first = None
    for path in files:
        buf = viewer.open_file(path)
        if first is None and buf is not None:
            first = buf
    if first is not None:
        viewer.switch_to_buffer(first)

    viewer.run()


def start() -> None:
    """Initializes locale and runs the curses application via wrapper."""
    logger.info("bufcycle viewer starting up...")

    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    files = [arg for arg in sys.argv[1:] if arg.strip()]

    try:
        curses.wrapper(main_app_runner, config, files)
        logger.info("bufcycle viewer shut down gracefully.")
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    start()
