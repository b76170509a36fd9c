# tests/conftest.py
"""Pytest configuration with shared fixtures for the bufcycle tests.

The application modules are imported here, before any test runs, so they
bind the real `curses` module; tests that construct curses-facing objects
patch the module attribute explicitly (see `viewer`).
"""

from __future__ import annotations

import copy
import curses as real_curses
from pathlib import Path
from typing import Any, Generator
from unittest.mock import MagicMock, patch

import pytest

from bufcycle.core.Viewer import BufferViewer
from bufcycle.utils.utils import DEFAULT_CONFIG
from tests.stubs import FakeClock, StubHost


def configure_curses_mock(curses_mock: MagicMock) -> MagicMock:
    """Gives a curses mock the constants and exception type the code relies on."""
    curses_mock.error = real_curses.error
    curses_mock.ERR = real_curses.ERR
    curses_mock.KEY_RESIZE = real_curses.KEY_RESIZE
    curses_mock.has_colors.return_value = True
    curses_mock.color_pair.return_value = 1
    curses_mock.COLORS = 256
    curses_mock.COLOR_PAIRS = 256
    curses_mock.A_NORMAL = 0
    curses_mock.A_BOLD = 1
    curses_mock.A_DIM = 2
    curses_mock.A_REVERSE = 4
    curses_mock.A_UNDERLINE = 8
    curses_mock.COLOR_WHITE = 7
    curses_mock.COLOR_BLACK = 0
    return curses_mock


# --- Automatic mocking of the curses module ---
@pytest.fixture(autouse=True)
def mock_curses_functions() -> Generator[MagicMock, None, None]:
    """Replaces `curses` in `sys.modules` for code that imports it lazily."""
    curses_mock = configure_curses_mock(MagicMock())
    with patch.dict("sys.modules", {"curses": curses_mock}):
        yield curses_mock


# --- Base fixtures for curses and configuration ---
@pytest.fixture
def mock_stdscr() -> MagicMock:
    """A mocked stdscr with a 24x80 terminal."""
    stdscr = MagicMock()
    stdscr.getmaxyx.return_value = (24, 80)
    return stdscr


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """The embedded defaults; cycling uses the `files` configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def viewer(mock_stdscr: MagicMock, mock_config: dict[str, Any]) -> Generator[BufferViewer, None, None]:
    """A real `BufferViewer` on a mocked screen, driven by a manual clock."""
    with (
        patch("bufcycle.core.Viewer.curses") as viewer_curses,
        patch("bufcycle.ui.DrawScreen.curses") as draw_curses,
    ):
        configure_curses_mock(viewer_curses)
        configure_curses_mock(draw_curses)
        clock = FakeClock()
        v = BufferViewer(mock_stdscr, mock_config, clock=clock)
        v.clock = clock  # type: ignore[attr-defined]
        yield v


@pytest.fixture
def viewer_with_files(viewer: BufferViewer, tmp_path: Path) -> BufferViewer:
    """The viewer with alpha.txt .. echo.txt open, alpha current."""
    names = ["alpha", "bravo", "charlie", "delta", "echo"]
    for name in reversed(names):
        path = tmp_path / f"{name}.txt"
        path.write_text(f"{name} (first line)\nsecond [line]\n", encoding="utf-8")
        viewer.open_file(str(path))
    return viewer


@pytest.fixture
def stub_host() -> StubHost:
    """A stub host with buffers a..e, a current."""
    return StubHost()
