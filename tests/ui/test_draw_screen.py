# tests/ui/test_draw_screen.py
"""Unit and integration tests for the `DrawScreen` UI renderer.
=================================================================

The renderer is exercised through a real `BufferViewer` on a mocked 24x80
screen; assertions inspect the `addstr` / `chgat` calls it issued.
"""

from unittest.mock import MagicMock

import pytest

from bufcycle.core.Viewer import BufferViewer


def rows_written(stdscr: MagicMock) -> dict[int, str]:
    """Row -> text of every addstr call, later calls winning."""
    written: dict[int, str] = {}
    for call in stdscr.addstr.call_args_list:
        row, _col, text = call.args[:3]
        written[row] = text
    return written


def chgat_attrs(stdscr: MagicMock) -> list[int]:
    return [call.args[3] for call in stdscr.chgat.call_args_list]


@pytest.fixture
def drawn(viewer_with_files: BufferViewer, mock_stdscr: MagicMock) -> BufferViewer:
    mock_stdscr.reset_mock()
    return viewer_with_files


class TestLayout:
    def test_text_area_and_status_bar(self, drawn: BufferViewer, mock_stdscr: MagicMock) -> None:
        drawn.drawer.draw()

        written = rows_written(mock_stdscr)
        assert written[0] == "alpha (first line)"
        assert written[1] == "second [line]"
        status = written[23]
        encoding = drawn.current_buffer.encoding.upper()
        assert status.startswith(f" alpha.txt | {encoding} | Ln 1/2 | Col 1 ")
        assert "Ready" in status
        assert "Spell Paren" in status
        assert len(status) == 79
        assert drawn.visible_lines == 23

    def test_echo_area_sits_above_the_status_bar(self, drawn: BufferViewer, mock_stdscr: MagicMock) -> None:
        drawn.execute_command("cycle_next", drawn.cycle_next)
        mock_stdscr.reset_mock()

        drawn.drawer.draw()

        written = rows_written(mock_stdscr)
        # separator + header + four entries
        assert drawn.visible_lines == 24 - 1 - 6
        assert written[17] == "─" * 79
        assert written[18] == "Next buffers: "
        assert [written[r] for r in range(19, 23)] == [
            "1. bravo.txt",
            "2. charlie.txt",
            "3. delta.txt",
            "4. echo.txt",
        ]

    def test_lighter_replaces_suppressed_feature_flags(
        self, drawn: BufferViewer, mock_stdscr: MagicMock
    ) -> None:
        drawn.execute_command("cycle_next", drawn.cycle_next)
        mock_stdscr.reset_mock()

        drawn.drawer.draw()

        status = rows_written(mock_stdscr)[23]
        assert status.rstrip().endswith("BufCycle[3]")
        assert "Spell" not in status
        assert drawn.drawer.status_sections()[1] == " BufCycle[3] "

    def test_echo_lines_leave_one_text_row(self, drawn: BufferViewer) -> None:
        drawn.echo_text = "\n".join(str(i) for i in range(50))
        assert len(drawn.drawer.echo_lines(24)) == 22
        drawn.echo_text = ""
        assert drawn.drawer.echo_lines(24) == []

    def test_small_window(self, drawn: BufferViewer, mock_stdscr: MagicMock) -> None:
        mock_stdscr.getmaxyx.return_value = (3, 10)
        drawn.drawer.draw()
        mock_stdscr.clear.assert_called_once()
        mock_stdscr.noutrefresh.assert_not_called()


class TestFeatureHighlights:
    def test_spelling_painted_only_while_enabled(self, drawn: BufferViewer, mock_stdscr: MagicMock) -> None:
        drawn.dictionary = {"alpha", "first", "line", "second"}
        drawn.current_buffer.lines = ["alpha frist line"]
        misspelled = drawn.colors["misspelled"]

        drawn.drawer.draw()
        assert mock_stdscr.chgat.call_args_list[0].args == (0, 6, 5, misspelled)

        mock_stdscr.reset_mock()
        drawn.features.get("spell_check").disable()
        drawn.drawer.draw()
        assert misspelled not in chgat_attrs(mock_stdscr)

    def test_bracket_match_painted_only_while_enabled(
        self, drawn: BufferViewer, mock_stdscr: MagicMock
    ) -> None:
        buf = drawn.current_buffer
        buf.cursor_x = 6
        bracket = drawn.colors["bracket"]

        drawn.drawer.draw()
        painted = [c.args for c in mock_stdscr.chgat.call_args_list if c.args[3] == bracket]
        assert painted == [(0, 6, 1, bracket), (0, 17, 1, bracket)]

        mock_stdscr.reset_mock()
        drawn.execute_command("cycle_next", drawn.cycle_next)
        drawn.current_buffer.cursor_x = 6
        drawn.drawer.draw()
        assert bracket not in chgat_attrs(mock_stdscr)


class TestHelpers:
    def test_truncate_string_respects_wide_glyphs(self, drawn: BufferViewer) -> None:
        assert drawn.drawer.truncate_string("日本語", 5) == "日本"
        assert drawn.drawer.truncate_string("abc", 10) == "abc"
        assert drawn.drawer.truncate_string("abc", 0) == ""

    def test_cursor_follows_scrolled_buffer(self, drawn: BufferViewer, mock_stdscr: MagicMock) -> None:
        buf = drawn.current_buffer
        buf.lines = [f"line {i}" for i in range(100)]
        buf.cursor_y, buf.cursor_x = 50, 3

        drawn.drawer.draw()
        drawn.drawer._position_cursor()

        assert buf.scroll_top == 50 - 23 + 1
        mock_stdscr.move.assert_called_with(22, 3)
