# bufcycle/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen renders the viewer with curses.

Screen layout, top to bottom:
- the text area showing the current buffer,
- the echo area, as many rows as the transient message has lines,
- the status bar.

Bracket matching and spell highlighting are painted only while their host
features are enabled, which is how the cycle display keeps them out of the
way. Wide Unicode characters are measured with wcwidth.
"""

import curses
import logging
from typing import TYPE_CHECKING, Any

from bufcycle.utils.utils import CALM_BG_IDX, WHITE_FG_IDX, truncate_to_width

if TYPE_CHECKING:
    from bufcycle.core.Viewer import BufferViewer


## ================= class DrawScreen ==============================
class DrawScreen:
    """DrawScreen Class
    =========================
    Draws the text area, the echo area and the status bar of a `BufferViewer`.

    Attributes:
        MIN_WINDOW_WIDTH (int): Minimum usable window width.
        MIN_WINDOW_HEIGHT (int): Minimum usable window height.
        editor (BufferViewer): The viewer being drawn.
        config (dict): Viewer configuration.
        stdscr (curses.window): The main curses window.
        colors (dict[str, int]): Named curses attributes, shared with the viewer.
    """

    MIN_WINDOW_WIDTH = 20
    MIN_WINDOW_HEIGHT = 5

    def __init__(self, editor: "BufferViewer", config: dict[str, Any]) -> None:
        self.editor = editor
        self.config = config
        self.stdscr = editor.stdscr
        self.colors = editor.colors

        h, _ = self.stdscr.getmaxyx()
        self.editor.visible_lines = max(1, h - 1)
        self._init_status_colors()

    def get_string_width(self, text: str) -> int:
        return self.editor.get_string_width(text)

    def _init_status_colors(self) -> None:
        """Status bar pairs: white on xterm-236 with 256 colors, else white on black."""
        try:
            if not curses.has_colors():
                return
            max_colors = curses.COLORS
            if max_colors >= 256:
                fg_idx, bg_idx = WHITE_FG_IDX, CALM_BG_IDX
            elif max_colors >= 16:
                fg_idx, bg_idx = curses.COLOR_WHITE, curses.COLOR_BLACK
            else:
                fg_idx, bg_idx = curses.COLOR_WHITE, -1
            curses.init_pair(15, fg_idx, bg_idx)
            curses.init_pair(16, fg_idx, bg_idx)
        except curses.error as exc:
            logging.warning("init_pair failed (%s) – roll back to A_REVERSE", exc)
            self.colors["status"] = curses.A_REVERSE
            self.colors["status_error"] = curses.A_REVERSE | curses.A_BOLD
            return
        self.colors["status"] = curses.color_pair(15)
        self.colors["status_error"] = curses.color_pair(16) | curses.A_BOLD

    # ---------------------- Layout --------------------
    def echo_lines(self, height: int) -> list[str]:
        """Lines of the echo area, limited so one text row always remains."""
        if not self.editor.echo_text:
            return []
        lines = self.editor.echo_text.split("\n")
        return lines[: max(0, height - 2)]

    def draw(self) -> None:
        """The main screen drawing method."""
        try:
            height, width = self.stdscr.getmaxyx()
            if height < self.MIN_WINDOW_HEIGHT or width < self.MIN_WINDOW_WIDTH:
                self._show_small_window_error(height, width)
                return

            self.stdscr.erase()
            echo = self.echo_lines(height)
            text_rows = max(1, height - 1 - len(echo))
            self.editor.visible_lines = text_rows
            self.editor.last_window_size = (height, width)

            self._adjust_vertical_scroll(text_rows)
            self._draw_text(text_rows, width)
            if self.editor.features.is_enabled("spell_check"):
                self._draw_spelling(text_rows, width)
            if self.editor.features.is_enabled("paren_match"):
                self._draw_bracket_match(text_rows, width)
            self._draw_echo_area(echo, text_rows, width)
            self._draw_status_bar()

            self.stdscr.noutrefresh()

        except curses.error as e:
            logging.error(f"Curses error in DrawScreen.draw(): {e}", exc_info=True)
            self.editor._set_status_message(f"Draw error: {str(e)[:80]}...")
        except Exception as e:
            logging.exception("Unexpected error in DrawScreen.draw()")
            self.editor._set_status_message(f"Draw error: {str(e)[:80]}...")

    def _show_small_window_error(self, height: int, width: int) -> None:
        msg = f"Window too small ({width}x{height}). Minimum is {self.MIN_WINDOW_WIDTH}x{self.MIN_WINDOW_HEIGHT}."
        try:
            self.stdscr.clear()
            start_col = max(0, (width - len(msg)) // 2)
            self.stdscr.addstr(height // 2, start_col, self.truncate_string(msg, max(0, width - 1)))
        except curses.error:
            pass

    # ---------------------- Text area --------------------
    def _adjust_vertical_scroll(self, text_rows: int) -> None:
        buf = self.editor.current_buffer
        if buf is None:
            return
        if buf.cursor_y < buf.scroll_top:
            buf.scroll_top = buf.cursor_y
        elif buf.cursor_y >= buf.scroll_top + text_rows:
            buf.scroll_top = buf.cursor_y - text_rows + 1
        buf.scroll_top = max(0, min(buf.scroll_top, max(0, len(buf.lines) - 1)))

    def _draw_text(self, text_rows: int, width: int) -> None:
        buf = self.editor.current_buffer
        if buf is None:
            return
        attr = self.colors.get("default", curses.A_NORMAL)
        for row in range(text_rows):
            doc_y = buf.scroll_top + row
            if doc_y >= len(buf.lines):
                break
            line = buf.lines[doc_y].replace("\t", "    ")
            try:
                self.stdscr.addstr(row, 0, self.truncate_string(line, width - 1), attr)
            except curses.error:
                pass

    def _screen_x(self, line: str, col: int) -> int:
        return self.get_string_width(line[:col].replace("\t", "    "))

    def _paint(self, row: int, x: int, cells: int, width: int, attr: int) -> None:
        if x >= width - 1 or cells <= 0:
            return
        try:
            self.stdscr.chgat(row, x, min(cells, width - 1 - x), attr)
        except curses.error:
            pass

    def _draw_spelling(self, text_rows: int, width: int) -> None:
        buf = self.editor.current_buffer
        if buf is None:
            return
        attr = self.colors.get("misspelled", curses.A_UNDERLINE)
        for row in range(text_rows):
            doc_y = buf.scroll_top + row
            if doc_y >= len(buf.lines):
                break
            line = buf.lines[doc_y]
            for start, end in self.editor.misspelled_spans(line):
                x = self._screen_x(line, start)
                self._paint(row, x, self._screen_x(line, end) - x, width, attr)

    def _draw_bracket_match(self, text_rows: int, width: int) -> None:
        buf = self.editor.current_buffer
        if buf is None:
            return
        match = self.editor.find_matching_bracket(buf.cursor_y, buf.cursor_x)
        if match is None:
            return
        attr = self.colors.get("bracket", curses.A_REVERSE)
        for doc_y, doc_x in ((buf.cursor_y, buf.cursor_x), match):
            row = doc_y - buf.scroll_top
            if 0 <= row < text_rows:
                line = buf.lines[doc_y]
                self._paint(row, self._screen_x(line, doc_x), 1, width, attr)

    # ---------------------- Echo area --------------------
    def _draw_echo_area(self, lines: list[str], top: int, width: int) -> None:
        attr = self.colors.get("echo", curses.A_NORMAL)
        sep_attr = self.colors.get("separator", curses.A_DIM)
        for offset, line in enumerate(lines):
            row = top + offset
            is_separator = offset == 0 and line and set(line) == {"─"}
            try:
                self.stdscr.addstr(
                    row, 0, self.truncate_string(line, width - 1), sep_attr if is_separator else attr
                )
            except curses.error:
                pass

    def truncate_string(self, s: str, max_width: int) -> str:
        """Return `s` clipped to visual width `max_width`."""
        return truncate_to_width(s, max_width)

    # ---------------------- Status bar --------------------
    def status_sections(self) -> tuple[str, str]:
        """Left (buffer info) and right (enabled features and lighter) texts."""
        buf = self.editor.current_buffer
        if buf is None:
            left = " No buffer "
        else:
            left = (
                f" {buf.name} | {buf.encoding.upper()} | "
                f"Ln {buf.cursor_y + 1}/{len(buf.lines)} | Col {buf.cursor_x + 1} "
            )
        flags = " ".join(
            {"spell_check": "Spell", "paren_match": "Paren"}.get(name, name)
            for name in self.editor.features.enabled_names()
        )
        right = f" {flags}" if flags else ""
        right += self.editor.lifecycle.lighter()
        if right:
            right += " "
        return left, right

    def _draw_status_bar(self) -> None:
        """Single-line status bar at the bottom of the screen.

        ╭─ Left ──────────────────────────────╮
        │  notes.txt | UTF-8 | Ln 4/12 | Col 1 │
        ├─ Middle ────────────────────────────┤
        │                Ready                 │
        ╰─ Right ─────────────────────────────╯
                          Spell Paren BufCycle[3]
        """
        try:
            height, width = self.stdscr.getmaxyx()
            if height <= 2:
                return
            y = height - 1
            c_norm = self.colors.get("status", curses.A_REVERSE)
            c_err = self.colors.get("status_error", c_norm | curses.A_BOLD)
            c_lighter = self.colors.get("lighter", curses.A_BOLD)

            left, right = self.status_sections()
            left_w = self.get_string_width(left)
            right_w = self.get_string_width(right)

            msg = self.editor.status_message or "Ready"
            spacing = width - left_w - right_w
            if spacing < self.get_string_width(msg):
                msg = self.truncate_string(msg, max(0, spacing - 1))
            msg_w = self.get_string_width(msg)
            pad_left = max(0, (spacing - msg_w) // 2)
            pad_right = max(0, spacing - msg_w - pad_left)

            line = self.truncate_string(left + " " * pad_left + msg + " " * pad_right + right, width - 1)
            line += " " * max(0, width - 1 - self.get_string_width(line))
            self.stdscr.addstr(y, 0, line, c_norm)

            lighter = self.editor.lifecycle.lighter()
            if lighter:
                lighter_w = self.get_string_width(lighter)
                lighter_x = width - 1 - lighter_w - 1
                if lighter_x >= 0:
                    self.stdscr.chgat(y, lighter_x, lighter_w, c_norm | c_lighter)

            if "error" in msg.lower():
                self.stdscr.chgat(y, left_w + pad_left, msg_w, c_err)

        except curses.error:
            pass
        except Exception:
            logging.exception("Unexpected error in _draw_status_bar")

    def _position_cursor(self) -> None:
        """Moves the terminal cursor to the buffer cursor inside the text area."""
        buf = self.editor.current_buffer
        height, width = self.stdscr.getmaxyx()
        if buf is None or height <= 2:
            return
        y = max(0, min(buf.cursor_y - buf.scroll_top, self.editor.visible_lines - 1))
        line = buf.lines[buf.cursor_y] if buf.cursor_y < len(buf.lines) else ""
        x = max(0, min(self._screen_x(line, buf.cursor_x), width - 1))
        try:
            self.stdscr.move(y, x)
        except curses.error as e:
            logging.warning(f"Curses error positioning cursor at ({y}, {x}): {e}")
