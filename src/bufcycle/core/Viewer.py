# bufcycle/core/Viewer.py
# ruff: noqa: E501
"""bufcycle.core.Viewer
=====================
BufferViewer: the curses host application of bufcycle.

A read-only, multi-buffer terminal viewer. It owns everything the cycling
feature treats as "the host":

- the buffer list (`BufferRing`) and its cycle provider,
- the cooperative timer facility (`TimerScheduler`),
- toggleable features (spell checking, bracket matching),
- a status bar with a logged message history, and a multi-line echo area
  for transient, non-logged messages,
- the command loop that records `this_command` / `last_command` and runs
  idle callbacks after every command.

The cycling feature itself (`LifecycleController`, `CycleAdapter`,
`SelectionKeyMap`) is wired in `_initialize_components`.
"""

import curses
import logging
import os
import re
import time
from typing import Any, Callable, Optional

from bufcycle.core.Buffers import Buffer, BufferRing
from bufcycle.core.CycleAdapter import CycleAdapter
from bufcycle.core.Features import FeatureRegistry, HostFeature
from bufcycle.core.Lifecycle import CycleSession, LifecycleController
from bufcycle.core.ListRenderer import ListRenderer
from bufcycle.core.Scheduler import TimerHandle, TimerScheduler
from bufcycle.ui.DrawScreen import DrawScreen
from bufcycle.ui.KeyBinder import KeyBinder
from bufcycle.ui.SelectionKeys import SelectionKeyMap
from bufcycle.utils.utils import cycle_settings, display_width, expand_path, read_text_file

MESSAGE_LOG_LIMIT = 200
BRACKET_PAIRS = {"(": ")", "[": "]", "{": "}"}
WORD_RE = re.compile(r"[A-Za-z']+")


## ==================== BufferViewer Class ====================
class BufferViewer:
    """Class BufferViewer
    =========================
    Main class of the bufcycle viewer and reference `EditorHost`.

    Attributes:
        stdscr (curses.window): The main curses window.
        config (dict): Merged application configuration.
        ring (BufferRing): Open buffers, most recently used first.
        scheduler (TimerScheduler): Main-thread timers and idle callbacks.
        features (FeatureRegistry): `spell_check` and `paren_match`.
        settings (CycleSettings): Normalised `[cycle]` configuration.
        session (CycleSession): State of the cycling feature.
        lifecycle (LifecycleController): Activation of the cycling display.
        cycler (CycleAdapter): `cycle_next` / `cycle_previous` / selection.
        selection_keys (SelectionKeyMap): Direct-selection key bindings.
        status_message (str): Text in the middle of the status bar.
        message_log (list[str]): History of logged status messages.
        echo_text (str): Transient message shown above the status bar.
        this_command (Optional[str]): Command being executed.
        last_command (Optional[str]): Last completed command.
        running (bool): Main loop control flag.
    """

    def __init__(
        self,
        stdscr: "curses.window",
        config: dict[str, Any],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.stdscr = stdscr
        self.config: dict[str, Any] = config

        self._initialize_state()
        self._initialize_components(clock)
        self._setup_environment()

        if not self.ring.order:
            self.ring.add(Buffer(name="*scratch*", lines=[""]))
        logging.info("BufferViewer initialized.")

    # --- State Initialization ---
    def _initialize_state(self) -> None:
        self.running: bool = False
        self.status_message: str = "Ready"
        self.message_log: list[str] = []
        self.echo_text: str = ""
        self._echo_handle: Optional[TimerHandle] = None
        self._echo_sticky: bool = False
        self.this_command: Optional[str] = None
        self.last_command: Optional[str] = None
        self.visible_lines: int = 0
        self.last_window_size: tuple[int, int] = (0, 0)
        self._force_full_redraw: bool = False
        self.dictionary: set[str] = set()

    # --- Component Initialization ---
    def _initialize_components(self, clock: Callable[[], float]) -> None:
        self.colors: dict[str, int] = {}
        self.init_colors()

        self.scheduler = TimerScheduler(clock)
        self.ring = BufferRing(self.config)

        features_cfg = self.config.get("features", {})
        self.features = FeatureRegistry()
        self.features.register(
            HostFeature("spell_check", bool(features_cfg.get("spell_check", True)), "Underline unknown words")
        )
        self.features.register(
            HostFeature("paren_match", bool(features_cfg.get("paren_match", True)), "Highlight matching brackets")
        )
        self._load_dictionary(features_cfg.get("dictionary", ""))

        self.settings = cycle_settings(self.config)
        self.session = CycleSession()
        self.lifecycle = LifecycleController(self, self.settings, self.session)
        self.cycler = CycleAdapter(
            self,
            self.ring,
            ListRenderer(self.settings.max_rows, self.settings.slant),
            self.lifecycle,
            self.settings,
            self.session,
        )
        self.selection_keys = SelectionKeyMap(self.cycler, self.settings.selection_keys)

        self.drawer: DrawScreen = DrawScreen(self, self.config)
        # KeyBinder is initialized last as it depends on the components above
        self.keybinder: KeyBinder = KeyBinder(self)

    def _setup_environment(self) -> None:
        try:
            self.stdscr.keypad(True)
            curses.curs_set(1)
            curses.raw()
            curses.noecho()
        except curses.error as exc:
            logging.warning("Could not configure terminal modes: %s", exc)

    def _load_dictionary(self, path: str) -> None:
        if not path:
            return
        try:
            lines, _ = read_text_file(expand_path(path))
        except OSError as e:
            logging.warning("Could not read spelling dictionary '%s': %s", path, e)
            return
        self.dictionary = {w.strip().lower() for w in lines if w.strip()}
        logging.info("Loaded %d dictionary words from '%s'.", len(self.dictionary), path)

    def init_colors(self) -> None:
        """Initializes curses color pairs with graceful degradation."""
        self.colors = {
            "default": curses.A_NORMAL,
            "status": curses.A_REVERSE,
            "status_error": curses.A_REVERSE | curses.A_BOLD,
            "echo": curses.A_NORMAL,
            "separator": curses.A_DIM,
            "bracket": curses.A_REVERSE,
            "misspelled": curses.A_UNDERLINE,
            "lighter": curses.A_BOLD,
        }
        try:
            if not curses.has_colors() or curses.COLORS < 8:
                logging.warning("Terminal has no or limited color support. Using monochrome attributes.")
                return
            curses.start_color()
            curses.use_default_colors()
            pairs = {
                "echo": (1, curses.COLOR_CYAN, curses.A_NORMAL),
                "separator": (2, curses.COLOR_WHITE, curses.A_DIM),
                "bracket": (3, curses.COLOR_YELLOW, curses.A_BOLD | curses.A_REVERSE),
                "misspelled": (4, curses.COLOR_RED, curses.A_UNDERLINE),
                "lighter": (5, curses.COLOR_GREEN, curses.A_BOLD),
            }
            for name, (pair_id, fg, attr) in pairs.items():
                curses.init_pair(pair_id, fg, -1)
                self.colors[name] = curses.color_pair(pair_id) | attr
        except curses.error as exc:
            logging.warning("Color initialization failed (%s); using monochrome attributes.", exc)

    # ==================== Host operations ====================
    @property
    def current_buffer(self) -> Optional[Buffer]:
        return self.ring.current

    def switch_to_buffer(self, buf: Buffer, norecord: bool = False) -> None:
        self.ring.switch_to(buf, norecord=norecord)
        self._force_full_redraw = True

    def bury_buffer(self, buf: Buffer) -> None:
        self.ring.bury(buf)

    def frame_size(self) -> tuple[int, int]:
        height, width = self.stdscr.getmaxyx()
        return height, width

    def request_redraw(self) -> None:
        self._force_full_redraw = True

    def show_transient_message(self, text: str, timeout: Optional[float] = None) -> None:
        """Shows `text` in the echo area without adding it to `message_log`.

        With a positive `timeout` the message is cleared by a timer, otherwise
        it stays until the next command starts.
        """
        if self._echo_handle is not None:
            self._echo_handle.cancel()
            self._echo_handle = None
        self.echo_text = str(text)
        self._echo_sticky = not (timeout and timeout > 0)
        if not self._echo_sticky:
            self._echo_handle = self.scheduler.call_later(float(timeout), self.clear_transient_message)
        self._force_full_redraw = True

    def clear_transient_message(self) -> None:
        if self._echo_handle is not None:
            self._echo_handle.cancel()
            self._echo_handle = None
        if self.echo_text:
            self.echo_text = ""
            self._force_full_redraw = True

    def _set_status_message(self, message: str) -> None:
        """Sets the status bar message and records it in `message_log`."""
        message = str(message)
        if self.status_message != message:
            self.status_message = message
            logging.debug("Status message set to: '%s'", message)
        self.message_log.append(message)
        if len(self.message_log) > MESSAGE_LOG_LIMIT:
            del self.message_log[: len(self.message_log) - MESSAGE_LOG_LIMIT]

    message = _set_status_message

    # ==================== Command loop ====================
    def execute_command(self, name: str, action: Callable[[], Any]) -> bool:
        """Runs one command with `this_command`/`last_command` bookkeeping.

        After the command completes the idle period begins, so pending idle
        callbacks run here.

        Returns:
            bool: True if the command reported a visual change.
        """
        if self._echo_sticky and self.echo_text:
            self.clear_transient_message()
        self.this_command = name
        changed = False
        try:
            changed = bool(action())
        except Exception as e:
            logging.exception("Command %r failed.", name)
            self._set_status_message(f"Command error: {str(e)[:60]}")
            changed = True
        finally:
            self.last_command = name
            self.this_command = None
        self.scheduler.run_idle()
        return changed or self._force_full_redraw

    def run(self) -> None:
        """The main event loop of the viewer."""
        logging.info("Viewer main loop started.")
        self.running = True
        self._force_full_redraw = True

        self.stdscr.nodelay(True)
        self.stdscr.timeout(100)

        while self.running:
            try:
                redraw_needed = self._process_events_and_input()
                self._render_screen(redraw_needed)
            except KeyboardInterrupt:
                logging.info("Main loop interrupted by KeyboardInterrupt.")
                self.exit_viewer()
            except Exception as e:
                logging.critical("Unhandled exception in main loop: %s", e, exc_info=True)
                self.exit_viewer()

        logging.info("Viewer main loop finished.")

    def _process_events_and_input(self) -> bool:
        redraw_needed = False
        key_input = self.keybinder.get_key_input()
        if key_input != curses.ERR and key_input != -1:
            if key_input == curses.KEY_RESIZE:
                redraw_needed = self.handle_resize()
            elif self.keybinder.handle_input(key_input):
                redraw_needed = True
        if self.scheduler.run_due():
            redraw_needed = True
        return redraw_needed

    def _render_screen(self, redraw_needed: bool) -> None:
        if not redraw_needed and not self._force_full_redraw:
            return
        self.drawer.draw()
        self.drawer._position_cursor()
        curses.doupdate()
        self._force_full_redraw = False

    def handle_resize(self) -> bool:
        try:
            height, width = self.stdscr.getmaxyx()
            self.last_window_size = (height, width)
            self._force_full_redraw = True
            logging.debug("Resized to %dx%d", width, height)
            return True
        except curses.error as e:
            logging.error("Error handling resize: %s", e)
            return False

    # ==================== Buffers ====================
    def open_file(self, path: str) -> Optional[Buffer]:
        """Reads `path` into a new buffer and makes it current.

        Returns the buffer, or None when the file cannot be read.
        """
        abs_path = expand_path(path)
        for buf in self.ring:
            if buf.path == abs_path:
                self.switch_to_buffer(buf)
                return buf
        try:
            if os.path.exists(abs_path):
                lines, encoding = read_text_file(abs_path)
            else:
                lines, encoding = [""], "utf-8"
        except OSError as e:
            logging.warning("Could not open '%s': %s", abs_path, e)
            self._set_status_message(f"Error: cannot open {os.path.basename(abs_path)}")
            return None
        name = self.ring.unique_name(os.path.basename(abs_path) or abs_path)
        buf = self.ring.add(Buffer(name=name, lines=lines, path=abs_path, encoding=encoding))
        self._force_full_redraw = True
        return buf

    def kill_current_buffer(self) -> bool:
        buf = self.current_buffer
        if buf is None:
            return False
        if len(self.ring) == 1:
            self._set_status_message("Cannot kill the last buffer")
            return True
        self.ring.kill(buf)
        if self.session.cycle_list:
            self.session.cycle_list = [b for b in self.session.cycle_list if b is not buf]
        self._set_status_message(f"Killed {buf.name}")
        self._force_full_redraw = True
        return True

    def cycle_next(self) -> bool:
        return self.cycler.advance()

    def cycle_previous(self) -> bool:
        return self.cycler.retreat()

    # ==================== Features ====================
    def _toggle_feature(self, name: str) -> bool:
        feature = self.features.get(name)
        if feature is None:
            return False
        state = feature.toggle()
        self._set_status_message(f"{feature.description or name}: {'on' if state else 'off'}")
        return True

    def toggle_spell_check(self) -> bool:
        return self._toggle_feature("spell_check")

    def toggle_paren_match(self) -> bool:
        return self._toggle_feature("paren_match")

    def misspelled_spans(self, line: str) -> list[tuple[int, int]]:
        """(start, end) column spans of words missing from the dictionary."""
        if not self.dictionary:
            return []
        return [
            (m.start(), m.end())
            for m in WORD_RE.finditer(line)
            if m.group().strip("'").lower() not in self.dictionary
        ]

    def find_matching_bracket(self, row: int, col: int) -> Optional[tuple[int, int]]:
        """Position of the bracket matching the one at (row, col), if any."""
        buf = self.current_buffer
        if buf is None or not (0 <= row < len(buf.lines)) or not (0 <= col < len(buf.lines[row])):
            return None
        ch = buf.lines[row][col]
        closers = {v: k for k, v in BRACKET_PAIRS.items()}
        if ch in BRACKET_PAIRS:
            open_ch, close_ch, step = ch, BRACKET_PAIRS[ch], 1
        elif ch in closers:
            open_ch, close_ch, step = closers[ch], ch, -1
        else:
            return None

        depth = 0
        y, x = row, col
        while 0 <= y < len(buf.lines):
            line = buf.lines[y]
            while 0 <= x < len(line):
                c = line[x]
                if c == (open_ch if step > 0 else close_ch):
                    depth += 1
                elif c == (close_ch if step > 0 else open_ch):
                    depth -= 1
                    if depth == 0:
                        return y, x
                x += step
            y += step
            if 0 <= y < len(buf.lines):
                x = 0 if step > 0 else len(buf.lines[y]) - 1
        return None

    # ==================== Cursor movement ====================
    def _clamp_cursor(self, buf: Buffer) -> None:
        buf.cursor_y = min(max(buf.cursor_y, 0), max(0, len(buf.lines) - 1))
        buf.cursor_x = min(max(buf.cursor_x, 0), len(buf.lines[buf.cursor_y]) if buf.lines else 0)

    def _move(self, dy: int = 0, dx: int = 0) -> bool:
        buf = self.current_buffer
        if buf is None:
            return False
        before = (buf.cursor_y, buf.cursor_x)
        buf.cursor_y += dy
        buf.cursor_x += dx
        self._clamp_cursor(buf)
        return before != (buf.cursor_y, buf.cursor_x)

    def handle_up(self) -> bool:
        return self._move(dy=-1)

    def handle_down(self) -> bool:
        return self._move(dy=1)

    def handle_left(self) -> bool:
        return self._move(dx=-1)

    def handle_right(self) -> bool:
        return self._move(dx=1)

    def handle_page_up(self) -> bool:
        return self._move(dy=-max(1, self.visible_lines - 1))

    def handle_page_down(self) -> bool:
        return self._move(dy=max(1, self.visible_lines - 1))

    def handle_home(self) -> bool:
        buf = self.current_buffer
        return self._move(dx=-buf.cursor_x) if buf else False

    def handle_end(self) -> bool:
        buf = self.current_buffer
        if buf is None:
            return False
        return self._move(dx=len(buf.lines[buf.cursor_y]) - buf.cursor_x)

    def get_string_width(self, text: str) -> int:
        return display_width(text)

    def exit_viewer(self) -> bool:
        """Stops the main loop and leaves cycle mode."""
        self.lifecycle.deactivate()
        self.running = False
        logging.info("Viewer exit requested.")
        return True
