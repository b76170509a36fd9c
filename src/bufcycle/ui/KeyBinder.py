# bufcycle/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
The KeyBinder class translates key presses into viewer commands. Every key
event ends up as exactly one named command run through
`BufferViewer.execute_command`, so that `last_command` always reflects what
the user did last, including unbound and printable keys.

Key Features:
- Loads keybindings from the `[keybindings]` configuration section on top of
  built-in defaults, accepting lists, "a|b" strings, key names and raw codes.
- Merges the direct-selection keys (1..9 or F1..F9) chosen by `[cycle]`.
- Reads ESC-prefixed sequences robustly and turns Alt chords into "alt-x".
- Writes every raw key to the key-event logger when tracing is enabled.

Main Methods:
1. handle_input: Dispatches one key event as a named command.
2. _load_keybindings: Resolves action names to lists of key codes.
3. _decode_keystring: Decodes key specification strings into key codes.
4. _setup_action_map: Maps key codes to viewer methods.
5. get_key_input: Reads a key or escape sequence from the terminal.
6. lookup: Reverse lookup of the action bound to a key.
"""

import curses
import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Optional

from wcwidth import wcswidth

from bufcycle.utils.logging_config import KEY_LOGGER

if TYPE_CHECKING:
    from bufcycle.core.Viewer import BufferViewer

READ_ONLY_MESSAGE = "Buffer is read-only"


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Class KeyBinder
    ====================
    Manages keybindings, input decoding and command dispatch for the viewer.

    Attributes:
        editor (BufferViewer): The viewer whose commands are bound.
        config (dict): Viewer configuration, including `[keybindings]`.
        stdscr: The curses window used for input.
        keybindings (dict): Action name -> list of key codes or "alt-x" strings.
        action_map (dict): Key code -> (action name, callable).
    """
    # Keys do NOT include the leading ESC (0x1B), get_key_input() reads after it.
    ESCAPE_SEQUENCE_MAP: dict[str, str] = {
        # Arrows (CSI and SS3)
        "[A": "up", "[B": "down", "[C": "right", "[D": "left",
        "OA": "up", "OB": "down", "OC": "right", "OD": "left",

        # Home/End
        "[H": "home", "[F": "end", "OH": "home", "OF": "end",
        "[1~": "home", "[4~": "end",

        "[2~": "insert", "[3~": "delete", "[5~": "pageup", "[6~": "pagedown",

        # Function keys (SS3 and tilde variants)
        "OP": "f1", "OQ": "f2", "OR": "f3", "OS": "f4",
        "[11~": "f1", "[12~": "f2", "[13~": "f3", "[14~": "f4",
        "[15~": "f5", "[17~": "f6", "[18~": "f7", "[19~": "f8",
        "[20~": "f9", "[21~": "f10", "[23~": "f11", "[24~": "f12",

        # xterm Shift+F5..F12
        "[15;2~": "shift+f5", "[17;2~": "shift+f6", "[18;2~": "shift+f7",
        "[19;2~": "shift+f8", "[20;2~": "shift+f9", "[21;2~": "shift+f10",
        "[23;2~": "shift+f11", "[24;2~": "shift+f12",
    }

    DEFAULT_KEYBINDINGS: dict[str, list[int | str]] = {
        "cycle_next": ["ctrl+n", "f10"],
        "cycle_previous": ["ctrl+p", "shift+f10"],
        "kill_buffer": ["ctrl+w"],
        "quit": ["ctrl+q"],
        "toggle_spell_check": ["alt-s"],
        "toggle_paren_match": ["alt-m"],
        "handle_up": ["up"],
        "handle_down": ["down"],
        "handle_left": ["left"],
        "handle_right": ["right"],
        "handle_page_up": ["pageup"],
        "handle_page_down": ["pagedown"],
        "handle_home": ["home"],
        "handle_end": ["end"],
    }

    def __init__(self, editor: "BufferViewer"):
        logging.debug("KeyBinder initialized with viewer: %s", editor)
        self.editor = editor
        self.config = editor.config
        self.stdscr = editor.stdscr

        self.keybindings = self._load_keybindings()
        self.action_map = self._setup_action_map()

    # ---------------------- Handle Input --------------------
    def handle_input(self, key: str | int) -> bool:
        """Runs the command bound to `key` through the viewer's command loop.

        Printable keys that are not bound report that the buffer is read-only;
        anything else is run as the `undefined` command, so it still ends a
        cycling sequence.

        Returns:
            bool: True if the input caused a visual change.
        """
        KEY_LOGGER.debug("key=%r type=%s", key, type(key).__name__)
        original_status = self.editor.status_message

        try:
            if key in self.action_map:
                name, action = self.action_map[key]
                logging.debug("handle_input: key %r -> command %r", key, name)
                changed = self.editor.execute_command(name, action)
            elif self._is_printable(key):
                changed = self.editor.execute_command(
                    "self_insert", lambda: self.editor._set_status_message(READ_ONLY_MESSAGE)
                )
            else:
                logging.debug("Unhandled input: %r (type: %s)", key, type(key).__name__)
                changed = self.editor.execute_command(
                    "undefined",
                    lambda: self.editor._set_status_message(f"Ignored unhandled input: {key!r}"),
                )
            return bool(changed) or self.editor.status_message != original_status

        except Exception as e_handler:
            logging.exception("Input handler critical error. This should be investigated.")
            self.editor._set_status_message(f"Input handler error: {str(e_handler)[:50]}")
            return True

    @staticmethod
    def _is_printable(key: str | int) -> bool:
        if isinstance(key, str):
            return len(key) == 1 and wcswidth(key) > 0
        if isinstance(key, int) and 32 <= key < 1114112:
            try:
                return wcswidth(chr(key)) > 0
            except ValueError:
                return False
        return False

    # ---------------------- Keybinding loading --------------------
    def _load_keybindings(self) -> dict[str, list[int | str]]:
        """Returns action name -> list of decoded key codes.

        User entries in `[keybindings]` replace the default for that action;
        an empty value unbinds it. Selection keys come from the viewer's
        `SelectionKeyMap` and may be overridden the same way.
        """
        defaults: dict[str, Any] = dict(self.DEFAULT_KEYBINDINGS)
        defaults.update(self.editor.selection_keys.bindings)

        user_keybindings_config: dict[str, object] = self.config.get("keybindings", {})
        parsed_keybindings: dict[str, list[int | str]] = {}

        for action, default_value_spec in defaults.items():
            spec: object = user_keybindings_config.get(action, default_value_spec)
            if not spec:
                logging.debug("Keybinding for action %r is disabled or empty.", action)
                continue

            if isinstance(spec, list):
                specs_to_process = spec
            elif isinstance(spec, str) and "|" in spec:
                specs_to_process = [s.strip() for s in spec.split("|")]
            else:
                specs_to_process = [spec]

            key_codes_for_action: list[int | str] = []
            for key_spec_item in specs_to_process:
                try:
                    key_code = self._decode_keystring(key_spec_item)
                except ValueError as e:
                    logging.error(
                        "Error parsing keybinding item %r for action %r: %s. "
                        "This specific binding for the action will be ignored.",
                        key_spec_item, action, e,
                    )
                    continue
                if key_code not in key_codes_for_action:
                    key_codes_for_action.append(key_code)

            if key_codes_for_action:
                parsed_keybindings[action] = key_codes_for_action
            else:
                logging.warning(
                    "No valid key codes found for action %r after parsing. It will not be bound.",
                    action,
                )

        logging.debug("Loaded and parsed keybindings: %s", parsed_keybindings)
        return parsed_keybindings

    def _decode_keystring(self, key_input: str | int) -> int | str:
        """Decodes a key specification into a curses key code or an "alt-x" string.

        Args:
            key_input: e.g. "ctrl+n", "f10", "shift+f10", "alt+s", "7" or 14.

        Raises:
            ValueError: If the key string is empty, unknown, or uses unknown modifiers.
        """
        if isinstance(key_input, int):
            return key_input
        if not isinstance(key_input, str):
            raise ValueError(f"Invalid key_input type: {type(key_input)}. Expected str or int.")

        original_key_string = key_input
        s = key_input.strip().lower()
        if not s:
            raise ValueError("Key string cannot be empty.")

        # Normalize alt+key to alt-key
        parts = s.split("+")
        if "alt" in parts:
            other_mods = sorted(m for m in parts[:-1] if m != "alt")
            s = "alt-" + ("+".join(other_mods) + "+" if other_mods else "") + parts[-1]
        if s.startswith("alt-"):
            return s

        named_keys_map: dict[str, int] = {
            "left": curses.KEY_LEFT,
            "right": curses.KEY_RIGHT,
            "up": curses.KEY_UP,
            "down": curses.KEY_DOWN,
            "home": curses.KEY_HOME,
            "end": getattr(curses, "KEY_END", curses.KEY_LL),
            "pageup": curses.KEY_PPAGE,
            "pgup": curses.KEY_PPAGE,
            "pagedown": curses.KEY_NPAGE,
            "pgdn": curses.KEY_NPAGE,
            "delete": curses.KEY_DC,
            "del": curses.KEY_DC,
            "backspace": curses.KEY_BACKSPACE,
            "insert": curses.KEY_IC,
            "tab": 9,
            "enter": curses.KEY_ENTER,
            "return": curses.KEY_ENTER,
            "space": ord(" "),
            "esc": 27,
            "escape": 27,
        }
        named_keys_map.update(
            {f"f{i}": getattr(curses, f"KEY_F{i}", 264 + i) for i in range(1, 13)}
        )
        # curses reports Shift+Fn as F(n+12)
        named_keys_map.update(
            {f"shift+f{i}": getattr(curses, f"KEY_F{i + 12}", 276 + i) for i in range(1, 13)}
        )

        if s in named_keys_map:
            return named_keys_map[s]

        base_key_str = parts[-1].strip()
        modifiers = {p.strip() for p in parts[:-1]}

        if base_key_str in named_keys_map:
            base_code = named_keys_map[base_key_str]
        elif len(base_key_str) == 1:
            base_code = ord(base_key_str)
        else:
            raise ValueError(f"Unknown base key '{base_key_str}' in '{original_key_string}'")

        if "ctrl" in modifiers:
            modifiers.remove("ctrl")
            if len(base_key_str) == 1 and "a" <= base_key_str <= "z":
                base_code = ord(base_key_str) - ord("a") + 1
            elif base_key_str == "\\":
                base_code = 28
            elif base_key_str == "]":
                base_code = 29

        if "shift" in modifiers:
            modifiers.remove("shift")
            if len(base_key_str) == 1 and "a" <= base_key_str <= "z":
                base_code = ord(base_key_str.upper())

        if modifiers:
            raise ValueError(
                f"Unknown or unhandled modifiers {sorted(modifiers)} in '{original_key_string}'"
            )
        return base_code

    def _setup_action_map(self) -> dict[int | str, tuple[str, Callable[[], Any]]]:
        """Builds key code -> (action name, viewer method)."""
        action_to_method_map: dict[str, Callable[[], Any]] = {
            "cycle_next": self.editor.cycle_next,
            "cycle_previous": self.editor.cycle_previous,
            "kill_buffer": self.editor.kill_current_buffer,
            "quit": self.editor.exit_viewer,
            "toggle_spell_check": self.editor.toggle_spell_check,
            "toggle_paren_match": self.editor.toggle_paren_match,
            "handle_up": self.editor.handle_up,
            "handle_down": self.editor.handle_down,
            "handle_left": self.editor.handle_left,
            "handle_right": self.editor.handle_right,
            "handle_page_up": self.editor.handle_page_up,
            "handle_page_down": self.editor.handle_page_down,
            "handle_home": self.editor.handle_home,
            "handle_end": self.editor.handle_end,
        }
        action_to_method_map.update(self.editor.selection_keys.actions())

        final_key_action_map: dict[int | str, tuple[str, Callable[[], Any]]] = {}
        for action_name, key_code_list in self.keybindings.items():
            method_callable = action_to_method_map.get(action_name)
            if method_callable is None:
                logging.warning(
                    "Action '%s' in keybindings but no corresponding method. Ignored.", action_name
                )
                continue
            for key_code in key_code_list:
                existing = final_key_action_map.get(key_code)
                if existing is not None and existing[0] != action_name:
                    logging.warning(
                        "Keybinding for action '%s' (key: %r) is overwriting "
                        "an existing mapping for '%s'.",
                        action_name, key_code, existing[0],
                    )
                final_key_action_map[key_code] = (action_name, method_callable)

        logging.debug(
            "Final constructed action map: %s",
            {k: v[0] for k, v in final_key_action_map.items()},
        )
        return final_key_action_map

    # ---------------------- Terminal input --------------------
    def get_key_input(self, window: Optional["curses.window"] = None) -> int | str:
        """Reads a single key or key sequence from the terminal.

        Returns:
            int | str: a curses key code, "alt-<char>" for Alt/Meta chords,
            27 for a lone ESC, curses.ERR on curses errors or timeout, and -1
            for unexpected exceptions.
        """
        target = window or self.stdscr

        try:
            ch = target.getch()
            if ch != 27:
                return ch

            seq = ""
            target.nodelay(True)
            try:
                while True:
                    nx = target.getch()
                    if nx == curses.ERR:
                        break
                    seq += chr(nx) if 0 <= nx <= 255 else f"<{nx}>"
            finally:
                target.nodelay(False)
                target.timeout(100)

            if not seq:
                return 27
            if seq[0] == "\x1b":
                seq = seq[1:]

            if len(seq) == 1 and seq.isprintable():
                return f"alt-{seq.lower()}"

            mapped = self.ESCAPE_SEQUENCE_MAP.get(seq)
            if not mapped:
                cleaned = "".join(re.findall(r"[\[O0-9;~A-Za-z]", seq))
                mapped = self.ESCAPE_SEQUENCE_MAP.get(cleaned)
            if mapped:
                code = self._decode_keystring(mapped)
                logging.debug("get_key_input: ESC %r -> %r -> code %r", seq, mapped, code)
                return code

            logging.warning("get_key_input: unknown escape sequence: ESC + %r", seq)
            return 27

        except curses.error:
            return curses.ERR
        except Exception:
            logging.exception("get_key_input: unexpected error")
            return -1

    def lookup(self, key_spec: str | int) -> Optional[str]:
        """Returns the action name bound to `key_spec`, or None."""
        try:
            decoded_key = self._decode_keystring(key_spec)
        except ValueError:
            return None
        for action_name, key_list in self.keybindings.items():
            if decoded_key in key_list:
                return action_name
        return None
