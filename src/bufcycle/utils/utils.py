# bufcycle/utils/utils.py
"""
bufcycle.utils.utils
====================

Core utility functions for the bufcycle viewer.

Key functionalities include:
- Automatic User Configuration: creates `~/.config/bufcycle` with a `config.toml`
  template and an `.env` file on first run.
- Layered Configuration Loading: an embedded default configuration is
  deep-merged with the user's `~/.config/bufcycle/config.toml`.
- Cycle Settings: the `[cycle]` section is validated and clamped once, at load
  time, into an immutable `CycleSettings` value.
- File Reading: encoding detection with chardet and a chain of fallbacks.
- Display Width: wcwidth-based measuring and truncation of terminal strings.

The application is always runnable, even when the user files are missing or
corrupted, because everything falls back to the embedded defaults.
"""

import logging
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import chardet
import toml
from wcwidth import wcswidth, wcwidth

logger = logging.getLogger("bufcycle")

# --- Constants ---
CALM_BG_IDX = 236
WHITE_FG_IDX = 255

MAX_SELECTION_ROWS = 9
SELECTION_MODES = ("digits", "function", "none")

ENV_TEMPLATE = """# Environment switches for bufcycle.
# Set to 1 to write raw key events to keytrace.log.
BUFCYCLE_KEYTRACE=
"""

# Embedded fallback configuration; the application can ALWAYS start with it.
DEFAULT_CONFIG: Dict[str, Any] = {
    "cycle": {
        "lighter": " BufCycle",
        "timeout": 3,
        "slant": False,
        "max_rows": 9,
        "selection_keys": "digits",
        "show_countdown": True,
        "separator": True,
        "height_fraction": 0.3,
        "configuration": "files",
        "suppress_features": ["spell_check", "paren_match"],
    },
    "buffers": {
        "default_configuration": "files",
        "configurations": {
            "all": {"dont_show": "", "must_show": "", "sort": "none"},
            "files": {"dont_show": r"^\*.*\*$", "must_show": "", "sort": "name"},
        },
    },
    "features": {
        "spell_check": True,
        "paren_match": True,
        "dictionary": "",
    },
    "keybindings": {
        "cycle_next": ["ctrl+n", "f10"],
        "cycle_previous": ["ctrl+p", "shift+f10"],
        "kill_buffer": "ctrl+w",
        "quit": "ctrl+q",
        "toggle_spell_check": "alt-s",
        "toggle_paren_match": "alt-m",
        "handle_up": ["up"], "handle_down": ["down"],
        "handle_left": ["left"], "handle_right": ["right"],
        "handle_page_up": "pageup", "handle_page_down": "pagedown",
        "handle_home": "home", "handle_end": "end",
    },
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
        "log_dir": "",
    },
}


@dataclass(frozen=True)
class CycleSettings:
    """Normalised, immutable view of the ``[cycle]`` configuration section."""

    lighter: str = " BufCycle"
    timeout: int = 3
    slant: bool = False
    max_rows: int = MAX_SELECTION_ROWS
    selection_keys: str = "digits"
    show_countdown: bool = True
    separator: bool = True
    height_fraction: float = 0.3
    configuration: Optional[str] = "files"
    suppress_features: tuple[str, ...] = ("spell_check", "paren_match")


# --- Helper Functions ---

def get_project_root() -> Path:
    """Determines the project's root directory for finding template files."""
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        return Path(sys._MEIPASS)
    return Path(__file__).resolve().parents[3]


def user_config_dir() -> Path:
    return Path.home() / ".config" / "bufcycle"


def ensure_user_config_exists() -> None:
    """Checks for user config files in `~/.config/bufcycle` and creates them if missing."""
    try:
        config_dir = user_config_dir()
        user_config_path = config_dir / "config.toml"
        user_env_path = config_dir / ".env"

        config_dir.mkdir(parents=True, exist_ok=True)

        if not user_config_path.exists():
            source_config_path = get_project_root() / "config.toml"
            if source_config_path.exists():
                shutil.copy(source_config_path, user_config_path)
                logger.info(f"Created user config template at: {user_config_path}")

        if not user_env_path.exists():
            user_env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
            logger.info(f"Created user .env template at: {user_env_path}")

    except Exception as e:
        logger.critical(f"Could not create user configuration files: {e}", exc_info=True)


def load_config() -> Dict[str, Any]:
    """
    Loads and merges configurations, ensuring the application can always run.
    """
    final_config = deep_merge({}, DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    ensure_user_config_exists()

    user_config_path = user_config_dir() / "config.toml"
    if user_config_path.is_file():
        try:
            user_config = toml.load(user_config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {user_config_path}")
        except Exception as e:
            logger.error(f"Could not parse user config '{user_config_path}': {e}. Using defaults.")

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _as_int(value: Any, default: int, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid [cycle] {name} {value!r}; using {default}.")
        return default


def cycle_settings(config: Optional[Dict[str, Any]]) -> CycleSettings:
    """Builds a `CycleSettings` from the ``[cycle]`` section of `config`.

    Values are clamped once here:
    - ``max_rows`` into ``1..9`` (invalid values fall back to 9),
    - ``timeout`` to a non-negative number of seconds,
    - ``height_fraction`` into ``(0, 1]``,
    - ``selection_keys`` to one of digits/function/none (unknown means none).

    Args:
        config: The merged application configuration.

    Returns:
        CycleSettings: The frozen settings used by the cycling feature.
    """
    section: Dict[str, Any] = dict(DEFAULT_CONFIG["cycle"])
    if isinstance(config, dict):
        section.update(config.get("cycle", {}) or {})

    max_rows = _as_int(section.get("max_rows"), MAX_SELECTION_ROWS, "max_rows")
    if max_rows < 1:
        logger.warning(f"[cycle] max_rows {max_rows} is below 1; using 1.")
        max_rows = 1
    max_rows = min(max_rows, MAX_SELECTION_ROWS)

    timeout = max(0, _as_int(section.get("timeout"), 3, "timeout"))

    try:
        height_fraction = float(section.get("height_fraction", 0.3))
    except (TypeError, ValueError):
        logger.warning("Invalid [cycle] height_fraction; using 0.3.")
        height_fraction = 0.3
    if not 0 < height_fraction <= 1:
        height_fraction = min(max(height_fraction, 0.05), 1.0)

    mode = str(section.get("selection_keys", "digits")).strip().lower()
    if mode not in SELECTION_MODES:
        logger.warning(f"Unknown [cycle] selection_keys {mode!r}; selection keys disabled.")
        mode = "none"

    suppress = section.get("suppress_features") or []
    if isinstance(suppress, str):
        suppress = [suppress]

    configuration = section.get("configuration") or None

    return CycleSettings(
        lighter=str(section.get("lighter", " BufCycle")),
        timeout=timeout,
        slant=bool(section.get("slant", False)),
        max_rows=max_rows,
        selection_keys=mode,
        show_countdown=bool(section.get("show_countdown", True)),
        separator=bool(section.get("separator", True)),
        height_fraction=height_fraction,
        configuration=str(configuration) if configuration else None,
        suppress_features=tuple(str(name) for name in suppress),
    )


def read_text_file(path: str) -> tuple[list[str], str]:
    """Reads a text file and returns ``(lines, encoding)``.

    The encoding is guessed with chardet from the first 20 KiB; a confident
    guess is tried strictly, then utf-8 and latin-1, and finally utf-8 with
    replacement characters so that a buffer can always be produced.

    Raises:
        OSError: If the file cannot be opened at all.
    """
    with open(path, "rb") as f_binary:
        raw_data_sample = f_binary.read(1024 * 20)

    if not raw_data_sample:
        logging.info(f"File '{path}' is empty.")
        return [""], "utf-8"

    chardet_result = chardet.detect(raw_data_sample)
    encoding_guess = chardet_result.get("encoding")
    confidence = chardet_result.get("confidence", 0.0) or 0.0
    logging.debug(
        f"Chardet detected encoding '{encoding_guess}' with confidence {confidence:.2f} for '{path}'."
    )

    attempts: list[tuple[str, str]] = []
    if encoding_guess and confidence >= 0.75:
        attempts.append((encoding_guess, "strict"))
    for candidate in (("utf-8", "strict"), ("latin-1", "strict"), ("utf-8", "replace")):
        if candidate not in attempts:
            attempts.append(candidate)

    for encoding, errors in attempts:
        try:
            with open(path, "r", encoding=encoding, errors=errors) as f_text:
                lines = f_text.read().splitlines()
            logging.info(f"Read '{path}' using encoding '{encoding}' with errors='{errors}'.")
            return (lines or [""]), encoding
        except (UnicodeDecodeError, LookupError) as e_read:
            logging.warning(f"Failed to read '{path}' with encoding '{encoding}': {e_read}")

    # utf-8 with errors="replace" cannot fail to decode
    return [""], "utf-8"


def char_width(ch: str) -> int:
    """Width of one character in terminal cells; unprintable counts as 1."""
    w = wcwidth(ch)
    return w if w >= 0 else 1


def display_width(text: str) -> int:
    """Printable width of `text` in terminal cells."""
    width = wcswidth(text)
    if width >= 0:
        return width
    return sum(char_width(ch) for ch in text)


def truncate_to_width(text: str, max_width: int) -> str:
    """Returns the longest prefix of `text` whose display width fits `max_width`."""
    result: list[str] = []
    consumed = 0
    for ch in text:
        w = char_width(ch)
        if consumed + w > max_width:
            break
        result.append(ch)
        consumed += w
    return "".join(result)


def expand_path(path: str) -> str:
    return os.path.abspath(os.path.expanduser(path))
