from __future__ import annotations

import os

from rich.color import ColorSystem
from rich.style import Style

BANNER = Style(color="black", bgcolor="blue", bold=True)
SECTION = Style(color="black", bgcolor="magenta", bold=True)
TARGET_KEY = Style(color="black", bgcolor="green", bold=True)
COLUMN_HEADER = Style(underline=True)
INSTRUCTION = Style(color="yellow")
MUTED = Style(color="bright_black")
TEXT = Style(color="white")
ROUND = Style(color="cyan")
SUCCESS = Style(color="green", bold=True)
FAILURE = Style(color="red", bold=True)

_KEY_NAMES = {
    " ": "SPACE",
    "\r": "ENTER",
    "\n": "ENTER",
    "\t": "TAB",
    "\x1b": "ESC",
    "\x7f": "BKSP",
}


def color_enabled() -> bool:
    # https://no-color.org
    return os.environ.get("NO_COLOR", "") == ""


def paint(text: str, style: Style) -> str:
    """Render ``text`` with ANSI SGR codes for ``style`` (plain when colors are off)."""

    system = ColorSystem.STANDARD if color_enabled() else None
    return style.render(text, color_system=system)


def key_label(char: str) -> str:
    if char in _KEY_NAMES:
        return _KEY_NAMES[char]
    if len(char) == 1 and not char.isprintable():
        return f"0x{ord(char):02X}"
    return char.upper()


def format_round_outcome(
    *,
    round_number: int,
    prompted_key: str,
    pressed_key: str,
    is_correct: bool,
    reaction_ms: int,
) -> str:
    if is_correct:
        return paint(
            f"Round {round_number}: Correct! [{key_label(prompted_key)}] in {reaction_ms} ms.",
            SUCCESS,
        )
    return paint(
        f"Round {round_number}: Oops! Pressed [{key_label(pressed_key)}] "
        f"instead of [{key_label(prompted_key)}] ({reaction_ms} ms).",
        FAILURE,
    )
