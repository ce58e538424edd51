from __future__ import annotations

import codecs
import os
import select
import shutil
import sys
from collections import deque
from dataclasses import dataclass
from typing import IO

INTERRUPT_CHAR = "\x03"

RESET_STYLE = "\x1b[0m"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_SCREEN = "\x1b[2J\x1b[H"


@dataclass(frozen=True, slots=True)
class KeyPress:
    char: str
    is_interrupt: bool = False

    @classmethod
    def interrupt(cls) -> "KeyPress":
        return cls(INTERRUPT_CHAR, is_interrupt=True)


class KeyDecoder:
    """Turn raw input bytes into key presses, one per decoded character.

    A multi-byte UTF-8 key may arrive split across reads; the partial bytes
    are held until the character is complete.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, data: bytes) -> list[KeyPress]:
        return [
            KeyPress.interrupt() if ch == INTERRUPT_CHAR else KeyPress(ch)
            for ch in self._decoder.decode(data)
        ]


class RawKeyboard:
    """Put a TTY stdin into cbreak mode so single key presses can be polled.

    On a non-TTY stream (tests, pipes) the keyboard stays disabled and
    ``poll()`` always returns None.
    """

    def __init__(self, stream: IO[str] | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self._enabled = False
        self._fd: int | None = None
        self._old: list | None = None
        self._decoder = KeyDecoder()
        self._pending: deque[KeyPress] = deque()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def __enter__(self) -> "RawKeyboard":
        if not self._stream.isatty():
            return self
        import termios
        import tty

        self._fd = self._stream.fileno()
        self._old = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        self._enabled = True
        return self

    def __exit__(self, *args: object) -> None:
        if not self._enabled or self._fd is None or self._old is None:
            return
        import termios

        termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old)
        self._enabled = False

    def poll(self, timeout_s: float = 0.0) -> KeyPress | None:
        if not self._enabled or self._fd is None:
            return None
        if not self._pending:
            ready, _, _ = select.select([self._fd], [], [], max(0.0, timeout_s))
            if not ready:
                return None
            data = os.read(self._fd, 64)
            if not data:
                return None
            self._pending.extend(self._decoder.feed(data))
        return self._pending.popleft() if self._pending else None


class TerminalSurface:
    """Output side of the terminal; size is queried fresh on every call."""

    def __init__(
        self,
        stream: IO[str] | None = None,
        *,
        fallback_size: tuple[int, int] = (120, 30),
    ) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._fallback_size = fallback_size

    def size(self) -> tuple[int, int]:
        """Return (columns, rows)."""

        size = shutil.get_terminal_size(self._fallback_size)
        return size.columns, size.lines

    def write(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()

    def hide_cursor(self) -> None:
        self.write(HIDE_CURSOR)

    def restore(self) -> None:
        """Reset styles and show the cursor again."""

        self.write(RESET_STYLE + SHOW_CURSOR)

    def clear(self) -> None:
        self.write(CLEAR_SCREEN)

    def print_lines(self, lines: list[str]) -> None:
        self.write("".join(f"{line}{RESET_STYLE}\n" for line in lines))
