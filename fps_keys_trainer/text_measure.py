"""Width-aware text helpers for strings carrying ANSI control sequences.

A string is parsed into segments of ``(style, text)``: ``style`` is the run of
non-printing control sequences that precedes ``text``. Only ``text`` counts
toward display width, measured in terminal cells so wide characters take two.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from rich.cells import cell_len

ELLIPSIS = "…"
RESET = "\x1b[0m"

# CSI (colors, cursor moves) and OSC (hyperlinks, titles) sequences.
_CONTROL_RE = re.compile(
    r"\x1b\[[0-?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
)


@dataclass(frozen=True, slots=True)
class Segment:
    style: str
    text: str


def parse(text: str) -> list[Segment]:
    segments: list[Segment] = []
    style = ""
    pos = 0
    for match in _CONTROL_RE.finditer(text):
        if match.start() > pos:
            segments.append(Segment(style, text[pos : match.start()]))
            style = ""
        style += match.group(0)
        pos = match.end()
    if pos < len(text):
        segments.append(Segment(style, text[pos:]))
    elif style:
        segments.append(Segment(style, ""))
    return segments


def strip_styles(text: str) -> str:
    return "".join(seg.text for seg in parse(text))


def display_width(text: str) -> int:
    return sum(cell_len(seg.text) for seg in parse(text))


def pad(text: str, width: int, fill: str = " ") -> str:
    diff = width - display_width(text)
    return text + fill * diff if diff > 0 else text


def truncate(text: str, width: int, ellipsis: str = ELLIPSIS) -> str:
    """Cut ``text`` to ``width`` cells, ending in ``ellipsis`` when anything was dropped.

    Control sequences inside the kept part (the leading one included) are
    preserved; a reset is appended whenever any were emitted.
    """

    if display_width(text) <= width:
        return text
    if width <= 0:
        return ""

    budget = width - cell_len(ellipsis)
    out: list[str] = []
    used = 0
    styled = False
    full = False
    for seg in parse(text):
        if seg.style:
            out.append(seg.style)
            styled = True
        for ch in seg.text:
            w = cell_len(ch)
            if used + w > budget:
                full = True
                break
            out.append(ch)
            used += w
        if full:
            break

    # A wide character that did not fit leaves a one-cell gap.
    out.append(" " * max(0, budget - used))
    out.append(ellipsis)
    if styled:
        out.append(RESET)
    return "".join(out)


def fit(text: str, width: int) -> str:
    """Truncate then pad so the result is exactly ``width`` cells wide."""

    return pad(truncate(text, width), width)
