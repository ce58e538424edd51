"""Full-screen frame builder.

Layout: a fixed 60x22 stats column on the left, a ``│`` separator in column
61 down the whole terminal, and the round log filling the rest on the right.
Every frame clears the screen and places each row with absolute cursor moves.
"""

from __future__ import annotations

from collections.abc import Sequence

from . import styles
from .results import SessionSummary
from .rounds import TrainerSnapshot
from .stats import KeyStat
from .styles import key_label, paint
from .text_measure import fit, pad, truncate

LEFT_WIDTH = 60
LEFT_HEIGHT = 22
# Prompt line, target line, blank line and input hint sit below the stats block.
FOOTER_ROWS = 4
RIGHT_HEADER_ROWS = 2

SEPARATOR = "│"
RULE = "─"
CLEAR_SCREEN = "\x1b[2J\x1b[H"

TITLE = "FPS Keys Trainer v2.0"
SUBTITLE = "Modern Devs Only"

TABLE_COLUMNS: tuple[tuple[str, int], ...] = (
    ("Key", 5),
    ("Att", 6),
    ("Suc", 6),
    ("Err", 6),
    ("Avg(ms)", 10),
    ("Best(ms)", 10),
    ("Worst(ms)", 11),
)


def move_to(row: int, col: int) -> str:
    """Cursor-position sequence; rows and columns are 1-based."""

    return f"\x1b[{row};{col}H"


def right_column_start() -> int:
    return LEFT_WIDTH + 2


def right_column_width(columns: int) -> int:
    return max(0, columns - LEFT_WIDTH - 1)


def format_ms(value: float | None) -> str:
    return "N/A" if value is None else f"{value:.1f}"


def _format_optional(value: int | None) -> str:
    return "N/A" if value is None else str(value)


def key_table(keys: Sequence[str], key_stats: dict[str, KeyStat]) -> list[str]:
    header = "".join(pad(paint(name, styles.COLUMN_HEADER), width) for name, width in TABLE_COLUMNS)
    lines = [header]
    for key in keys:
        s = key_stats[key]
        cells = (
            f" {key_label(key)} ",
            str(s.attempts),
            str(s.successes),
            str(s.errors),
            format_ms(s.average_time_ms()),
            _format_optional(s.best_time_ms),
            _format_optional(s.worst_time_ms),
        )
        lines.append("".join(pad(cell, width) for cell, (_, width) in zip(cells, TABLE_COLUMNS)))
    return lines


def aggregate_lines(
    *,
    total_rounds: int,
    games_played: int,
    overall_accuracy: str,
    rolling_avg_ms: float | None,
    rolling_label: str = "Rolling Avg",
) -> list[str]:
    return [
        paint(f"Total Rounds: {total_rounds}", styles.TEXT),
        paint(f"Games Played: {games_played}", styles.TEXT),
        paint(f"Overall Accuracy: {overall_accuracy}%", styles.TEXT),
        paint(f"{rolling_label}: {format_ms(rolling_avg_ms)} ms", styles.TEXT),
    ]


def left_column(snapshot: TrainerSnapshot) -> list[str]:
    """Exactly LEFT_HEIGHT rows, each exactly LEFT_WIDTH cells wide."""

    top: list[str] = [
        paint(f" {TITLE} ", styles.BANNER),
        paint(f" {SUBTITLE} ", styles.BANNER),
        RULE * LEFT_WIDTH,
        paint("Press the highlighted key as fast as you can.", styles.INSTRUCTION),
        paint(f"Keys: {' '.join(snapshot.keys)}", styles.MUTED),
        paint("Press Ctrl+C to exit.", styles.MUTED),
        "",
    ]
    top += aggregate_lines(
        total_rounds=snapshot.round.round_number,
        games_played=snapshot.games_played,
        overall_accuracy=snapshot.overall_accuracy,
        rolling_avg_ms=snapshot.rolling_avg_ms,
        rolling_label=f"Rolling Avg (last {snapshot.rolling_capacity})",
    )
    top.append("")
    top.append(paint(" Per-Key Summary ", styles.SECTION))
    top += key_table(snapshot.keys, snapshot.key_stats)

    # Overflow drops the latest rows; underflow is blank-padded.
    budget = LEFT_HEIGHT - FOOTER_ROWS
    top = top[:budget]
    top += [""] * (budget - len(top))

    prompted = snapshot.round.prompted_key
    if prompted is not None:
        footer = [
            paint(f"Round: {snapshot.round.round_number}", styles.ROUND),
            "Press: " + paint(f" {key_label(prompted)} ", styles.TARGET_KEY),
        ]
    else:
        footer = [paint("Preparing next round...", styles.TEXT), ""]
    footer += ["", paint("Type your answer:", styles.TEXT)]

    return [fit(line, LEFT_WIDTH) for line in top + footer]


def right_column(snapshot: TrainerSnapshot, *, columns: int, rows: int) -> list[str]:
    width = right_column_width(columns)
    if width <= 0:
        return []
    lines = [
        fit(paint(" Round Results ", styles.SECTION), width),
        RULE * width,
    ]
    available = rows - RIGHT_HEADER_ROWS
    if available > 0:
        lines += [truncate(entry, width) for entry in snapshot.log[-available:]]
    return lines


def render_frame(snapshot: TrainerSnapshot, *, columns: int, rows: int) -> str:
    """Build the full escape-sequence string for one frame at the given size."""

    out: list[str] = [CLEAR_SCREEN]
    for i, line in enumerate(left_column(snapshot)[: max(0, rows)]):
        out.append(move_to(i + 1, 1) + line)

    if columns > LEFT_WIDTH:
        for row in range(1, rows + 1):
            out.append(move_to(row, LEFT_WIDTH + 1) + SEPARATOR)

    for i, line in enumerate(right_column(snapshot, columns=columns, rows=rows)[: max(0, rows)]):
        out.append(move_to(i + 1, right_column_start()) + line)
    return "".join(out)


def log_capacity(rows: int) -> int:
    return max(0, rows - RIGHT_HEADER_ROWS)


def render_final_summary(summary: SessionSummary) -> list[str]:
    keys = tuple(summary.key_stats)
    lines = [paint(" FINAL STATS ", styles.BANNER), ""]
    lines += aggregate_lines(
        total_rounds=summary.total_rounds,
        games_played=summary.games_played,
        overall_accuracy=summary.overall_accuracy,
        rolling_avg_ms=summary.rolling_avg_ms,
        rolling_label=f"Rolling Avg Reaction Time (last {summary.rolling_capacity})",
    )
    lines.append("")
    lines.append(paint(" Per-Key Summary ", styles.SECTION))
    lines += key_table(keys, summary.key_stats)
    lines.append("")
    lines.append(paint("Thank you for playing FPS Keys Trainer!", styles.MUTED))
    return lines
