from __future__ import annotations

from fps_keys_trainer.config import DEFAULT_KEYS
from fps_keys_trainer.renderer import (
    LEFT_HEIGHT,
    LEFT_WIDTH,
    SEPARATOR,
    left_column,
    move_to,
    render_final_summary,
    render_frame,
    right_column,
)
from fps_keys_trainer.results import build_session_summary
from fps_keys_trainer.rounds import Phase, RoundState, TrainerSnapshot
from fps_keys_trainer.stats import StatsStore
from fps_keys_trainer.text_measure import display_width, strip_styles


def _snapshot(
    *,
    store: StatsStore | None = None,
    round_state: RoundState | None = None,
    log: tuple[str, ...] = (),
    rolling_avg_ms: float | None = None,
) -> TrainerSnapshot:
    store = store or StatsStore(DEFAULT_KEYS)
    round_state = round_state or RoundState()
    return TrainerSnapshot(
        phase=Phase.IDLE if round_state.prompted_key is None else Phase.AWAITING_INPUT,
        round=round_state,
        keys=store.keys,
        key_stats=store.stats(),
        games_played=store.games_played,
        overall_accuracy=store.overall_accuracy(),
        rolling_avg_ms=rolling_avg_ms,
        rolling_capacity=4,
        log=log,
    )


def test_left_column_is_fixed_size() -> None:
    lines = left_column(_snapshot())

    assert len(lines) == LEFT_HEIGHT
    assert all(display_width(line) == LEFT_WIDTH for line in lines)


def test_left_column_shows_aggregates_and_prompt() -> None:
    store = StatsStore(DEFAULT_KEYS)
    store.record_attempt("q", True, 120)
    store.record_attempt("q", False, 90)
    store.increment_games_played()

    plain = [
        strip_styles(line).rstrip()
        for line in left_column(
            _snapshot(
                store=store,
                round_state=RoundState(round_number=3, prompted_key="e", prompt_issued_at_s=0.0),
                rolling_avg_ms=120.0,
            )
        )
    ]

    assert "Total Rounds: 3" in plain
    assert "Games Played: 1" in plain
    assert "Overall Accuracy: 50.0%" in plain
    assert "Rolling Avg (last 4): 120.0 ms" in plain
    assert plain[-4] == "Round: 3"
    assert plain[-3] == "Press:  E"
    assert plain[-1] == "Type your answer:"
    q_row = next(line for line in plain if line.startswith(" Q "))
    assert q_row.split() == ["Q", "2", "1", "1", "120.0", "120", "120"]


def test_left_column_without_prompt_and_empty_stats() -> None:
    plain = [strip_styles(line).rstrip() for line in left_column(_snapshot())]

    assert plain[-4] == "Preparing next round..."
    assert plain[-3] == ""
    assert "Overall Accuracy: N/A%" in plain
    assert "Rolling Avg (last 4): N/A ms" in plain
    e_row = next(line for line in plain if line.startswith(" E "))
    assert e_row.split() == ["E", "0", "0", "0", "N/A", "N/A", "N/A"]


def test_key_table_overflow_keeps_earliest_rows() -> None:
    plain = [strip_styles(line) for line in left_column(_snapshot())]
    shown = {line.split()[0] for line in plain if line.startswith(" ") and len(line.split()) == 7}

    assert {"Q", "E", "R", "T"} <= shown
    assert "Z" not in shown


def test_right_column_shows_latest_entries_that_fit() -> None:
    log = tuple(f"entry {i}" for i in range(20))

    lines = right_column(_snapshot(log=log), columns=100, rows=10)

    assert len(lines) == 10
    assert [strip_styles(line) for line in lines[2:]] == [f"entry {i}" for i in range(12, 20)]
    assert all(display_width(line) <= 100 - LEFT_WIDTH - 1 for line in lines)


def test_right_column_truncates_long_entries() -> None:
    long_entry = "\x1b[31m" + "x" * 100 + "\x1b[0m"

    lines = right_column(_snapshot(log=(long_entry,)), columns=LEFT_WIDTH + 1 + 20, rows=10)

    assert display_width(lines[0]) == 20
    assert display_width(lines[2]) == 20
    assert lines[2].startswith("\x1b[31m")
    assert strip_styles(lines[2]).endswith("…")


def test_right_column_absent_on_narrow_terminal() -> None:
    assert right_column(_snapshot(log=("a",)), columns=LEFT_WIDTH, rows=30) == []


def test_frame_positions_every_row_absolutely() -> None:
    frame = render_frame(_snapshot(log=("hello",)), columns=100, rows=30)

    assert frame.startswith("\x1b[2J\x1b[H")
    for row in range(1, LEFT_HEIGHT + 1):
        assert move_to(row, 1) in frame
    for row in range(1, 31):
        assert move_to(row, LEFT_WIDTH + 1) + SEPARATOR in frame
    assert move_to(3, LEFT_WIDTH + 2) + "hello" in frame
    assert move_to(31, LEFT_WIDTH + 1) not in frame


def test_frame_follows_terminal_size_each_call() -> None:
    snap = _snapshot(log=tuple(f"e{i}" for i in range(50)))

    small = render_frame(snap, columns=90, rows=12)
    large = render_frame(snap, columns=140, rows=40)

    assert move_to(12, LEFT_WIDTH + 1) in small
    assert move_to(13, LEFT_WIDTH + 1) not in small
    assert move_to(40, LEFT_WIDTH + 1) in large
    # Left column is clipped to the terminal height.
    assert move_to(13, 1) not in small


def test_final_summary_lines() -> None:
    store = StatsStore(DEFAULT_KEYS)
    store.record_attempt("x", True, 150)
    store.increment_games_played()
    summary = build_session_summary(store, total_rounds=1, rolling_avg_ms=150.0)

    plain = [strip_styles(line).strip() for line in render_final_summary(summary)]

    assert plain[0] == "FINAL STATS"
    assert "Total Rounds: 1" in plain
    assert "Games Played: 1" in plain
    assert "Overall Accuracy: 100.0%" in plain
    assert "Rolling Avg Reaction Time (last 4): 150.0 ms" in plain
    labels = {k.upper() for k in DEFAULT_KEYS}
    key_rows = [line for line in plain if line.split()[:1] and line.split()[0] in labels]
    assert len(key_rows) == len(DEFAULT_KEYS)
    assert plain[-1] == "Thank you for playing FPS Keys Trainer!"
