from __future__ import annotations

from dataclasses import dataclass

from .stats import KeyStat, StatsStore


@dataclass(frozen=True, slots=True)
class SessionSummary:
    """Final numbers shown when the trainer exits."""

    total_rounds: int
    games_played: int
    overall_accuracy: str
    rolling_avg_ms: float | None
    rolling_capacity: int
    attempted: int
    correct: int
    key_stats: dict[str, KeyStat]


def build_session_summary(
    store: StatsStore,
    *,
    total_rounds: int,
    rolling_avg_ms: float | None,
    rolling_capacity: int = 4,
) -> SessionSummary:
    return SessionSummary(
        total_rounds=int(total_rounds),
        games_played=int(store.games_played),
        overall_accuracy=store.overall_accuracy(),
        rolling_avg_ms=None if rolling_avg_ms is None else float(rolling_avg_ms),
        rolling_capacity=int(rolling_capacity),
        attempted=store.total_attempts(),
        correct=store.total_successes(),
        key_stats=store.stats(),
    )
