from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .clock import Clock, ScheduledCall, Scheduler
from .results import SessionSummary, build_session_summary
from .selection import KeySelector
from .stats import KeyStat, StatsStore
from .styles import format_round_outcome

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    IDLE = "idle"
    AWAITING_INPUT = "awaiting_input"
    SCORING = "scoring"
    FINISHED = "finished"


@dataclass(frozen=True, slots=True)
class RoundState:
    round_number: int = 0
    prompted_key: str | None = None
    prompt_issued_at_s: float | None = None


@dataclass(frozen=True, slots=True)
class RoundEvent:
    round_number: int
    prompted_key: str
    pressed_key: str
    is_correct: bool
    presented_at_s: float
    answered_at_s: float
    reaction_ms: int


class RollingWindow:
    """The last ``capacity`` successful reaction times, oldest first."""

    def __init__(self, capacity: int = 4) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._times: deque[int] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        assert self._times.maxlen is not None
        return self._times.maxlen

    def push(self, reaction_ms: int) -> None:
        self._times.append(int(reaction_ms))

    def values(self) -> list[int]:
        return list(self._times)

    def average(self) -> float | None:
        if not self._times:
            return None
        return sum(self._times) / len(self._times)

    def __len__(self) -> int:
        return len(self._times)


@dataclass(frozen=True, slots=True)
class TrainerSnapshot:
    """View model for the renderer (pure data)."""

    phase: Phase
    round: RoundState
    keys: tuple[str, ...]
    key_stats: dict[str, KeyStat]
    games_played: int
    overall_accuracy: str
    rolling_avg_ms: float | None
    rolling_capacity: int
    log: tuple[str, ...]


class RoundController:
    """Round lifecycle: idle -> awaiting input -> scoring -> idle.

    - A press with no active prompt is dropped.
    - Every scored press is saved immediately; the next prompt is scheduled
      ``round_delay_s`` later so the outcome is visible first.
    - Time is entirely via the injected Clock and Scheduler.
    """

    def __init__(
        self,
        *,
        store: StatsStore,
        selector: KeySelector,
        clock: Clock,
        scheduler: Scheduler,
        rolling_window: int = 4,
        round_delay_s: float = 0.1,
        formatter: Callable[..., str] = format_round_outcome,
    ) -> None:
        if round_delay_s < 0:
            raise ValueError("round_delay_s must be >= 0")

        self._store = store
        self._selector = selector
        self._clock = clock
        self._scheduler = scheduler
        self._round_delay_s = float(round_delay_s)
        self._formatter = formatter

        self._phase = Phase.IDLE
        self._state = RoundState()
        self._window = RollingWindow(rolling_window)
        self._events: list[RoundEvent] = []
        self._log: list[str] = []
        self._pending_start: ScheduledCall | None = None
        self._revision = 0

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def state(self) -> RoundState:
        return self._state

    @property
    def store(self) -> StatsStore:
        return self._store

    @property
    def window(self) -> RollingWindow:
        return self._window

    @property
    def revision(self) -> int:
        """Bumped on every change the screen should reflect."""

        return self._revision

    @property
    def pending_start(self) -> ScheduledCall | None:
        return self._pending_start

    def events(self) -> list[RoundEvent]:
        return list(self._events)

    def log(self) -> list[str]:
        return list(self._log)

    def rolling_average_ms(self) -> float | None:
        return self._window.average()

    def start_round(self) -> None:
        if self._phase is not Phase.IDLE:
            return
        self._pending_start = None
        key = self._selector.choose_next(self._store)
        self._state = RoundState(
            round_number=self._state.round_number + 1,
            prompted_key=key,
            prompt_issued_at_s=self._clock.now(),
        )
        self._phase = Phase.AWAITING_INPUT
        self._revision += 1

    def on_key_press(self, pressed_key: str) -> bool:
        """Score a press. Returns False (and changes nothing) with no active prompt."""

        if self._phase is not Phase.AWAITING_INPUT:
            return False
        prompted = self._state.prompted_key
        issued_at = self._state.prompt_issued_at_s
        assert prompted is not None
        assert issued_at is not None

        self._phase = Phase.SCORING
        answered_at = self._clock.now()
        reaction_ms = max(0, int(round((answered_at - issued_at) * 1000.0)))
        is_correct = pressed_key == prompted

        # A wrong press is charged to the prompted key, not the pressed one.
        self._store.record_attempt(prompted, is_correct, reaction_ms)
        if is_correct:
            self._window.push(reaction_ms)

        event = RoundEvent(
            round_number=self._state.round_number,
            prompted_key=prompted,
            pressed_key=pressed_key,
            is_correct=is_correct,
            presented_at_s=issued_at,
            answered_at_s=answered_at,
            reaction_ms=reaction_ms,
        )
        self._events.append(event)
        self._log.append(
            self._formatter(
                round_number=event.round_number,
                prompted_key=prompted,
                pressed_key=pressed_key,
                is_correct=is_correct,
                reaction_ms=reaction_ms,
            )
        )
        logger.debug(
            "round %d: key=%s pressed=%r correct=%s rt=%dms",
            event.round_number,
            prompted,
            pressed_key,
            is_correct,
            reaction_ms,
        )

        self._store.save()

        self._state = RoundState(round_number=self._state.round_number)
        self._phase = Phase.IDLE
        self._revision += 1
        self._pending_start = self._scheduler.call_later(self._round_delay_s, self.start_round)
        return True

    def on_shutdown(self) -> SessionSummary:
        """End the session from any phase; an in-flight round is dropped unscored."""

        if self._pending_start is not None:
            self._pending_start.cancel()
            self._pending_start = None
        self._state = RoundState(round_number=self._state.round_number)
        self._phase = Phase.FINISHED

        self._store.increment_games_played()
        self._store.save()
        self._revision += 1
        logger.info(
            "session finished after %d rounds (games played: %d)",
            self._state.round_number,
            self._store.games_played,
        )
        return build_session_summary(
            self._store,
            total_rounds=self._state.round_number,
            rolling_avg_ms=self._window.average(),
            rolling_capacity=self._window.capacity,
        )

    def snapshot(self, *, log_tail: int | None = None) -> TrainerSnapshot:
        log = self._log if log_tail is None else self._log[len(self._log) - max(0, log_tail) :]
        return TrainerSnapshot(
            phase=self._phase,
            round=self._state,
            keys=self._store.keys,
            key_stats=self._store.stats(),
            games_played=self._store.games_played,
            overall_accuracy=self._store.overall_accuracy(),
            rolling_avg_ms=self._window.average(),
            rolling_capacity=self._window.capacity,
            log=tuple(log),
        )
