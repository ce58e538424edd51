from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Round timing and the scheduler read time through this interface so tests
    can drive them with a fake clock.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class ScheduledCall:
    """Handle for a deferred callback registered on a Scheduler."""

    __slots__ = ("due_at_s", "callback", "_cancelled", "_fired")

    def __init__(self, due_at_s: float, callback: Callable[[], None]) -> None:
        self.due_at_s = float(due_at_s)
        self.callback = callback
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        self._cancelled = True

    def _fire(self) -> None:
        self._fired = True
        self.callback()


class Scheduler:
    """Single-threaded deferred-call queue driven by an injected Clock.

    Nothing runs on its own: the owner calls ``run_due()`` from its loop and
    every call whose deadline has passed fires in deadline order.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._calls: list[ScheduledCall] = []

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledCall:
        if delay_s < 0:
            raise ValueError("delay_s must be >= 0")
        call = ScheduledCall(self._clock.now() + float(delay_s), callback)
        self._calls.append(call)
        return call

    def pending(self) -> list[ScheduledCall]:
        return [c for c in self._calls if c.pending]

    def cancel_all(self) -> None:
        for call in self._calls:
            call.cancel()
        self._calls.clear()

    def run_due(self) -> int:
        """Fire every pending call that is due. Returns how many fired."""

        now = self._clock.now()
        due = sorted(
            (c for c in self._calls if c.pending and c.due_at_s <= now),
            key=lambda c: c.due_at_s,
        )
        self._calls = [c for c in self._calls if c.pending and c not in due]
        fired = 0
        for call in due:
            # A callback fired earlier in this batch may have cancelled it.
            if not call.pending:
                continue
            call._fire()
            fired += 1
        return fired
