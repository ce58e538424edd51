from __future__ import annotations

from dataclasses import dataclass

import pytest

from fps_keys_trainer.clock import Scheduler


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


def test_calls_fire_in_deadline_order_once_due() -> None:
    clock = FakeClock()
    scheduler = Scheduler(clock)
    fired: list[str] = []

    scheduler.call_later(0.3, lambda: fired.append("late"))
    scheduler.call_later(0.1, lambda: fired.append("early"))

    assert scheduler.run_due() == 0
    clock.advance(0.5)
    assert scheduler.run_due() == 2
    assert fired == ["early", "late"]
    assert scheduler.run_due() == 0


def test_cancelled_call_never_fires() -> None:
    clock = FakeClock()
    scheduler = Scheduler(clock)
    fired: list[int] = []

    call = scheduler.call_later(0.1, lambda: fired.append(1))
    call.cancel()
    clock.advance(1.0)

    assert scheduler.run_due() == 0
    assert fired == []
    assert not call.pending


def test_callback_may_cancel_a_later_call_in_same_batch() -> None:
    clock = FakeClock()
    scheduler = Scheduler(clock)
    fired: list[str] = []

    second = scheduler.call_later(0.2, lambda: fired.append("second"))
    scheduler.call_later(0.1, lambda: (fired.append("first"), second.cancel()))
    clock.advance(1.0)

    assert scheduler.run_due() == 1
    assert fired == ["first"]


def test_cancel_all_and_negative_delay() -> None:
    scheduler = Scheduler(FakeClock())
    scheduler.call_later(0.0, lambda: None)
    scheduler.cancel_all()

    assert scheduler.pending() == []
    with pytest.raises(ValueError):
        scheduler.call_later(-0.1, lambda: None)
