from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol

from .stats import NEUTRAL_AVG_MS, KeyStat, StatsStore

ERROR_PENALTY_MS = 100.0
WEIGHT_FLOOR_MS = 100.0


class RandomSource(Protocol):
    def random(self) -> float:
        """Return a float in [0.0, 1.0)."""
        ...


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()


def key_weight(stat: KeyStat) -> float:
    """Selection weight: slower or more error-prone keys weigh more.

    The floor keeps a fast, accurate key from never being picked.
    """

    avg = stat.average_time_ms()
    if avg is None:
        avg = NEUTRAL_AVG_MS
    return avg + stat.errors * ERROR_PENALTY_MS + WEIGHT_FLOOR_MS


def pick_weighted(keys: Sequence[str], weights: Sequence[float], r: float) -> str:
    """Walk ``keys`` subtracting weights from ``r``; return where it reaches <= 0."""

    if len(keys) != len(weights) or not keys:
        raise ValueError("keys and weights must be non-empty and the same length")
    remaining = r
    for key, weight in zip(keys, weights):
        remaining -= weight
        if remaining <= 0:
            return key
    return keys[-1]


class KeySelector:
    def __init__(self, rng: RandomSource) -> None:
        self._rng = rng

    def weights(self, store: StatsStore) -> dict[str, float]:
        return {key: key_weight(store.stat(key)) for key in store.keys}

    def choose_next(self, store: StatsStore) -> str:
        weights = self.weights(store)
        keys = list(weights)
        values = [weights[k] for k in keys]
        r = self._rng.random() * sum(values)
        return pick_weighted(keys, values, r)
