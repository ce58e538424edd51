from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .persistence import (
    PersistenceReadError,
    PersistenceWriteError,
    read_stats_payload,
    write_stats_payload,
)

logger = logging.getLogger(__name__)

META_KEY = "meta"
NEUTRAL_AVG_MS = 500.0


def _as_count(value: object, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be a number, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{field_name} must be a whole number, got {value!r}")
    if value < 0:
        raise ValueError(f"{field_name} must be >= 0, got {value!r}")
    return int(value)


def _as_optional_count(value: object, field_name: str) -> int | None:
    if value is None:
        return None
    return _as_count(value, field_name)


@dataclass(slots=True)
class KeyStat:
    attempts: int = 0
    successes: int = 0
    errors: int = 0
    total_time_ms: int = 0
    best_time_ms: int | None = None
    worst_time_ms: int | None = None

    def average_time_ms(self) -> float | None:
        if self.successes <= 0:
            return None
        return self.total_time_ms / self.successes

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempts": int(self.attempts),
            "successes": int(self.successes),
            "totalTime": int(self.total_time_ms),
            "errors": int(self.errors),
            "bestTime": self.best_time_ms,
            "worstTime": self.worst_time_ms,
        }

    @classmethod
    def from_dict(cls, data: object) -> "KeyStat":
        """Parse a persisted entry. Raises ValueError on malformed data.

        Older files may lack ``bestTime``/``worstTime``; those load as None.
        """

        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        stat = cls(
            attempts=_as_count(data.get("attempts", 0), "attempts"),
            successes=_as_count(data.get("successes", 0), "successes"),
            errors=_as_count(data.get("errors", 0), "errors"),
            total_time_ms=_as_count(data.get("totalTime", 0), "totalTime"),
            best_time_ms=_as_optional_count(data.get("bestTime"), "bestTime"),
            worst_time_ms=_as_optional_count(data.get("worstTime"), "worstTime"),
        )
        if stat.successes > stat.attempts:
            raise ValueError("successes exceeds attempts")
        if (
            stat.best_time_ms is not None
            and stat.worst_time_ms is not None
            and stat.best_time_ms > stat.worst_time_ms
        ):
            raise ValueError("bestTime exceeds worstTime")
        return stat


@dataclass(slots=True)
class SessionMeta:
    games_played: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"gamesPlayed": int(self.games_played)}

    @classmethod
    def from_dict(cls, data: object) -> "SessionMeta":
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        return cls(games_played=_as_count(data.get("gamesPlayed", 0), "gamesPlayed"))


class StatsStore:
    """Per-key metrics plus session counters, persisted as one JSON file.

    Load never fails: a missing or corrupt file yields zeroed stats. Save
    never raises: a failed write is logged and retried at the next save.
    """

    def __init__(
        self,
        keys: Iterable[str],
        *,
        path: Path | None = None,
        stats: dict[str, KeyStat] | None = None,
        meta: SessionMeta | None = None,
    ) -> None:
        self._keys = tuple(keys)
        if not self._keys:
            raise ValueError("keys must not be empty")
        self._path = path
        given = stats or {}
        self._stats: dict[str, KeyStat] = {k: given.get(k) or KeyStat() for k in self._keys}
        self._meta = meta or SessionMeta()

    @classmethod
    def load(cls, path: Path, keys: Iterable[str]) -> "StatsStore":
        keys = tuple(keys)
        try:
            payload = read_stats_payload(path)
        except PersistenceReadError as exc:
            if exc.missing:
                logger.debug("No stats file at %s; starting fresh", path)
            else:
                logger.warning("Error reading stats file (%s). Starting with fresh stats.", exc.reason)
            return cls(keys, path=path)
        return cls.from_dict(payload, keys, path=path)

    @classmethod
    def from_dict(cls, payload: dict[str, Any], keys: Iterable[str], *, path: Path | None = None) -> "StatsStore":
        keys = tuple(keys)
        meta = SessionMeta()
        if META_KEY in payload:
            try:
                meta = SessionMeta.from_dict(payload[META_KEY])
            except ValueError as exc:
                logger.warning("Ignoring malformed meta entry: %s", exc)

        stats: dict[str, KeyStat] = {}
        for key in keys:
            if key not in payload:
                continue
            try:
                stats[key] = KeyStat.from_dict(payload[key])
            except ValueError as exc:
                logger.warning("Resetting malformed stats for key %r: %s", key, exc)
        return cls(keys, path=path, stats=stats, meta=meta)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {META_KEY: self._meta.to_dict()}
        for key in self._keys:
            out[key] = self._stats[key].to_dict()
        return out

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatsStore):
            return NotImplemented
        return self._keys == other._keys and self.to_dict() == other.to_dict()

    @property
    def keys(self) -> tuple[str, ...]:
        return self._keys

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def games_played(self) -> int:
        return self._meta.games_played

    def stat(self, key: str) -> KeyStat:
        """Return a copy of the stats for ``key``."""

        return replace(self._stats[key])

    def stats(self) -> dict[str, KeyStat]:
        return {k: replace(self._stats[k]) for k in self._keys}

    def average_time_ms(self, key: str) -> float | None:
        return self._stats[key].average_time_ms()

    def record_attempt(self, key: str, correct: bool, reaction_ms: int) -> None:
        if key not in self._stats:
            raise KeyError(key)
        if reaction_ms < 0:
            raise ValueError("reaction_ms must be >= 0")
        reaction_ms = int(reaction_ms)

        s = self._stats[key]
        s.attempts += 1
        if not correct:
            s.errors += 1
            return
        s.successes += 1
        s.total_time_ms += reaction_ms
        if s.best_time_ms is None or reaction_ms < s.best_time_ms:
            s.best_time_ms = reaction_ms
        if s.worst_time_ms is None or reaction_ms > s.worst_time_ms:
            s.worst_time_ms = reaction_ms

    def increment_games_played(self) -> None:
        self._meta.games_played += 1

    def total_attempts(self) -> int:
        return sum(s.attempts for s in self._stats.values())

    def total_successes(self) -> int:
        return sum(s.successes for s in self._stats.values())

    def overall_accuracy(self) -> str:
        attempts = self.total_attempts()
        if attempts == 0:
            return "N/A"
        return f"{self.total_successes() / attempts * 100.0:.1f}"

    def save(self) -> bool:
        if self._path is None:
            return False
        try:
            write_stats_payload(self._path, self.to_dict())
        except PersistenceWriteError as exc:
            logger.error("Error saving stats: %s", exc)
            return False
        return True
