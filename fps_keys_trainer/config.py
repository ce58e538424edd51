from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

STATS_PATH_ENV = "FPS_KEYS_STATS_PATH"
LOG_PATH_ENV = "FPS_KEYS_LOG_PATH"
LOG_LEVEL_ENV = "FPS_KEYS_LOG_LEVEL"

DEFAULT_KEYS: tuple[str, ...] = ("q", "e", "r", "t", "f", "g", "c", "x", "z")


def default_stats_path() -> Path:
    explicit = os.environ.get(STATS_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".fps_keys_trainer_stats.json"


def default_log_path() -> Path:
    explicit = os.environ.get(LOG_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".fps_keys_trainer.log"


def default_log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, "WARNING").strip().upper() or "WARNING"


@dataclass(frozen=True, slots=True)
class TrainerConfig:
    keys: tuple[str, ...] = DEFAULT_KEYS
    rolling_window: int = 4
    round_delay_s: float = 0.1
    stats_path: Path = field(default_factory=default_stats_path)

    def __post_init__(self) -> None:
        if not self.keys:
            raise ValueError("keys must not be empty")
        if len(set(self.keys)) != len(self.keys):
            raise ValueError("keys must be unique")
        if any(len(k) != 1 for k in self.keys):
            raise ValueError("keys must be single characters")
        if self.rolling_window < 1:
            raise ValueError("rolling_window must be >= 1")
        if self.round_delay_s < 0:
            raise ValueError("round_delay_s must be >= 0")

    @classmethod
    def from_env(cls) -> "TrainerConfig":
        return cls(stats_path=default_stats_path())
