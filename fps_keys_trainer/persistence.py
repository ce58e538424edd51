from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class PersistenceError(Exception):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class PersistenceReadError(PersistenceError):
    """Stats file is missing, unreadable or not valid JSON."""

    def __init__(self, path: Path, reason: str, *, missing: bool = False) -> None:
        super().__init__(path, reason)
        self.missing = missing


class PersistenceWriteError(PersistenceError):
    """Stats file could not be written."""


def read_stats_payload(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise PersistenceReadError(path, "file not found", missing=True)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise PersistenceReadError(path, f"cannot read: {exc}") from exc
    except (ValueError, RecursionError) as exc:
        # ValueError covers both JSONDecodeError and UnicodeDecodeError.
        raise PersistenceReadError(path, f"invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise PersistenceReadError(path, f"expected a JSON object, got {type(payload).__name__}")
    return payload


def write_stats_payload(path: Path, payload: dict[str, Any]) -> None:
    """Write the stats payload atomically (temp file, then replace)."""

    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(path)
    except (OSError, TypeError, ValueError) as exc:
        raise PersistenceWriteError(path, str(exc)) from exc
