from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

LOGGER = logging.getLogger(__name__)

SETTINGS_KEY = "quizSettings"
HIGH_SCORE_KEY = "highScore"
TOTAL_QUIZZES_KEY = "totalQuizzes"
RESULTS_KEY = "quizResults"


class KeyValueStore(Protocol):
    """String key-value store that survives page reloads."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStore:
    """Process-local store, mostly for tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Store backed by a single JSON object on disk, written through on every change."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._data = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Failed to read store %s, starting empty: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Store %s does not hold a JSON object, starting empty.", self.path)
            return {}
        return {str(key): str(value) for key, value in payload.items()}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(self._data, fh, indent=2, ensure_ascii=False)
        tmp_path.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def delete(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()


def read_json(store: KeyValueStore, key: str) -> Optional[Any]:
    raw = store.get(key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        LOGGER.warning("Discarding unreadable %s entry: %s", key, exc)
        return None


def write_json(store: KeyValueStore, key: str, payload: Any) -> None:
    store.set(key, json.dumps(payload, ensure_ascii=False))


def read_int(store: KeyValueStore, key: str) -> int:
    raw = store.get(key)
    if raw is None:
        return 0
    try:
        return int(raw)
    except ValueError:
        LOGGER.warning("Discarding non-integer %s entry: %r", key, raw)
        return 0
