"""
Application settings.

Values come from environment variables so the same code runs locally and on
a hosted Streamlit instance without edits.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_API_URL = "https://opentdb.com/api.php"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_SECONDS_PER_QUESTION = 30
DEFAULT_STORE_PATH = Path.home() / ".trivia_quiz" / "store.json"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class AppConfig:
    api_url: str = DEFAULT_API_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    seconds_per_question: int = DEFAULT_SECONDS_PER_QUESTION
    store_path: Path = field(default_factory=lambda: DEFAULT_STORE_PATH)
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if environ is None else environ

        store_path = env.get("QUIZ_STORE_PATH")
        return cls(
            api_url=env.get("QUIZ_API_URL") or DEFAULT_API_URL,
            request_timeout=_read_number(env, "QUIZ_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float),
            seconds_per_question=_read_number(env, "QUIZ_SECONDS_PER_QUESTION", DEFAULT_SECONDS_PER_QUESTION, int),
            store_path=Path(store_path).expanduser() if store_path else DEFAULT_STORE_PATH,
            log_level=(env.get("QUIZ_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )


def _read_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default
    if value <= 0:
        LOGGER.warning("Ignoring non-positive %s=%r, using %s", name, raw, default)
        return default
    return value
