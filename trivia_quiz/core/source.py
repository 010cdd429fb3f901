from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .config import DEFAULT_API_URL, DEFAULT_REQUEST_TIMEOUT
from .errors import SourceUnavailable
from .models import Difficulty, Question
from .options import generate_options

LOGGER = logging.getLogger(__name__)

ANSWER_TYPE = "multiple"
FALLBACK_WARNING = "Using fallback questions (API unavailable)."

FALLBACK_QUESTIONS: List[Question] = [
    Question(
        prompt="What is the capital of France?",
        correct_answer="Paris",
        options=["Paris", "London", "Berlin", "Madrid"],
        category="Geography",
        difficulty="easy",
    ),
    Question(
        prompt="Which language runs in a web browser?",
        correct_answer="JavaScript",
        options=["Python", "C++", "JavaScript", "Java"],
        category="Science: Computers",
        difficulty="easy",
    ),
    Question(
        prompt="Who wrote 'Hamlet'?",
        correct_answer="William Shakespeare",
        options=["William Wordsworth", "William Shakespeare", "John Milton", "Charles Dickens"],
        category="Entertainment: Literature",
        difficulty="medium",
    ),
]


@dataclass(frozen=True)
class FetchOutcome:
    """Questions for a session plus a non-fatal warning when the fallback set was used."""

    questions: List[Question]
    warning: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.warning is not None


def build_params(count: int, difficulty: Difficulty) -> Dict[str, Any]:
    params: Dict[str, Any] = {"amount": count, "type": ANSWER_TYPE}
    if difficulty != Difficulty.ANY:
        params["difficulty"] = difficulty.value
    return params


def parse_question(item: Dict[str, Any], rng: random.Random) -> Question:
    correct = item["correct_answer"]
    return Question(
        prompt=item["question"],
        correct_answer=correct,
        options=generate_options(correct, item["incorrect_answers"], rng=rng),
        category=item.get("category", ""),
        difficulty=item.get("difficulty", ""),
    )


def request_questions(
    count: int,
    difficulty: Difficulty,
    http: Any,
    rng: random.Random,
    api_url: str = DEFAULT_API_URL,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> List[Question]:
    """Fetch and normalize questions, raising SourceUnavailable on any failure."""
    try:
        resp = http.get(api_url, params=build_params(count, difficulty), timeout=timeout)
        resp.raise_for_status()
        payload = resp.json()
    except requests.RequestException as exc:
        raise SourceUnavailable(f"Trivia request failed: {exc}") from exc
    except ValueError as exc:
        raise SourceUnavailable(f"Trivia response is not JSON: {exc}") from exc

    results = payload.get("results") if isinstance(payload, dict) else None
    if not results:
        raise SourceUnavailable("Trivia source returned no questions.")

    try:
        questions = [parse_question(item, rng) for item in results[:count]]
    except (KeyError, TypeError, ValueError) as exc:
        raise SourceUnavailable(f"Malformed trivia payload: {exc}") from exc

    return questions


def fetch_questions(
    count: int,
    difficulty: Difficulty,
    http: Any = None,
    rng: random.Random | None = None,
    api_url: str = DEFAULT_API_URL,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> FetchOutcome:
    """
    Return ``count`` questions from the trivia source.

    Any failure falls back to the fixed built-in set with a warning instead of
    raising. ``http`` is anything with a requests-style ``get``; ``rng`` makes
    the answer placement deterministic when seeded.
    """
    http = http or requests
    rng = rng or random.Random()

    try:
        questions = request_questions(count, Difficulty(difficulty), http, rng, api_url=api_url, timeout=timeout)
    except SourceUnavailable as exc:
        LOGGER.warning("Quiz fetch failed, using fallback questions: %s", exc)
        return FetchOutcome(questions=list(FALLBACK_QUESTIONS), warning=FALLBACK_WARNING)

    LOGGER.info("Fetched %s questions (difficulty=%s).", len(questions), Difficulty(difficulty).value)
    return FetchOutcome(questions=questions)
