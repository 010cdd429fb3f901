"""
Quiz statistics and the data behind the results screen.

``totalQuizzes`` is bumped when a session starts, before its outcome is
known, so abandoned sessions still count. ``highScore`` only ever grows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .models import Difficulty, QuizConfig, ResultRecord, Stats
from .storage import (
    HIGH_SCORE_KEY,
    RESULTS_KEY,
    SETTINGS_KEY,
    TOTAL_QUIZZES_KEY,
    KeyValueStore,
    read_int,
    read_json,
    write_json,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG = QuizConfig(question_count=10)
HOME_DEFAULT_CONFIG = QuizConfig(question_count=10, difficulty=Difficulty.ANY)
NOT_ANSWERED = "Not answered"


@dataclass(frozen=True)
class ReviewRow:
    number: int
    prompt: str
    category: str
    difficulty: str
    user_answer: Optional[str]
    correct_answer: str
    is_correct: bool


@dataclass(frozen=True)
class ResultReview:
    """Everything the results screen shows."""

    record: ResultRecord
    high_score: int
    is_new_high_score: bool
    rows: List[ReviewRow]

    @property
    def score(self) -> int:
        return self.record.final_score

    @property
    def total(self) -> int:
        return self.record.total_questions

    @property
    def percentage(self) -> int:
        if not self.total:
            return 0
        return round(self.score / self.total * 100)

    @property
    def incorrect(self) -> int:
        return self.total - self.score


def load_stats(store: KeyValueStore) -> Stats:
    return Stats(high_score=read_int(store, HIGH_SCORE_KEY), total_quizzes_taken=read_int(store, TOTAL_QUIZZES_KEY))


def load_config(store: KeyValueStore, default: QuizConfig = DEFAULT_CONFIG) -> QuizConfig:
    payload = read_json(store, SETTINGS_KEY)
    if not payload:
        return default
    try:
        return QuizConfig.from_json(payload)
    except (KeyError, TypeError, ValueError) as exc:
        LOGGER.warning("Ignoring invalid saved settings %r: %s", payload, exc)
        return default


def record_session_start(store: KeyValueStore, config: QuizConfig) -> Stats:
    """Save the chosen settings and count the quiz right away."""
    write_json(store, SETTINGS_KEY, config.to_json_serializable())
    clear_results(store)

    total = read_int(store, TOTAL_QUIZZES_KEY) + 1
    store.set(TOTAL_QUIZZES_KEY, str(total))
    LOGGER.info("Starting quiz #%s: %s questions, difficulty=%s.", total, config.question_count, config.difficulty.value)
    return Stats(high_score=read_int(store, HIGH_SCORE_KEY), total_quizzes_taken=total)


def accept_result(store: KeyValueStore, record: ResultRecord) -> tuple[int, bool]:
    """Fold ``record`` into the high score. Returns (high_score, is_new_high_score)."""
    previous = read_int(store, HIGH_SCORE_KEY)
    if record.final_score > previous:
        store.set(HIGH_SCORE_KEY, str(record.final_score))
        LOGGER.info("New high score %s (was %s).", record.final_score, previous)
        return record.final_score, True
    return previous, False


def load_result(store: KeyValueStore) -> Optional[ResultRecord]:
    payload = read_json(store, RESULTS_KEY)
    if payload is None:
        return None
    try:
        return ResultRecord.from_json(payload)
    except (KeyError, TypeError, ValueError) as exc:
        LOGGER.warning("Discarding invalid stored result: %s", exc)
        return None


def load_review(store: KeyValueStore) -> Optional[ResultReview]:
    """Build the results screen data, or None when there is no result to show."""
    record = load_result(store)
    if record is None:
        return None

    high_score, is_new = accept_result(store, record)
    return ResultReview(record=record, high_score=high_score, is_new_high_score=is_new, rows=build_rows(record))


def build_rows(record: ResultRecord) -> List[ReviewRow]:
    rows = []
    for idx, question in enumerate(record.questions):
        user_answer = record.answers.get(idx)
        rows.append(
            ReviewRow(
                number=idx + 1,
                prompt=question.prompt,
                category=question.category,
                difficulty=question.difficulty,
                user_answer=user_answer,
                correct_answer=question.correct_answer,
                is_correct=user_answer == question.correct_answer,
            )
        )
    return rows


def clear_results(store: KeyValueStore) -> None:
    store.delete(RESULTS_KEY)


def share_text(review: ResultReview) -> str:
    return f"I scored {review.score}/{review.total} ({review.percentage}%) on the Quiz Challenge!"
