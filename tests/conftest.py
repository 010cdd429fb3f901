from __future__ import annotations

import random

import pytest
import requests

from trivia_quiz.core import engine
from trivia_quiz.core.models import Question, QuizConfig
from trivia_quiz.core.storage import MemoryStore


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, body_error: Exception | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self._body_error = body_error

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self._body_error is not None:
            raise self._body_error
        return self._payload


class FakeHttp:
    """Records calls and replays a canned response (or raises)."""

    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def make_question(prompt: str, correct: str, distractors=("a", "b", "c")) -> Question:
    return Question(
        prompt=prompt,
        correct_answer=correct,
        options=[correct, *distractors],
        category="General Knowledge",
        difficulty="easy",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def five_questions():
    return [make_question(f"Question {n}?", f"right-{n}") for n in range(5)]


@pytest.fixture
def active_session(clock, five_questions):
    state = engine.start_session(QuizConfig(question_count=5), clock=clock)
    engine.load_questions(state, five_questions)
    return state
