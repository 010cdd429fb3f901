from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .timer import DEFAULT_CLOCK, Clock, Countdown

QUESTION_COUNT_CHOICES = (5, 10, 15, 20)


class Difficulty(str, Enum):
    """Difficulty filter accepted by the trivia source."""

    ANY = "any"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def display_name(self) -> str:
        mapping = {
            Difficulty.ANY: "Any Difficulty",
            Difficulty.EASY: "Easy",
            Difficulty.MEDIUM: "Medium",
            Difficulty.HARD: "Hard",
        }
        return mapping[self]


class SessionPhase(str, Enum):
    """Lifecycle of a single quiz attempt."""

    LOADING = "loading"
    ACTIVE = "active"
    FINISHED = "finished"


@dataclass(frozen=True)
class QuizConfig:
    """Settings chosen on the home screen."""

    question_count: int = 10
    difficulty: Difficulty = Difficulty.EASY

    def __post_init__(self) -> None:
        if self.question_count < 1:
            raise ValueError(f"question_count must be positive, got {self.question_count}")
        object.__setattr__(self, "difficulty", Difficulty(self.difficulty))

    def to_json_serializable(self) -> Dict[str, Any]:
        return {"numQuestions": self.question_count, "difficulty": self.difficulty.value}

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "QuizConfig":
        return cls(question_count=int(payload["numQuestions"]), difficulty=Difficulty(payload["difficulty"]))


@dataclass(frozen=True)
class Question:
    """A multiple-choice question. Text fields may carry HTML markup."""

    prompt: str
    correct_answer: str
    options: List[str]
    category: str
    difficulty: str

    def to_json_serializable(self) -> Dict[str, Any]:
        return {
            "question": self.prompt,
            "correct": self.correct_answer,
            "options": list(self.options),
            "category": self.category,
            "difficulty": self.difficulty,
        }

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Question":
        return cls(
            prompt=payload["question"],
            correct_answer=payload["correct"],
            options=list(payload["options"]),
            category=payload.get("category", ""),
            difficulty=payload.get("difficulty", ""),
        )


@dataclass(frozen=True)
class ResultRecord:
    """Summary of a finished or abandoned session."""

    questions: List[Question]
    answers: Dict[int, str]
    final_score: int
    total_questions: int
    completed_count: int

    def to_json_serializable(self) -> Dict[str, Any]:
        return {
            "questions": [question.to_json_serializable() for question in self.questions],
            "selectedAnswers": {str(index): answer for index, answer in sorted(self.answers.items())},
            "finalScore": self.final_score,
            "totalQuestions": self.total_questions,
            "completedQuestions": self.completed_count,
        }

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "ResultRecord":
        questions = [Question.from_json(entry) for entry in payload["questions"]]
        selected = payload.get("selectedAnswers") or {}
        if not isinstance(selected, dict):
            raise ValueError(f"selectedAnswers must be an object, got {type(selected).__name__}")
        answers = {
            int(index): answer
            for index, answer in selected.items()
            if answer is not None and 0 <= int(index) < len(questions)
        }
        return cls(
            questions=questions,
            answers=answers,
            final_score=int(payload["finalScore"]),
            total_questions=int(payload.get("totalQuestions", len(questions))),
            completed_count=int(payload.get("completedQuestions", 0)),
        )


@dataclass(frozen=True)
class Stats:
    """Durable per-browser statistics."""

    high_score: int = 0
    total_quizzes_taken: int = 0


@dataclass
class SessionState:
    """Mutable state of one quiz attempt. Only engine functions mutate it."""

    config: QuizConfig
    seconds_per_question: int = 30
    phase: SessionPhase = SessionPhase.LOADING
    questions: List[Question] = field(default_factory=list)
    current_index: int = 0
    answers: Dict[int, str] = field(default_factory=dict)
    warning: Optional[str] = None
    countdown: Optional[Countdown] = field(default=None, repr=False)
    clock: Clock = field(default=DEFAULT_CLOCK, repr=False, compare=False)
    result: Optional[ResultRecord] = None

    @property
    def score(self) -> int:
        return sum(
            1
            for index, answer in self.answers.items()
            if index < len(self.questions) and answer == self.questions[index].correct_answer
        )

    @property
    def current_question(self) -> Optional[Question]:
        if self.phase != SessionPhase.ACTIVE or not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def selected_answer(self) -> Optional[str]:
        return self.answers.get(self.current_index)

    @property
    def is_last_question(self) -> bool:
        return self.current_index + 1 >= len(self.questions)
