from __future__ import annotations

import logging
from typing import Optional, Sequence

from . import timer
from .config import DEFAULT_SECONDS_PER_QUESTION
from .models import Question, QuizConfig, ResultRecord, SessionPhase, SessionState
from .storage import RESULTS_KEY, KeyValueStore, write_json
from .timer import DEFAULT_CLOCK, Clock

LOGGER = logging.getLogger(__name__)


def start_session(
    config: QuizConfig,
    seconds_per_question: int = DEFAULT_SECONDS_PER_QUESTION,
    clock: Clock = DEFAULT_CLOCK,
) -> SessionState:
    """Create a session waiting for its questions."""
    return SessionState(config=config, seconds_per_question=seconds_per_question, clock=clock)


def load_questions(state: SessionState, questions: Sequence[Question], warning: Optional[str] = None) -> bool:
    if state.phase != SessionPhase.LOADING:
        LOGGER.debug("Ignoring question load in phase %s.", state.phase.value)
        return False

    state.questions = list(questions)
    state.warning = warning
    state.current_index = 0
    state.answers.clear()

    if not state.questions:
        LOGGER.warning("Session started without questions; finishing immediately.")
        _finish(state)
        return True

    state.phase = SessionPhase.ACTIVE
    _restart_countdown(state)
    return True


def select_answer(state: SessionState, choice: str) -> bool:
    """Record ``choice`` for the current question, replacing any earlier pick."""
    if state.phase != SessionPhase.ACTIVE:
        LOGGER.debug("Ignoring answer in phase %s.", state.phase.value)
        return False

    state.answers[state.current_index] = choice
    return True


def advance(state: SessionState) -> bool:
    """Move to the next question, or finish after the last one."""
    if state.phase != SessionPhase.ACTIVE:
        LOGGER.debug("Ignoring advance in phase %s.", state.phase.value)
        return False

    timer.cancel(state.countdown)
    if state.current_index + 1 < len(state.questions):
        state.current_index += 1
        _restart_countdown(state)
    else:
        _finish(state)
    return True


def retreat(state: SessionState) -> bool:
    if state.phase != SessionPhase.ACTIVE or state.current_index == 0:
        LOGGER.debug("Ignoring retreat at index %s in phase %s.", state.current_index, state.phase.value)
        return False

    timer.cancel(state.countdown)
    state.current_index -= 1
    _restart_countdown(state)
    return True


def abandon(state: SessionState) -> bool:
    """End the quiz early, scoring only what was answered."""
    if state.phase != SessionPhase.ACTIVE:
        LOGGER.debug("Ignoring abandon in phase %s.", state.phase.value)
        return False

    LOGGER.info("Quiz abandoned at question %s of %s.", state.current_index + 1, len(state.questions))
    _finish(state)
    return True


def tick(state: SessionState) -> bool:
    """Poll the countdown; force an advance when it has run out. Returns True if it fired."""
    if state.phase != SessionPhase.ACTIVE:
        return False
    if not timer.claim_expiry(state.countdown, state.current_index, state.clock):
        return False

    LOGGER.info("Time ran out on question %s.", state.current_index + 1)
    return advance(state)


def remaining_seconds(state: SessionState) -> int:
    if state.phase != SessionPhase.ACTIVE or state.countdown is None:
        return 0
    return timer.remaining_seconds(state.countdown, state.clock)


def finish_session(state: SessionState, store: KeyValueStore) -> Optional[ResultRecord]:
    """Persist the result record of a finished session for the results screen."""
    if state.phase != SessionPhase.FINISHED or state.result is None:
        return None
    write_json(store, RESULTS_KEY, state.result.to_json_serializable())
    return state.result


def _restart_countdown(state: SessionState) -> None:
    timer.cancel(state.countdown)
    state.countdown = timer.start(state.current_index, state.seconds_per_question, state.clock)


def _finish(state: SessionState) -> None:
    timer.cancel(state.countdown)
    state.countdown = None
    state.phase = SessionPhase.FINISHED
    completed = state.current_index + 1 if state.questions else 0
    state.result = ResultRecord(
        questions=list(state.questions),
        answers=dict(state.answers),
        final_score=state.score,
        total_questions=len(state.questions),
        completed_count=completed,
    )
    LOGGER.info("Quiz finished: %s/%s (completed %s).", state.result.final_score, state.result.total_questions, completed)
