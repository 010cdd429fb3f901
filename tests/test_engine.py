from __future__ import annotations

import json
import random

import pytest

from conftest import FakeHttp, FakeResponse, make_question
from trivia_quiz.core import engine
from trivia_quiz.core.models import Difficulty, Question, QuizConfig, SessionPhase
from trivia_quiz.core.source import FALLBACK_WARNING, fetch_questions
from trivia_quiz.core.storage import RESULTS_KEY


def test_new_session_waits_for_questions(clock):
    state = engine.start_session(QuizConfig(question_count=5), clock=clock)

    assert state.phase == SessionPhase.LOADING
    assert not engine.select_answer(state, "x")
    assert not engine.advance(state)
    assert not engine.retreat(state)
    assert not engine.abandon(state)
    assert not engine.tick(state)
    assert state.answers == {}


def test_loading_questions_activates_session(active_session):
    assert active_session.phase == SessionPhase.ACTIVE
    assert active_session.current_index == 0
    assert engine.remaining_seconds(active_session) == 30


def test_questions_can_only_be_loaded_once(active_session, five_questions):
    assert not engine.load_questions(active_session, five_questions[:1])
    assert len(active_session.questions) == 5


def test_empty_question_list_finishes_immediately(clock):
    state = engine.start_session(QuizConfig(question_count=5), clock=clock)
    engine.load_questions(state, [])

    assert state.phase == SessionPhase.FINISHED
    assert state.result.final_score == 0
    assert state.result.total_questions == 0
    assert state.result.completed_count == 0
    assert not engine.advance(state)


def test_single_question_scenario(clock, store):
    question = Question(
        prompt="2+2=?",
        correct_answer="4",
        options=["1", "4", "2", "3"],
        category="Math",
        difficulty="easy",
    )
    state = engine.start_session(QuizConfig(question_count=1, difficulty="easy"), clock=clock)
    engine.load_questions(state, [question])

    engine.select_answer(state, "4")
    engine.advance(state)

    assert state.phase == SessionPhase.FINISHED
    assert state.result.final_score == 1
    assert state.result.total_questions == 1
    assert state.result.completed_count == 1

    engine.finish_session(state, store)
    payload = json.loads(store.get(RESULTS_KEY))
    assert payload["finalScore"] == 1
    assert payload["totalQuestions"] == 1
    assert payload["completedQuestions"] == 1
    assert payload["selectedAnswers"] == {"0": "4"}


def test_changing_answer_recomputes_score(active_session):
    engine.select_answer(active_session, "right-0")
    assert active_session.score == 1

    engine.select_answer(active_session, "a")
    assert active_session.score == 0
    assert active_session.answers == {0: "a"}


def test_revisiting_question_can_change_score(active_session):
    engine.select_answer(active_session, "right-0")
    engine.advance(active_session)
    engine.select_answer(active_session, "right-1")
    assert active_session.score == 2

    engine.retreat(active_session)
    assert active_session.selected_answer == "right-0"
    engine.select_answer(active_session, "b")

    assert active_session.score == 1
    assert active_session.answers == {0: "b", 1: "right-1"}


def test_retreat_keeps_answers_and_resets_timer(active_session, clock):
    engine.select_answer(active_session, "right-0")
    engine.advance(active_session)
    clock.advance(12)
    assert engine.remaining_seconds(active_session) == 18

    assert engine.retreat(active_session)
    assert active_session.current_index == 0
    assert engine.remaining_seconds(active_session) == 30
    assert active_session.answers[0] == "right-0"


def test_retreat_on_first_question_is_noop(active_session):
    assert not engine.retreat(active_session)
    assert active_session.current_index == 0


def test_abandon_scores_answered_questions_only(active_session):
    engine.select_answer(active_session, "right-0")
    engine.advance(active_session)
    engine.select_answer(active_session, "right-1")
    engine.advance(active_session)
    engine.select_answer(active_session, "wrong")

    assert engine.abandon(active_session)

    result = active_session.result
    assert result.final_score == 2
    assert result.completed_count == 3
    assert result.total_questions == 5


def test_finishing_records_completed_count_at_last_index(active_session):
    for _ in range(5):
        engine.advance(active_session)

    assert active_session.phase == SessionPhase.FINISHED
    assert active_session.result.completed_count == 5
    assert active_session.result.answers == {}


def test_operations_after_finish_are_noops(active_session):
    engine.abandon(active_session)
    result = active_session.result

    assert not engine.select_answer(active_session, "right-0")
    assert not engine.advance(active_session)
    assert not engine.retreat(active_session)
    assert not engine.abandon(active_session)
    assert active_session.answers == {}
    assert active_session.result is result


def test_timer_expiry_advances_without_answer(active_session, clock):
    clock.advance(30)

    assert engine.tick(active_session)
    assert active_session.current_index == 1
    assert 0 not in active_session.answers
    assert engine.remaining_seconds(active_session) == 30


def test_timer_expiry_fires_once(active_session, clock):
    clock.advance(29.5)
    assert not engine.tick(active_session)

    clock.advance(0.5)
    assert engine.tick(active_session)
    assert not engine.tick(active_session)
    assert active_session.current_index == 1


def test_button_press_at_expiry_advances_once(active_session, clock):
    clock.advance(30)
    engine.select_answer(active_session, "right-0")

    engine.advance(active_session)
    assert not engine.tick(active_session)
    assert active_session.current_index == 1


def test_timer_expiry_on_last_question_finishes(clock):
    state = engine.start_session(QuizConfig(question_count=5), clock=clock)
    engine.load_questions(state, [make_question("Only?", "yes")])

    clock.advance(31)
    assert engine.tick(state)

    assert state.phase == SessionPhase.FINISHED
    assert state.result.completed_count == 1
    assert state.result.final_score == 0


def test_custom_question_duration(clock, five_questions):
    state = engine.start_session(QuizConfig(question_count=5), seconds_per_question=10, clock=clock)
    engine.load_questions(state, five_questions)

    clock.advance(10)
    assert engine.tick(state)
    assert state.current_index == 1


def test_finish_session_before_finishing_writes_nothing(active_session, store):
    assert engine.finish_session(active_session, store) is None
    assert store.get(RESULTS_KEY) is None


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_score_matches_answers_for_random_operation_sequences(clock, five_questions, seed):
    rng = random.Random(seed)
    state = engine.start_session(QuizConfig(question_count=5), clock=clock)
    engine.load_questions(state, five_questions)

    for _ in range(60):
        op = rng.choice(["select", "select", "advance", "retreat", "tick"])
        if op == "select":
            engine.select_answer(state, rng.choice(state.questions[state.current_index].options))
        elif op == "advance":
            engine.advance(state)
        elif op == "retreat":
            engine.retreat(state)
        else:
            clock.advance(rng.choice([1, 15, 30]))
            engine.tick(state)

        expected = sum(
            1 for index, answer in state.answers.items() if answer == state.questions[index].correct_answer
        )
        assert state.score == expected
        assert all(index < len(state.questions) for index in state.answers)
        if state.phase == SessionPhase.ACTIVE:
            assert 0 <= state.current_index < len(state.questions)
        else:
            assert state.result.final_score == expected
            break


def test_fallback_questions_do_not_block_progression(clock, rng):
    outcome = fetch_questions(10, Difficulty.EASY, http=FakeHttp(FakeResponse(status_code=500)), rng=rng)
    state = engine.start_session(QuizConfig(question_count=10, difficulty=Difficulty.EASY), clock=clock)

    engine.load_questions(state, outcome.questions, warning=outcome.warning)

    assert state.phase == SessionPhase.ACTIVE
    assert state.warning == FALLBACK_WARNING
    assert len(state.questions) == 3

    engine.select_answer(state, "Paris")
    assert engine.advance(state)
    assert engine.advance(state)
    assert state.phase == SessionPhase.ACTIVE
    assert engine.advance(state)

    assert state.phase == SessionPhase.FINISHED
    assert state.result.final_score == 1
    assert state.result.total_questions == 3
    assert state.result.completed_count == 3
