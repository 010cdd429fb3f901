from __future__ import annotations

import html
import logging
from pathlib import Path

import streamlit as st
from streamlit_autorefresh import st_autorefresh

from trivia_quiz.core import engine, options, stats
from trivia_quiz.core.config import AppConfig
from trivia_quiz.core.models import QUESTION_COUNT_CHOICES, Difficulty, QuizConfig, SessionPhase, SessionState
from trivia_quiz.core.source import fetch_questions
from trivia_quiz.core.storage import JsonFileStore, KeyValueStore

PAGE_TITLE = "Quiz Challenge"
PAGES = ("home", "quiz", "results")
LOW_TIME_SECONDS = 5

APP_CONFIG = AppConfig.from_env()

logging.basicConfig(level=APP_CONFIG.log_level)
LOGGER = logging.getLogger(__name__)


@st.cache_resource
def get_store(path: str) -> KeyValueStore:
    return JsonFileStore(Path(path))


def current_page() -> str:
    page = st.query_params.get("page", "home")
    return page if page in PAGES else "home"


def go_to(page: str) -> None:
    st.query_params["page"] = page
    st.rerun()


def display_html(text: str) -> str:
    """Plain-text rendering of an HTML fragment for widgets that do not take markup."""
    return html.unescape(text)


def render_home(store: KeyValueStore) -> None:
    st.markdown("Test your knowledge with timed multiple-choice trivia.")

    saved = stats.load_stats(store)
    if saved.high_score > 0 or saved.total_quizzes_taken > 0:
        left, right = st.columns(2)
        left.metric("High Score", saved.high_score)
        right.metric("Quizzes Taken", saved.total_quizzes_taken)

    current = stats.load_config(store, default=stats.HOME_DEFAULT_CONFIG)
    difficulties = list(Difficulty)

    with st.form(key="quiz-settings"):
        count = st.selectbox(
            "Number of Questions",
            options=list(QUESTION_COUNT_CHOICES),
            format_func=lambda n: f"{n} Questions",
            index=QUESTION_COUNT_CHOICES.index(current.question_count)
            if current.question_count in QUESTION_COUNT_CHOICES
            else QUESTION_COUNT_CHOICES.index(10),
        )
        difficulty = st.selectbox(
            "Difficulty",
            options=difficulties,
            format_func=lambda d: d.display_name,
            index=difficulties.index(current.difficulty),
        )
        submitted = st.form_submit_button("Start Quiz")

    if submitted:
        stats.record_session_start(store, QuizConfig(question_count=count, difficulty=difficulty))
        st.session_state.pop("quiz_session", None)
        st.session_state.pop("result_review", None)
        go_to("quiz")


def get_session(store: KeyValueStore, config: AppConfig) -> SessionState:
    state = st.session_state.get("quiz_session")
    if state is None:
        state = engine.start_session(stats.load_config(store), seconds_per_question=config.seconds_per_question)
        st.session_state.quiz_session = state
        st.session_state.confirm_skip = False
    return state


def load_session_questions(state: SessionState, config: AppConfig) -> None:
    with st.spinner("Loading questions..."):
        outcome = fetch_questions(
            state.config.question_count,
            state.config.difficulty,
            api_url=config.api_url,
            timeout=config.request_timeout,
        )
    engine.load_questions(state, outcome.questions, warning=outcome.warning)


def render_quiz_header(state: SessionState) -> None:
    question = state.current_question
    total = len(state.questions)

    left, right = st.columns([3, 1])
    left.markdown(f"**Question {state.current_index + 1} of {total}**")
    if question.category:
        right.caption(options.format_category(question.category))

    st.progress((state.current_index + 1) / total)
    st.caption(f"Score: {state.score}/{total}")

    remaining = engine.remaining_seconds(state)
    if remaining <= LOW_TIME_SECONDS:
        st.markdown(f":red[**Time Left: {remaining}s**]")
    else:
        st.markdown(f":green[**Time Left: {remaining}s**]")


def render_options(state: SessionState) -> None:
    question = state.current_question
    st.markdown(f"### {question.prompt}", unsafe_allow_html=True)

    for slot, option in enumerate(question.options):
        selected = option == state.selected_answer
        if st.button(
            display_html(option),
            key=f"option-{state.current_index}-{slot}",
            type="primary" if selected else "secondary",
            use_container_width=True,
        ):
            engine.select_answer(state, option)
            st.rerun()


def render_navigation(state: SessionState) -> None:
    prev_col, skip_col, next_col = st.columns(3)

    if prev_col.button(
        "← Previous",
        key=f"prev-{state.current_index}",
        disabled=state.current_index == 0,
        use_container_width=True,
    ):
        engine.retreat(state)
        st.rerun()

    if skip_col.button("Skip Challenge", key=f"skip-{state.current_index}", use_container_width=True):
        st.session_state.confirm_skip = True
        st.rerun()

    next_label = "Finish" if state.is_last_question else "Next →"
    if next_col.button(
        next_label,
        key=f"next-{state.current_index}",
        disabled=state.selected_answer is None,
        type="primary",
        use_container_width=True,
    ):
        engine.advance(state)
        st.rerun()


def render_skip_confirmation(state: SessionState) -> None:
    st.warning("Skip Quiz Challenge? Your progress so far will be scored and the quiz will end.")
    cancel_col, confirm_col = st.columns(2)
    if cancel_col.button("Continue Quiz", key=f"continue-{state.current_index}", use_container_width=True):
        st.session_state.confirm_skip = False
        st.rerun()
    if confirm_col.button("Yes, Skip", key=f"abandon-{state.current_index}", type="primary", use_container_width=True):
        st.session_state.confirm_skip = False
        engine.abandon(state)
        st.rerun()


def render_quiz(store: KeyValueStore, config: AppConfig) -> None:
    state = get_session(store, config)

    if state.phase == SessionPhase.LOADING:
        load_session_questions(state, config)

    if state.phase == SessionPhase.ACTIVE:
        st_autorefresh(interval=1_000, key="timer-refresh")
        engine.tick(state)

    if state.phase == SessionPhase.FINISHED:
        engine.finish_session(state, store)
        st.session_state.pop("quiz_session", None)
        st.session_state.pop("result_review", None)
        go_to("results")

    if state.warning:
        st.warning(state.warning)

    render_quiz_header(state)
    render_options(state)
    st.divider()

    if st.session_state.get("confirm_skip"):
        render_skip_confirmation(state)
    else:
        render_navigation(state)


def render_review_rows(review: stats.ResultReview) -> None:
    st.subheader("Answer Review")
    for row in review.rows:
        with st.container(border=True):
            marker = "✅" if row.is_correct else "❌"
            st.markdown(f"{marker} **{row.number}.** {row.prompt}", unsafe_allow_html=True)
            st.caption(f"{row.category} · {row.difficulty}")
            answer = row.user_answer if row.user_answer is not None else stats.NOT_ANSWERED
            st.markdown(f"**Your answer:** {answer}", unsafe_allow_html=True)
            if not row.is_correct:
                st.markdown(f"**Correct answer:** {row.correct_answer}", unsafe_allow_html=True)


def render_results(store: KeyValueStore) -> None:
    review = st.session_state.get("result_review")
    if review is None:
        review = stats.load_review(store)
        if review is None:
            LOGGER.info("No stored quiz result, redirecting to the home screen.")
            go_to("home")
        st.session_state.result_review = review

    st.header("🏆 Quiz Complete!")
    st.subheader(f"{review.score} out of {review.total}")
    st.caption(f"{review.percentage}% Correct")
    if review.is_new_high_score:
        st.success("🎉 New High Score!")

    render_review_rows(review)

    correct_col, incorrect_col, percent_col = st.columns(3)
    correct_col.metric("Correct", review.score)
    incorrect_col.metric("Incorrect", review.incorrect)
    percent_col.metric("Score", f"{review.percentage}%")

    st.markdown("**Share your result**")
    st.code(stats.share_text(review), language=None)

    if st.button("Take Again", type="primary"):
        stats.clear_results(store)
        st.session_state.pop("result_review", None)
        go_to("home")


def main() -> None:
    st.set_page_config(page_title=PAGE_TITLE, page_icon="🧠")
    st.title("🧠 Quiz Challenge")

    config = APP_CONFIG
    store = get_store(str(config.store_path))

    page = current_page()
    if page == "quiz":
        render_quiz(store, config)
    elif page == "results":
        render_results(store)
    else:
        render_home(store)


if __name__ == "__main__":
    main()
