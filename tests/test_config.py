from __future__ import annotations

from pathlib import Path

from trivia_quiz.core.config import (
    DEFAULT_API_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SECONDS_PER_QUESTION,
    DEFAULT_STORE_PATH,
    AppConfig,
)


def test_defaults_without_environment():
    config = AppConfig.from_env({})

    assert config.api_url == DEFAULT_API_URL
    assert config.request_timeout == DEFAULT_REQUEST_TIMEOUT
    assert config.seconds_per_question == DEFAULT_SECONDS_PER_QUESTION == 30
    assert config.store_path == DEFAULT_STORE_PATH
    assert config.log_level == "INFO"


def test_environment_overrides():
    config = AppConfig.from_env(
        {
            "QUIZ_API_URL": "http://localhost:8000/api.php",
            "QUIZ_REQUEST_TIMEOUT": "2.5",
            "QUIZ_SECONDS_PER_QUESTION": "15",
            "QUIZ_STORE_PATH": "/tmp/quiz.json",
            "QUIZ_LOG_LEVEL": "debug",
        }
    )

    assert config.api_url == "http://localhost:8000/api.php"
    assert config.request_timeout == 2.5
    assert config.seconds_per_question == 15
    assert config.store_path == Path("/tmp/quiz.json")
    assert config.log_level == "DEBUG"


def test_invalid_numbers_fall_back_to_defaults():
    config = AppConfig.from_env({"QUIZ_REQUEST_TIMEOUT": "soon", "QUIZ_SECONDS_PER_QUESTION": "0"})

    assert config.request_timeout == DEFAULT_REQUEST_TIMEOUT
    assert config.seconds_per_question == DEFAULT_SECONDS_PER_QUESTION
