# FILE: tests/conftest.py

import os
import sys
import tempfile
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Keep data written at import time (routes build their stores) out of the repo
_tmp_root = Path(tempfile.mkdtemp(prefix="certquiz-tests-"))
os.environ.setdefault("QUESTIONS_DIR", str(_tmp_root / "questions"))
os.environ.setdefault("ATTEMPTS_DIR", str(_tmp_root / "attempts"))
os.environ.setdefault("LOGS_DIR", str(_tmp_root / "logs"))

import pytest
from certquiz.config import get_settings
from certquiz.models.questions import Question, QuestionFormat


@pytest.fixture(scope="session")
def settings():
    """Provide settings for tests"""
    return get_settings()


@pytest.fixture
def single_choice_question():
    return Question(
        id="q-sc",
        format=QuestionFormat.SINGLE_CHOICE,
        text="Which attack overwrites adjacent memory?",
        options=["Phishing", "Buffer overflow", "Tailgating", "Vishing"],
        correct_answer="B",
        explanation={
            "A": "Phishing is social engineering over email.",
            "B": "A buffer overflow writes past the end of a buffer.",
            "C": "Tailgating is a physical intrusion.",
            "D": "Vishing is phishing over the phone.",
        },
        difficulty_tag=2,
        topic_id="network-attacks"
    )


@pytest.fixture
def multi_choice_question():
    return Question(
        id="q-mc",
        format=QuestionFormat.MULTI_CHOICE,
        text="Which are mammals?",
        options=["Cats", "Dogs", "Snakes"],
        correct_answer=["A", "B"],
        explanation="Cats and dogs are mammals.",
        topic_id="network-attacks"
    )


@pytest.fixture
def true_false_question():
    return Question(
        id="q-tf",
        format=QuestionFormat.TRUE_FALSE,
        text="True or False: AES is a symmetric cipher.",
        correct_answer="True",
        explanation="AES uses the same key to encrypt and decrypt.",
        topic_id="network-attacks"
    )


@pytest.fixture
def fill_blank_question():
    return Question(
        id="q-fb",
        format=QuestionFormat.FILL_BLANK,
        text="Writing past the end of a buffer is a buffer ____.",
        correct_answer="overflow",
        topic_id="network-attacks"
    )


@pytest.fixture
def open_ended_question():
    return Question(
        id="q-oe",
        format=QuestionFormat.OPEN_ENDED,
        text="Name the protocol that secures HTTP.",
        correct_answer="TLS",
        topic_id="network-attacks"
    )


@pytest.fixture
def question_set(single_choice_question, multi_choice_question, true_false_question):
    return [single_choice_question, multi_choice_question, true_false_question]
