# ============================================================================
# Test Configuration & Fixtures
# ============================================================================
import pytest
from datetime import date, timedelta
from typing import List
from unittest.mock import AsyncMock

from studyboard.core.clock import FixedClock, to_iso
from studyboard.schemas.catalog import Subject, Topic, SubTopic, Question, Flashcard
from studyboard.schemas.progress import QuestionAttempt, StudentProgress, new_student_progress

TODAY = date(2024, 5, 15)

def days_ago(days: int) -> str:
    return to_iso(TODAY - timedelta(days=days))

def make_questions(prefix: str, count: int) -> List[Question]:
    return [Question(id=f"{prefix}-q{i}") for i in range(count)]

def make_attempts(correct: int, incorrect: int = 0, prefix: str = "q") -> List[QuestionAttempt]:
    """`correct` right answers followed by `incorrect` wrong ones"""
    attempts = [QuestionAttempt(question_id=f"{prefix}{i}", is_correct=True) for i in range(correct)]
    attempts += [
        QuestionAttempt(question_id=f"{prefix}{correct + i}", is_correct=False)
        for i in range(incorrect)
    ]
    return attempts

@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen on TODAY in the reference timezone"""
    return FixedClock(TODAY)

@pytest.fixture
def progress() -> StudentProgress:
    """Fresh enrollment record"""
    return new_student_progress("student-1")

@pytest.fixture
def subjects() -> List[Subject]:
    """Small catalog: Matemática (topic with subtopic), Português (single topic), empty subject"""
    return [
        Subject(
            id="math",
            name="Matemática",
            topics=[
                Topic(
                    id="algebra",
                    name="Álgebra",
                    questions=make_questions("algebra", 10),
                    tec_questions=make_questions("algebra-tec", 4),
                    flashcards=[Flashcard(id="fc-algebra-1", front="x+1=2", back="x=1")],
                    subtopics=[
                        SubTopic(id="equations", name="Equações", questions=make_questions("eq", 3)),
                    ],
                ),
            ],
        ),
        Subject(
            id="port",
            name="Português",
            topics=[
                Topic(id="crase", name="Crase", questions=make_questions("crase", 5)),
            ],
        ),
        Subject(id="empty", name="Vazia", topics=[]),
    ]

@pytest.fixture
def mock_store():
    """Progress store double"""
    store = AsyncMock()
    store.save = AsyncMock(return_value=None)
    return store

@pytest.fixture
def xp_events():
    """Recording add_xp sink; `.calls` holds (amount, message) pairs"""
    class Recorder:
        def __init__(self):
            self.calls = []

        def __call__(self, amount, message=None):
            self.calls.append((amount, message))

        @property
        def total(self):
            return sum(amount for amount, _ in self.calls)

    return Recorder()
