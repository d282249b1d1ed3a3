# ============================================================================
# Student Progress Schemas
# ============================================================================
"""
The StudentProgress aggregate and its nested records.

Records are immutable and serialise to the camelCase document shape used by
the dashboard (``earnedBadgeIds``, ``progressByTopic``, ``lastAttempt``...).
Fields the engine does not know about are kept as extras so a record can be
validated, transformed and dumped back without losing UI-owned data.
"""
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from enum import Enum

from studyboard.core.exceptions import InvalidProgressRecord, UnknownChallengeType
from studyboard.schemas.catalog import Flashcard, Question

class ProgressModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

class ChallengeType(str, Enum):
    REVIEW = "review"
    GLOSSARY = "glossary"
    PORTUGUESE = "portuguese"

class MedalTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"

class QuestionAttempt(ProgressModel):
    question_id: str
    is_correct: bool
    selected_answer: Optional[str] = None

class TopicProgress(ProgressModel):
    completed: bool = False
    score: float = 0.0
    last_attempt: List[QuestionAttempt] = Field(default_factory=list)

class DailyActivity(ProgressModel):
    questions_answered: int = 0

class DailyChallengeStreak(ProgressModel):
    current: int = 0
    longest: int = 0
    last_completed_date: str = ""

class SrsEntry(ProgressModel):
    stage: int = 0
    next_review_date: str = ""

class ReviewSession(ProgressModel):
    id: str
    name: str = ""
    type: str = "manual"
    created_at: Optional[int] = None
    questions: List[Question] = Field(default_factory=list)
    is_completed: bool = False
    attempts: Optional[List[QuestionAttempt]] = None

class CustomQuiz(ProgressModel):
    id: str
    name: str = ""
    questions: List[Question] = Field(default_factory=list)
    is_completed: bool = False
    attempts: Optional[List[QuestionAttempt]] = None
    created_at: Optional[int] = None

class Simulado(CustomQuiz):
    """Mock exam; same lifecycle as a custom quiz"""
    config: Optional[Dict[str, Any]] = None

class DailyChallenge(ProgressModel):
    date: str
    items: List[Question] = Field(default_factory=list)
    is_completed: bool = False
    attempts_made: int = 0
    session_attempts: List[QuestionAttempt] = Field(default_factory=list)

class StudentProgress(ProgressModel):
    student_id: str
    xp: int = 0
    earned_badge_ids: List[str] = Field(default_factory=list)
    earned_topic_badge_ids: Dict[str, List[str]] = Field(default_factory=dict)
    earned_game_badge_ids: Dict[str, List[str]] = Field(default_factory=dict)
    games_completed_count: int = 0
    progress_by_topic: Dict[str, Dict[str, TopicProgress]] = Field(default_factory=dict)
    daily_activity: Dict[str, DailyActivity] = Field(default_factory=dict)
    daily_challenge_streak: DailyChallengeStreak = Field(default_factory=DailyChallengeStreak)
    daily_challenge_completions: Dict[str, Dict[str, bool]] = Field(default_factory=dict)
    srs_data: Dict[str, SrsEntry] = Field(default_factory=dict)
    srs_flashcard_data: Dict[str, SrsEntry] = Field(default_factory=dict)
    review_sessions: List[ReviewSession] = Field(default_factory=list)
    custom_quizzes: List[CustomQuiz] = Field(default_factory=list)
    simulados: List[Simulado] = Field(default_factory=list)
    ai_generated_flashcards: List[Flashcard] = Field(default_factory=list)
    review_challenge: Optional[DailyChallenge] = None
    glossary_challenge: Optional[DailyChallenge] = None
    portuguese_challenge: Optional[DailyChallenge] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "StudentProgress":
        """Validate a raw camelCase document"""
        try:
            return cls.model_validate(document)
        except ValidationError as e:
            raise InvalidProgressRecord(f"Invalid progress record: {e.error_count()} error(s)") from e

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    def topic_progress(self, subject_id: str, topic_id: str) -> Optional[TopicProgress]:
        return self.progress_by_topic.get(subject_id, {}).get(topic_id)

    def challenge(self, challenge_type: ChallengeType) -> Optional[DailyChallenge]:
        return getattr(self, challenge_field(challenge_type))


def challenge_field(challenge_type: ChallengeType) -> str:
    try:
        value = ChallengeType(challenge_type).value
    except ValueError:
        raise UnknownChallengeType(str(challenge_type)) from None
    return f"{value}_challenge"


def new_student_progress(student_id: str) -> StudentProgress:
    """Blank record created at enrollment"""
    return StudentProgress(student_id=student_id)
