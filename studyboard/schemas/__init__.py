from studyboard.schemas.catalog import Subject, Topic, SubTopic, Question, Flashcard
from studyboard.schemas.progress import (
    StudentProgress, TopicProgress, QuestionAttempt, DailyActivity, DailyChallenge,
    DailyChallengeStreak, SrsEntry, ReviewSession, CustomQuiz, Simulado,
    ChallengeType, MedalTier, new_student_progress
)
from studyboard.schemas.events import XpAward, AwardedBadge, LevelUp, ProgressUpdate

__all__ = [
    "Subject", "Topic", "SubTopic", "Question", "Flashcard",
    "StudentProgress", "TopicProgress", "QuestionAttempt", "DailyActivity",
    "DailyChallenge", "DailyChallengeStreak", "SrsEntry", "ReviewSession",
    "CustomQuiz", "Simulado", "ChallengeType", "MedalTier", "new_student_progress",
    "XpAward", "AwardedBadge", "LevelUp", "ProgressUpdate"
]
