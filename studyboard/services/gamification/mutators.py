# ============================================================================
# Progress Mutators
# ============================================================================
"""
One function per learning activity.

Each mutator takes the current StudentProgress plus the activity result and
returns a new StudentProgress; the input record is never modified. XP is
reported through the ``add_xp(amount, message=None)`` sink and is NOT added to
``progress.xp`` here: the caller applies the summed delta exactly once (see
``ProgressService``).

Lookups by id that miss (review session, custom quiz, simulado, daily
challenge) return the input record unchanged.
"""
from typing import Dict, List, Optional, Tuple
import logging

from studyboard.core.clock import ReferenceClock, get_clock
from studyboard.schemas.progress import (
    ChallengeType,
    DailyActivity,
    QuestionAttempt,
    StudentProgress,
    TopicProgress,
    challenge_field,
)
from studyboard.services.gamification.achievements import medal_tiers_for_score
from studyboard.services.gamification.srs import SrsPolicy, schedule
from studyboard.services.gamification.streaks import advance_challenge_streak
from studyboard.services.gamification.xp_system import AddXp, STREAK_BONUS, XP_VALUES

logger = logging.getLogger(__name__)

CUSTOM_TOPIC_ID = "custom"
SRS_REVIEW_TYPE = "srs"
DAILY_CHALLENGE_PASS_SCORE = 0.6


# ----------------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------------
def _correct_count(attempts: List[QuestionAttempt]) -> int:
    return sum(1 for attempt in attempts if attempt.is_correct)

def _with_daily_activity(progress: StudentProgress, today_iso: str, answered: int) -> Dict[str, DailyActivity]:
    """Copy of daily_activity with today's bucket incremented"""
    daily_activity = dict(progress.daily_activity)
    bucket = daily_activity.get(today_iso) or DailyActivity()
    daily_activity[today_iso] = DailyActivity(questions_answered=bucket.questions_answered + answered)
    return daily_activity

def _with_topic(
    progress: StudentProgress,
    subject_id: str,
    topic_id: str,
    topic_progress: TopicProgress
) -> Dict[str, Dict[str, TopicProgress]]:
    by_topic = dict(progress.progress_by_topic)
    by_topic[subject_id] = {**by_topic.get(subject_id, {}), topic_id: topic_progress}
    return by_topic

def _find_by_id(items: list, item_id: str) -> Tuple[int, Optional[object]]:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index, item
    return -1, None

def _replace_at(items: list, index: int, item) -> list:
    return [*items[:index], item, *items[index + 1:]]


# ----------------------------------------------------------------------------
# Activity completions
# ----------------------------------------------------------------------------
def process_quiz_completion(
    progress: StudentProgress,
    subject_id: str,
    topic_id: str,
    attempts: List[QuestionAttempt],
    *,
    add_xp: AddXp,
    clock: Optional[ReferenceClock] = None
) -> StudentProgress:
    """Full topic quiz submission (topic id may carry the -tec suffix)"""
    if not attempts:
        logger.debug(f"Empty quiz submission for {subject_id}/{topic_id}; nothing to do")
        return progress

    clock = clock or get_clock()
    correct_count = _correct_count(attempts)
    score = correct_count / len(attempts)

    add_xp(correct_count * XP_VALUES["correct_answer"])

    previous = progress.topic_progress(subject_id, topic_id)
    old_score = previous.score if previous else 0.0

    by_topic = _with_topic(
        progress, subject_id, topic_id,
        TopicProgress(completed=True, score=score, last_attempt=list(attempts))
    )

    # Retaking a quiz without improving does not pay the bonus again
    if score > old_score:
        add_xp(XP_VALUES["topic_complete"])

    update = {
        "progress_by_topic": by_topic,
        "daily_activity": _with_daily_activity(progress, clock.today_iso(), len(attempts)),
    }

    tiers = medal_tiers_for_score(score)
    if tiers:
        topic_badges = dict(progress.earned_topic_badge_ids)
        existing = topic_badges.get(topic_id, [])
        topic_badges[topic_id] = existing + [t.value for t in tiers if t.value not in existing]
        update["earned_topic_badge_ids"] = topic_badges

    logger.info(
        f"Quiz completed by {progress.student_id}: {subject_id}/{topic_id} "
        f"score={score:.2f} ({correct_count}/{len(attempts)})"
    )
    return progress.model_copy(update=update)

def process_review_completion(
    progress: StudentProgress,
    review_id: str,
    attempts: List[QuestionAttempt],
    *,
    add_xp: AddXp,
    clock: Optional[ReferenceClock] = None
) -> StudentProgress:
    """Review session finished; SRS reviews also reschedule every question"""
    index, review = _find_by_id(progress.review_sessions, review_id)
    if review is None:
        logger.debug(f"Review session {review_id} not found for {progress.student_id}")
        return progress

    reviews = _replace_at(
        progress.review_sessions, index,
        review.model_copy(update={"is_completed": True, "attempts": list(attempts)})
    )
    update = {"review_sessions": reviews}

    add_xp(XP_VALUES["review_session_complete"])

    if review.type == SRS_REVIEW_TYPE:
        today = (clock or get_clock()).today()
        srs_data = dict(progress.srs_data)
        for attempt in attempts:
            srs_data[attempt.question_id] = schedule(
                srs_data.get(attempt.question_id),
                attempt.is_correct,
                SrsPolicy.REVIEW_SESSION,
                today,
            )
            if attempt.is_correct:
                add_xp(XP_VALUES["correct_review_answer"])
        update["srs_data"] = srs_data
    else:
        add_xp(_correct_count(attempts) * XP_VALUES["correct_review_answer"])

    return progress.model_copy(update=update)

def process_game_completion(
    progress: StudentProgress,
    topic_id: str,
    game_id: str,
    *,
    add_xp: AddXp
) -> StudentProgress:
    add_xp(XP_VALUES["mini_game_complete"])

    update = {"games_completed_count": progress.games_completed_count + 1}

    # Ad-hoc games have no topic to credit
    if topic_id != CUSTOM_TOPIC_ID:
        existing = progress.earned_game_badge_ids.get(topic_id, [])
        if game_id not in existing:
            game_badges = dict(progress.earned_game_badge_ids)
            game_badges[topic_id] = existing + [game_id]
            update["earned_game_badge_ids"] = game_badges

    return progress.model_copy(update=update)

def _process_collection_completion(
    progress: StudentProgress,
    collection: str,
    item_id: str,
    attempts: List[QuestionAttempt],
    add_xp: AddXp,
    clock: Optional[ReferenceClock]
) -> StudentProgress:
    items = getattr(progress, collection)
    index, item = _find_by_id(items, item_id)
    if item is None:
        logger.debug(f"{collection} item {item_id} not found for {progress.student_id}")
        return progress

    add_xp(_correct_count(attempts) * XP_VALUES["correct_answer"])

    completed = item.model_copy(update={"is_completed": True, "attempts": list(attempts)})
    today_iso = (clock or get_clock()).today_iso()
    return progress.model_copy(update={
        collection: _replace_at(items, index, completed),
        "daily_activity": _with_daily_activity(progress, today_iso, len(attempts)),
    })

def process_custom_quiz_completion(
    progress: StudentProgress,
    quiz_id: str,
    attempts: List[QuestionAttempt],
    *,
    add_xp: AddXp,
    clock: Optional[ReferenceClock] = None
) -> StudentProgress:
    return _process_collection_completion(progress, "custom_quizzes", quiz_id, attempts, add_xp, clock)

def process_simulado_completion(
    progress: StudentProgress,
    simulado_id: str,
    attempts: List[QuestionAttempt],
    *,
    add_xp: AddXp,
    clock: Optional[ReferenceClock] = None
) -> StudentProgress:
    """Mock exam submission"""
    return _process_collection_completion(progress, "simulados", simulado_id, attempts, add_xp, clock)

def process_daily_challenge_completion(
    progress: StudentProgress,
    challenge_type: ChallengeType,
    final_attempts: List[QuestionAttempt],
    is_catch_up: bool = False,
    *,
    add_xp: AddXp,
    clock: Optional[ReferenceClock] = None
) -> StudentProgress:
    """
    Close today's (or a missed day's, when catching up) daily challenge.

    The challenge is always consumed. A score of at least 60% pays XP and
    writes the per-day completion ledger; only on-time completions move the
    streak, and landing on a streak milestone pays the streak bonus.
    """
    field_name = challenge_field(challenge_type)
    challenge_type = ChallengeType(challenge_type)
    challenge = getattr(progress, field_name)
    if challenge is None:
        logger.debug(f"No {challenge_type.value} challenge loaded for {progress.student_id}")
        return progress

    clock = clock or get_clock()
    update = {
        field_name: challenge.model_copy(update={
            "is_completed": True,
            "session_attempts": list(final_attempts),
            "attempts_made": challenge.attempts_made + 1,
        })
    }

    correct_count = _correct_count(final_attempts)
    score = correct_count / len(challenge.items) if challenge.items else 0.0

    if score < DAILY_CHALLENGE_PASS_SCORE:
        logger.info(
            f"Daily {challenge_type.value} challenge failed by {progress.student_id} "
            f"(score={score:.2f})"
        )
        return progress.model_copy(update=update)

    today = clock.today()
    today_iso = clock.today_iso()

    if is_catch_up:
        add_xp(XP_VALUES["catch_up_challenge_complete"], "Desafio Recuperado!")
    else:
        add_xp(XP_VALUES["daily_challenge_complete"], "Desafio Diário Concluído!")
        streak = advance_challenge_streak(progress.daily_challenge_streak, today)
        update["daily_challenge_streak"] = streak

        bonus = STREAK_BONUS.get(streak.current)
        if bonus:
            add_xp(bonus, f"Ofensiva de {streak.current} dias! 🔥")

    completions = dict(progress.daily_challenge_completions)
    completions[today_iso] = {**completions.get(today_iso, {}), challenge_type.value: True}
    update["daily_challenge_completions"] = completions

    return progress.model_copy(update=update)


# ----------------------------------------------------------------------------
# Incremental edits
# ----------------------------------------------------------------------------
def update_srs_flashcard(
    progress: StudentProgress,
    flashcard_id: str,
    performance: str,
    clock: Optional[ReferenceClock] = None
) -> StudentProgress:
    """Flashcard review graded 'good' or 'bad'"""
    today = (clock or get_clock()).today()
    srs_flashcards = dict(progress.srs_flashcard_data)
    srs_flashcards[flashcard_id] = schedule(
        srs_flashcards.get(flashcard_id),
        performance == "good",
        SrsPolicy.FLASHCARD,
        today,
    )
    return progress.model_copy(update={"srs_flashcard_data": srs_flashcards})

def save_quiz_progress(
    progress: StudentProgress,
    subject_id: str,
    topic_id: str,
    attempt: QuestionAttempt
) -> StudentProgress:
    """Per-question save while a quiz is still in progress; attempts accumulate"""
    current = progress.topic_progress(subject_id, topic_id) or TopicProgress()
    topic_progress = current.model_copy(update={"last_attempt": [*current.last_attempt, attempt]})
    return progress.model_copy(update={
        "progress_by_topic": _with_topic(progress, subject_id, topic_id, topic_progress)
    })

def toggle_topic_completion(
    progress: StudentProgress,
    subject_id: str,
    topic_id: str,
    is_completed: bool
) -> StudentProgress:
    current = progress.topic_progress(subject_id, topic_id) or TopicProgress()
    return progress.model_copy(update={
        "progress_by_topic": _with_topic(
            progress, subject_id, topic_id,
            current.model_copy(update={"completed": is_completed})
        )
    })

def save_daily_challenge_attempt(
    progress: StudentProgress,
    challenge_type: ChallengeType,
    attempt: QuestionAttempt
) -> StudentProgress:
    """Record one answer of a running challenge, replacing an earlier answer to the same question"""
    field_name = challenge_field(challenge_type)
    challenge = getattr(progress, field_name)
    if challenge is None:
        return progress

    session_attempts = list(challenge.session_attempts)
    index, _ = _find_attempt(session_attempts, attempt.question_id)
    if index >= 0:
        session_attempts[index] = attempt
    else:
        session_attempts.append(attempt)

    return progress.model_copy(update={
        field_name: challenge.model_copy(update={"session_attempts": session_attempts})
    })

def _find_attempt(attempts: List[QuestionAttempt], question_id: str) -> Tuple[int, Optional[QuestionAttempt]]:
    for index, attempt in enumerate(attempts):
        if attempt.question_id == question_id:
            return index, attempt
    return -1, None
