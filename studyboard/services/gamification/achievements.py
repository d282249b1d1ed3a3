# ============================================================================
# Achievement System
# ============================================================================
"""
Badge registry and evaluation.

Each badge is a definition with a pure condition over the student's progress
and an evaluation context (course catalog, optional cohort progress, today's
date). A condition returns ``False`` when the badge is not earned, ``True``
when it is earned with its static text, or a ``BadgeOverride`` carrying the
display name/description for badges named after what triggered them.

Evaluation never mutates the record; callers merge the returned ids with
``merge_earned_badges`` when they are ready to commit.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union
from datetime import date
import logging

from studyboard.core.clock import ReferenceClock, get_clock
from studyboard.schemas.catalog import Subject, find_content_item
from studyboard.schemas.events import AwardedBadge
from studyboard.schemas.progress import MedalTier, StudentProgress
from studyboard.services.gamification.streaks import consecutive_activity_days

logger = logging.getLogger(__name__)

TEC_SUFFIX = "-tec"

@dataclass(frozen=True)
class BadgeOverride:
    name: str
    description: str

@dataclass
class BadgeContext:
    subjects: List[Subject]
    today: date
    all_progress: Optional[Dict[str, StudentProgress]] = None

BadgeResult = Union[bool, BadgeOverride]
BadgeCondition = Callable[[StudentProgress, BadgeContext], BadgeResult]

@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    description: str
    icon: str
    condition: BadgeCondition = field(compare=False)

    def award(self, result: BadgeResult) -> AwardedBadge:
        if isinstance(result, BadgeOverride):
            return AwardedBadge(id=self.id, name=result.name, description=result.description, icon=self.icon)
        return AwardedBadge(id=self.id, name=self.name, description=self.description, icon=self.icon)


# ----------------------------------------------------------------------------
# Conditions
# ----------------------------------------------------------------------------
def _check_first_topic(progress: StudentProgress, ctx: BadgeContext) -> BadgeResult:
    return any(
        topic.completed
        for subject_progress in progress.progress_by_topic.values()
        for topic in subject_progress.values()
    )

def _check_marathoner(progress: StudentProgress, ctx: BadgeContext) -> BadgeResult:
    return any(day.questions_answered >= 50 for day in progress.daily_activity.values())

def _activity_streak(days: int) -> BadgeCondition:
    def condition(progress: StudentProgress, ctx: BadgeContext) -> BadgeResult:
        return consecutive_activity_days(progress.daily_activity, ctx.today, limit=days) >= days
    return condition

def _challenge_streak(days: int) -> BadgeCondition:
    def condition(progress: StudentProgress, ctx: BadgeContext) -> BadgeResult:
        return progress.daily_challenge_streak.current >= days
    return condition

def _check_subject_completer(progress: StudentProgress, ctx: BadgeContext) -> BadgeResult:
    # Only the first qualifying subject is reported
    for subject in ctx.subjects:
        items = subject.content_items()
        if not items:
            continue

        subject_progress = progress.progress_by_topic.get(subject.id, {})
        if all(
            subject_progress.get(item.id) is not None and subject_progress[item.id].completed
            for item in items
        ):
            return BadgeOverride(
                name=f"Finalizador de {subject.name}",
                description=f"Concluiu todos os tópicos de {subject.name}!"
            )
    return False

def _check_game_master(progress: StudentProgress, ctx: BadgeContext) -> BadgeResult:
    return progress.games_completed_count >= 10

def _check_perfect_quiz(progress: StudentProgress, ctx: BadgeContext) -> BadgeResult:
    for subject_progress in progress.progress_by_topic.values():
        for topic_id, topic_progress in subject_progress.items():
            if topic_progress.score != 1:
                continue

            is_tec_quiz = topic_id.endswith(TEC_SUFFIX)
            content_id = topic_id[:-len(TEC_SUFFIX)] if is_tec_quiz else topic_id
            item = find_content_item(ctx.subjects, content_id)
            if item is None:
                continue

            questions = item.tec_questions if is_tec_quiz else item.questions
            if len(questions) >= 10:
                return True
    return False

def _check_leaderboard_first(progress: StudentProgress, ctx: BadgeContext) -> BadgeResult:
    all_progress = ctx.all_progress
    if not all_progress or len(all_progress) < 2:
        return False

    other_xp = [
        other.xp
        for student_id, other in all_progress.items()
        if student_id != progress.student_id and other.student_id != progress.student_id
    ]
    if not other_xp:
        return False
    return progress.xp > max(other_xp)

def _check_mastery(progress: StudentProgress, ctx: BadgeContext) -> BadgeResult:
    # Top-level topics only; subtopics do not count towards mastery
    for subject in ctx.subjects:
        if not subject.topics:
            continue

        subject_progress = progress.progress_by_topic.get(subject.id, {})
        if all(
            subject_progress.get(topic.id) is not None and subject_progress[topic.id].score == 1
            for topic in subject.topics
        ):
            return BadgeOverride(
                name=f"Mestre em {subject.name}",
                description=f"100% de acertos em {subject.name}!"
            )
    return False


# ----------------------------------------------------------------------------
# Registry (evaluation order)
# ----------------------------------------------------------------------------
ALL_BADGES: Dict[str, BadgeDefinition] = {
    badge.id: badge for badge in [
        BadgeDefinition("first-topic", "Iniciante", "Primeiro Tópico Concluído!", "⭐", _check_first_topic),
        BadgeDefinition("marathoner-50", "Maratonista", "Respondeu 50 questões em um dia.", "🔥", _check_marathoner),
        BadgeDefinition("streaker-3", "Focado", "Estudou por 3 dias seguidos.", "🧠", _activity_streak(3)),
        BadgeDefinition("streaker-7", "Dedicação Diária", "Estudou por 7 dias seguidos.", "📅", _activity_streak(7)),
        BadgeDefinition("streak-3-day-challenge", "Ritmo Certo", "Completou os desafios diários por 3 dias seguidos!", "🔥", _challenge_streak(3)),
        BadgeDefinition("streak-7-day-challenge", "Força do Hábito", "Completou os desafios diários por 7 dias seguidos!", "🔥", _challenge_streak(7)),
        BadgeDefinition("streak-15-day-challenge", "Implacável", "Completou os desafios diários por 15 dias seguidos!", "🔥", _challenge_streak(15)),
        BadgeDefinition("streak-30-day-challenge", "Lenda Diária", "Completou os desafios diários por 30 dias seguidos!", "🔥", _challenge_streak(30)),
        BadgeDefinition("subject-completer", "Finalizador", "Concluiu todos os tópicos de uma disciplina.", "✅", _check_subject_completer),
        BadgeDefinition("game-master-10", "Mestre dos Jogos", "Completou 10 minijogos.", "🎮", _check_game_master),
        BadgeDefinition("perfect-quiz-10", "Performance Perfeita", "Gabaritou um quiz com 10+ questões.", "🏆", _check_perfect_quiz),
        BadgeDefinition("leaderboard-first", "Topo do Pódio", "Alcançou o 1º lugar no ranking.", "🏆", _check_leaderboard_first),
        BadgeDefinition("mastery", "Mestre", "Alcançou 100% em uma disciplina!", "🏆", _check_mastery),
    ]
}

# Per-topic medals awarded by quiz score
TOPIC_BADGES: Dict[MedalTier, Dict[str, str]] = {
    MedalTier.BRONZE: {"name": "Medalha de Bronze", "description": "Acertou 70% ou mais das questões!", "icon": "🥉"},
    MedalTier.SILVER: {"name": "Medalha de Prata", "description": "Acertou 90% ou mais das questões!", "icon": "🥈"},
    MedalTier.GOLD: {"name": "Medalha de Ouro", "description": "Gabaritou o quiz!", "icon": "🥇"},
}

def medal_tiers_for_score(score: float) -> List[MedalTier]:
    """Cumulative medal tiers a quiz score qualifies for"""
    tiers = []
    if score >= 0.7:
        tiers.append(MedalTier.BRONZE)
    if score >= 0.9:
        tiers.append(MedalTier.SILVER)
    if score == 1:
        tiers.append(MedalTier.GOLD)
    return tiers

def newly_earned_medals(before: StudentProgress, after: StudentProgress) -> List[AwardedBadge]:
    """Topic medals present in `after` but not in `before`, with display text"""
    medals = []
    for topic_id, tiers in after.earned_topic_badge_ids.items():
        held = before.earned_topic_badge_ids.get(topic_id, [])
        for tier in tiers:
            definition = next((d for t, d in TOPIC_BADGES.items() if t.value == tier), None)
            if tier in held or definition is None:
                continue
            medals.append(AwardedBadge(id=f"{topic_id}-{tier}", **definition))
    return medals


# ----------------------------------------------------------------------------
# Evaluation
# ----------------------------------------------------------------------------
def _build_context(
    subjects: List[Subject],
    all_progress: Optional[Dict[str, StudentProgress]],
    clock: Optional[ReferenceClock]
) -> BadgeContext:
    return BadgeContext(
        subjects=subjects,
        today=(clock or get_clock()).today(),
        all_progress=all_progress,
    )

def check_and_award_badges(
    progress: StudentProgress,
    subjects: List[Subject],
    all_progress: Optional[Dict[str, StudentProgress]] = None,
    clock: Optional[ReferenceClock] = None
) -> List[AwardedBadge]:
    """Badges whose condition now holds and that the student does not hold yet"""
    ctx = _build_context(subjects, all_progress, clock)
    earned = set(progress.earned_badge_ids)
    newly_earned = []

    for badge_id, badge in ALL_BADGES.items():
        if badge_id in earned:
            continue

        result = badge.condition(progress, ctx)
        if result:
            newly_earned.append(badge.award(result))

    if newly_earned:
        logger.info(
            f"Student {progress.student_id} qualifies for badges: "
            f"{', '.join(b.id for b in newly_earned)}"
        )
    return newly_earned

def describe_badge(
    badge_id: str,
    progress: StudentProgress,
    subjects: List[Subject],
    all_progress: Optional[Dict[str, StudentProgress]] = None,
    clock: Optional[ReferenceClock] = None
) -> Optional[AwardedBadge]:
    """Display text for a badge, re-running dynamic conditions to recover the name"""
    badge = ALL_BADGES.get(badge_id)
    if badge is None:
        return None

    result = badge.condition(progress, _build_context(subjects, all_progress, clock))
    return badge.award(result if isinstance(result, BadgeOverride) else True)

def merge_earned_badges(progress: StudentProgress, badges: List[AwardedBadge]) -> StudentProgress:
    """Union the awarded ids into the record, keeping first-earned order"""
    merged = list(progress.earned_badge_ids)
    for badge in badges:
        if badge.id not in merged:
            merged.append(badge.id)

    if len(merged) == len(progress.earned_badge_ids):
        return progress
    return progress.model_copy(update={"earned_badge_ids": merged})
