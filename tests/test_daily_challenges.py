# ============================================================================
# Daily Challenge Tests
# ============================================================================
import pytest

from conftest import TODAY, days_ago, make_attempts, make_questions
from studyboard.core.clock import to_iso
from studyboard.core.exceptions import UnknownChallengeType
from studyboard.schemas.progress import ChallengeType, DailyChallenge, DailyChallengeStreak, QuestionAttempt
from studyboard.services.gamification.mutators import (
    process_daily_challenge_completion,
    save_daily_challenge_attempt,
)
from studyboard.services.gamification.streaks import advance_challenge_streak

def _with_challenge(progress, challenge_type="review", items=5, streak=None):
    update = {
        f"{challenge_type}_challenge": DailyChallenge(
            date=to_iso(TODAY), items=make_questions(challenge_type, items)
        )
    }
    if streak is not None:
        update["daily_challenge_streak"] = streak
    return progress.model_copy(update=update)

class TestStreakRules:
    """Tests for daily challenge streak advancement"""

    def test_continues_from_yesterday(self):
        """Test completing the day after extends the streak"""
        streak = advance_challenge_streak(
            DailyChallengeStreak(current=2, longest=4, last_completed_date=days_ago(1)), TODAY
        )

        assert streak == DailyChallengeStreak(current=3, longest=4, last_completed_date=days_ago(0))

    def test_gap_resets(self):
        """Test a missed day restarts at one"""
        streak = advance_challenge_streak(
            DailyChallengeStreak(current=9, longest=9, last_completed_date=days_ago(2)), TODAY
        )

        assert streak.current == 1
        assert streak.longest == 9

    def test_same_day_unchanged(self):
        """Test a second completion today keeps the count"""
        streak = advance_challenge_streak(
            DailyChallengeStreak(current=5, longest=5, last_completed_date=days_ago(0)), TODAY
        )

        assert streak.current == 5

    def test_first_ever_completion(self):
        """Test an empty streak starts at one"""
        streak = advance_challenge_streak(DailyChallengeStreak(), TODAY)

        assert streak == DailyChallengeStreak(current=1, longest=1, last_completed_date=days_ago(0))

class TestDailyChallengeCompletion:
    """Tests for closing a daily challenge"""

    def test_streak_continuity_with_bonus(self, progress, clock, xp_events):
        """Test third day in a row pays completion and the 3-day bonus"""
        progress = _with_challenge(
            progress, streak=DailyChallengeStreak(current=2, longest=2, last_completed_date=days_ago(1))
        )

        result = process_daily_challenge_completion(
            progress, ChallengeType.REVIEW, make_attempts(4, 1), add_xp=xp_events, clock=clock
        )

        assert result.daily_challenge_streak == DailyChallengeStreak(
            current=3, longest=3, last_completed_date=to_iso(TODAY)
        )
        assert xp_events.calls == [
            (50, "Desafio Diário Concluído!"),
            (50, "Ofensiva de 3 dias! 🔥"),
        ]
        assert result.daily_challenge_completions == {to_iso(TODAY): {"review": True}}

    def test_gap_resets_streak(self, progress, clock, xp_events):
        """Test completion after a gap restarts the streak without bonus"""
        progress = _with_challenge(
            progress, streak=DailyChallengeStreak(current=2, longest=2, last_completed_date=days_ago(2))
        )

        result = process_daily_challenge_completion(progress, "review", make_attempts(5), add_xp=xp_events, clock=clock)

        assert result.daily_challenge_streak.current == 1
        assert result.daily_challenge_streak.longest == 2
        assert xp_events.calls == [(50, "Desafio Diário Concluído!")]

    def test_catch_up_suppresses_streak(self, progress, clock, xp_events):
        """Test catch-up pays the reduced reward and leaves the streak alone"""
        streak = DailyChallengeStreak(current=2, longest=2, last_completed_date=days_ago(1))
        progress = _with_challenge(progress, "glossary", streak=streak)

        result = process_daily_challenge_completion(
            progress, "glossary", make_attempts(3, 2), add_xp=xp_events, is_catch_up=True, clock=clock
        )

        assert xp_events.calls == [(25, "Desafio Recuperado!")]
        assert result.daily_challenge_streak == streak
        assert result.daily_challenge_completions == {to_iso(TODAY): {"glossary": True}}

    def test_failed_challenge(self, progress, clock, xp_events):
        """Test a score under 60% still consumes the challenge"""
        streak = DailyChallengeStreak(current=2, longest=2, last_completed_date=days_ago(1))
        progress = _with_challenge(progress, "portuguese", streak=streak)
        attempts = make_attempts(2, 3)

        result = process_daily_challenge_completion(progress, "portuguese", attempts, add_xp=xp_events, clock=clock)

        challenge = result.portuguese_challenge
        assert challenge.is_completed is True
        assert challenge.session_attempts == attempts
        assert challenge.attempts_made == 1
        assert xp_events.calls == []
        assert result.daily_challenge_streak == streak
        assert result.daily_challenge_completions == {}

    def test_score_uses_item_count(self, progress, clock, xp_events):
        """Test unanswered items count against the score"""
        progress = _with_challenge(progress, items=10)

        result = process_daily_challenge_completion(progress, "review", make_attempts(5), add_xp=xp_events, clock=clock)

        assert xp_events.calls == []
        assert result.review_challenge.is_completed is True

    def test_empty_challenge_scores_zero(self, progress, clock, xp_events):
        """Test a challenge without items never passes"""
        progress = _with_challenge(progress, items=0)

        result = process_daily_challenge_completion(progress, "review", [], add_xp=xp_events, clock=clock)

        assert xp_events.calls == []
        assert result.review_challenge.attempts_made == 1

    def test_ledger_keeps_other_types(self, progress, clock, xp_events):
        """Test the completion ledger is per day and per type"""
        progress = _with_challenge(progress, "glossary")
        progress = progress.model_copy(update={
            "daily_challenge_completions": {to_iso(TODAY): {"review": True}}
        })

        result = process_daily_challenge_completion(progress, "glossary", make_attempts(5), add_xp=xp_events, clock=clock)

        assert result.daily_challenge_completions == {to_iso(TODAY): {"review": True, "glossary": True}}
        assert progress.daily_challenge_completions == {to_iso(TODAY): {"review": True}}

    def test_seven_day_bonus_and_longest(self, progress, clock, xp_events):
        """Test the 7-day milestone bonus"""
        progress = _with_challenge(
            progress, streak=DailyChallengeStreak(current=6, longest=6, last_completed_date=days_ago(1))
        )

        result = process_daily_challenge_completion(progress, "review", make_attempts(5), add_xp=xp_events, clock=clock)

        assert result.daily_challenge_streak.longest == 7
        assert (100, "Ofensiva de 7 dias! 🔥") in xp_events.calls

    def test_missing_challenge_noop(self, progress, clock, xp_events):
        """Test no loaded challenge means nothing to close"""
        result = process_daily_challenge_completion(progress, "review", make_attempts(3), add_xp=xp_events, clock=clock)

        assert result is progress

    def test_unknown_type_rejected(self, progress, clock, xp_events):
        """Test challenge types outside the three variants are programming errors"""
        with pytest.raises(UnknownChallengeType):
            process_daily_challenge_completion(progress, "math", make_attempts(3), add_xp=xp_events, clock=clock)

class TestSessionAttempts:
    """Tests for saving answers of a running challenge"""

    def test_upsert_by_question(self, progress):
        """Test re-answering a question replaces the earlier answer"""
        progress = _with_challenge(progress)

        result = save_daily_challenge_attempt(progress, "review", QuestionAttempt(question_id="q1", is_correct=False))
        result = save_daily_challenge_attempt(result, "review", QuestionAttempt(question_id="q2", is_correct=True))
        result = save_daily_challenge_attempt(result, "review", QuestionAttempt(question_id="q1", is_correct=True))

        attempts = result.review_challenge.session_attempts
        assert [(a.question_id, a.is_correct) for a in attempts] == [("q1", True), ("q2", True)]
        assert progress.review_challenge.session_attempts == []

    def test_missing_challenge(self, progress):
        """Test saving into an absent challenge is a no-op"""
        result = save_daily_challenge_attempt(progress, "glossary", QuestionAttempt(question_id="q1", is_correct=True))

        assert result is progress
