# ============================================================================
# Streak Rules
# ============================================================================
from typing import Dict
from datetime import date, timedelta

from studyboard.core.clock import to_iso
from studyboard.schemas.progress import DailyActivity, DailyChallengeStreak

def consecutive_activity_days(
    daily_activity: Dict[str, DailyActivity],
    today: date,
    limit: int = 366
) -> int:
    """Days in a row with answered questions, counting back from today"""
    count = 0
    for offset in range(limit):
        bucket = daily_activity.get(to_iso(today - timedelta(days=offset)))
        if bucket is None or bucket.questions_answered <= 0:
            break
        count += 1
    return count

def advance_challenge_streak(streak: DailyChallengeStreak, today: date) -> DailyChallengeStreak:
    """Register a passing, on-time daily challenge completed `today`"""
    today_iso = to_iso(today)
    yesterday_iso = to_iso(today - timedelta(days=1))

    if streak.last_completed_date == yesterday_iso:
        current = streak.current + 1
    elif streak.last_completed_date != today_iso:
        current = 1
    else:
        # Already completed today
        current = streak.current

    return DailyChallengeStreak(
        current=current,
        longest=max(streak.longest, current),
        last_completed_date=today_iso,
    )
