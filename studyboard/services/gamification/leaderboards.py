# ============================================================================
# Leaderboard System
# ============================================================================
from typing import Dict, List, Optional, Iterable

from studyboard.config import get_settings
from studyboard.schemas.progress import StudentProgress
from studyboard.services.gamification.levels import calculate_level

def build_leaderboard(
    all_progress: Dict[str, StudentProgress],
    names: Optional[Dict[str, str]] = None,
    student_ids: Optional[Iterable[str]] = None
) -> List[Dict]:
    """XP ranking of the cohort, optionally restricted to a course's students"""
    names = names or {}
    if student_ids is not None:
        wanted = set(student_ids)
        entries = {sid: p for sid, p in all_progress.items() if sid in wanted}
    else:
        entries = all_progress

    # Stable sort keeps input order among ties
    ranked = sorted(entries.items(), key=lambda item: item[1].xp, reverse=True)

    leaderboard = []
    for rank, (student_id, progress) in enumerate(ranked, 1):
        leaderboard.append({
            "rank": rank,
            "student_id": student_id,
            "name": names.get(student_id, student_id),
            "xp": progress.xp,
            "level": calculate_level(progress.xp),
            "metric": "XP"
        })

    return leaderboard

def get_student_rank(leaderboard: List[Dict], student_id: str) -> int:
    """1-based rank, 0 when the student is not on the board"""
    for entry in leaderboard:
        if entry["student_id"] == student_id:
            return entry["rank"]
    return 0

def top_entries(leaderboard: List[Dict], limit: Optional[int] = None) -> List[Dict]:
    if limit is None:
        limit = get_settings().LEADERBOARD_SIZE
    return leaderboard[:limit]
