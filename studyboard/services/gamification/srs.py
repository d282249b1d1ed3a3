# ============================================================================
# Spaced Repetition Scheduler
# ============================================================================
"""
Stage ladder for spaced repetition.

Every question or flashcard carries its own stage, an index into
``SRS_INTERVALS`` (days until the next review). Two policies move the stage:

- flashcard: a good answer climbs one stage, a bad answer drops one stage;
- review session: a correct answer climbs one stage, an incorrect answer
  halves the stage (rounded down), a much harsher reset.

The next review date is always computed from "today" in the reference
timezone at the moment the attempt is recorded.
"""
from typing import Dict, List, Optional
from datetime import date, timedelta
from enum import Enum

from studyboard.core.clock import to_iso
from studyboard.schemas.progress import SrsEntry

# Review intervals in days, indexed by stage
SRS_INTERVALS = [1, 3, 7, 14, 30, 60, 120, 180, 365]
MAX_STAGE = len(SRS_INTERVALS) - 1

class SrsPolicy(str, Enum):
    FLASHCARD = "flashcard"
    REVIEW_SESSION = "review_session"

def clamp_stage(stage: int) -> int:
    return min(max(stage, 0), MAX_STAGE)

def advance_stage(stage: int, was_correct: bool, policy: SrsPolicy = SrsPolicy.FLASHCARD) -> int:
    """Next stage after an outcome under the given policy"""
    stage = clamp_stage(stage)
    if was_correct:
        return min(stage + 1, MAX_STAGE)
    if policy == SrsPolicy.REVIEW_SESSION:
        return max(0, stage // 2)
    return max(stage - 1, 0)

def next_review_date(stage: int, today: date) -> str:
    """ISO date of the next review for an item sitting at `stage`"""
    return to_iso(today + timedelta(days=SRS_INTERVALS[clamp_stage(stage)]))

def schedule(
    entry: Optional[SrsEntry],
    was_correct: bool,
    policy: SrsPolicy,
    today: date
) -> SrsEntry:
    """Move an item along the ladder and stamp its next review date"""
    current_stage = entry.stage if entry else 0
    stage = advance_stage(current_stage, was_correct, policy)
    return SrsEntry(stage=stage, next_review_date=next_review_date(stage, today))

def due_item_ids(srs_map: Dict[str, SrsEntry], today: date) -> List[str]:
    """Ids whose next review is today or overdue, most overdue first"""
    today_iso = to_iso(today)
    due = [
        (entry.next_review_date, item_id)
        for item_id, entry in srs_map.items()
        if entry.next_review_date and entry.next_review_date <= today_iso
    ]
    return [item_id for _, item_id in sorted(due)]
