# ============================================================================
# XP Awards
# ============================================================================
from typing import Callable, Dict, List, Optional
import logging

from studyboard.schemas.events import XpAward
from studyboard.schemas.progress import StudentProgress

logger = logging.getLogger(__name__)

# Sink the mutators report XP through: add_xp(amount, message=None)
AddXp = Callable[..., None]

# XP values for different actions
XP_VALUES = {
    "correct_answer": 10,
    "correct_review_answer": 15,
    "topic_complete": 50,
    "review_session_complete": 75,
    "mini_game_complete": 25,
    "daily_challenge_complete": 50,
    "catch_up_challenge_complete": 25,
    "game_error_penalty": 5,
}

# Bonus granted when the daily-challenge streak lands on these day counts
STREAK_BONUS: Dict[int, int] = {
    3: 50,
    7: 100,
    15: 250,
    30: 500,
}

class XpLedger:
    """Collects XP grants reported during one progress operation"""
    
    def __init__(self):
        self.awards: List[XpAward] = []
    
    def __call__(self, amount: int, message: Optional[str] = None) -> None:
        if amount == 0:
            return
        self.awards.append(XpAward(amount=amount, message=message))
    
    @property
    def total(self) -> int:
        return sum(award.amount for award in self.awards)

def apply_xp(progress: StudentProgress, delta: int) -> StudentProgress:
    """Commit an XP delta to the record; stored XP never goes below zero"""
    if delta == 0:
        return progress
    
    new_xp = max(0, progress.xp + delta)
    if progress.xp + delta < 0:
        logger.debug(f"XP for {progress.student_id} clamped at 0 (delta {delta})")
    return progress.model_copy(update={"xp": new_xp})
