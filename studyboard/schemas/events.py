# ============================================================================
# Gamification Events
# ============================================================================
from dataclasses import dataclass, field
from typing import List, Optional

from studyboard.schemas.progress import StudentProgress

@dataclass(frozen=True)
class XpAward:
    """One XP grant, as shown in a toast"""
    amount: int
    message: Optional[str] = None

@dataclass(frozen=True)
class AwardedBadge:
    id: str
    name: str
    description: str
    icon: str

@dataclass(frozen=True)
class LevelUp:
    new_level: int
    title: str

@dataclass
class ProgressUpdate:
    """Result of one orchestrated progress operation"""
    progress: StudentProgress
    xp_awards: List[XpAward] = field(default_factory=list)
    new_badges: List[AwardedBadge] = field(default_factory=list)
    new_medals: List[AwardedBadge] = field(default_factory=list)
    level_up: Optional[LevelUp] = None

    @property
    def xp_gained(self) -> int:
        return sum(award.amount for award in self.xp_awards)
