# ============================================================================
# Level Engine
# ============================================================================
from typing import Dict, Optional
import logging

from studyboard.schemas.events import LevelUp

logger = logging.getLogger(__name__)

# XP needed per level; levels have no upper bound
LEVEL_XP_REQUIREMENT = 500

LEVEL_TITLES = [
    "Novato",
    "Iniciante",
    "Aspirante",
    "Cadete",
    "Estudante Dedicado",
    "Concurseiro Focado",
    "Veterano dos Estudos",
    "Mestre do Tópico",
    "Sábio da Disciplina",
    "Lenda da Aprovação",
]

def calculate_level(xp: int) -> int:
    """Calculate level based on total XP"""
    return max(0, xp) // LEVEL_XP_REQUIREMENT + 1

def get_level_title(level: int) -> str:
    """Title for a level, clamped to the last title"""
    index = min(max(level, 1) - 1, len(LEVEL_TITLES) - 1)
    return LEVEL_TITLES[index]

def get_level_info(xp: int) -> Dict:
    """Get detailed level information"""
    level = calculate_level(xp)
    current_threshold = (level - 1) * LEVEL_XP_REQUIREMENT
    xp_in_level = max(0, xp) - current_threshold
    
    return {
        "level": level,
        "title": get_level_title(level),
        "total_xp": xp,
        "xp_in_level": xp_in_level,
        "xp_for_next_level": LEVEL_XP_REQUIREMENT,
        "progress_percent": round(xp_in_level / LEVEL_XP_REQUIREMENT * 100, 1),
        "is_max_title": level >= len(LEVEL_TITLES)
    }

def detect_level_up(old_xp: int, new_xp: int) -> Optional[LevelUp]:
    """Level-up event when the XP change crossed a level boundary"""
    old_level = calculate_level(old_xp)
    new_level = calculate_level(new_xp)
    if new_level <= old_level:
        return None
    
    logger.info(f"Level up: {old_level} -> {new_level}")
    return LevelUp(new_level=new_level, title=get_level_title(new_level))
