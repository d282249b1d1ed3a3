# ============================================================================
# Logging Setup
# ============================================================================
import logging

from studyboard.config import get_settings

def configure_logging(level: str = None) -> None:
    """Configure root logging from settings"""
    settings = get_settings()
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if settings.DEBUG:
        logging.getLogger("studyboard").setLevel(logging.DEBUG)
