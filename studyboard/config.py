from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Studyboard"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    
    # Reference timezone (fixed offset, no DST). Brasilia time by default.
    REFERENCE_UTC_OFFSET_HOURS: int = -3
    
    # Leaderboard
    LEADERBOARD_SIZE: int = 5
    
    class Config:
        env_prefix = "STUDYBOARD_"
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env

@lru_cache()
def get_settings() -> Settings:
    return Settings()
