from pydantic_settings import BaseSettings
from typing import List
import os

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///scheduling.db"
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:8081", "http://127.0.0.1:8081"]
    LOG_LEVEL: str = "INFO"

    # Deadlines within this many days of today are DUE_SOON
    DUE_SOON_DAYS: int = 3
    # Watch slots per printed page
    SLOTS_PER_PAGE: int = 30
    # Used for "today" when a request does not name the vessel's timezone
    DEFAULT_VESSEL_TIMEZONE: str = "UTC"

    class Config:
        env_file = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), ".env")

settings = Settings()
