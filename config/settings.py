"""Application settings and configuration management."""
from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview_prep.db")
    CONFIG_PATH: str = Field(default="app_config.json")
    HISTORY_KEY: str = "interview_history"

    MAX_ROUND_TRIPS: int = 6
    COMPLETION_PHRASE: str = "interview is now complete"
    REPORT_DELAY_SECONDS: float = 3.0
    RUN_DELAY_SECONDS: float = 1.0
    TTS_DEFAULT: bool = True
    REPORT_SEED: Optional[int] = None

    RESUME_MIN_CHARS: int = 50
    RESUME_PROMPT_CHARS: int = 1000

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True)


settings = Settings()
