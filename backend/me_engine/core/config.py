from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = Field(default="dev")  # dev|prod
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    # Files
    EXPORT_DIR: str = Field(default="/app/data/exports")
    DAILY_LOG_SHEET: str = Field(default="Daily Logs")

    # Business defaults
    PROJECT_TOTAL_BUDGET: float = Field(default=1_000_000.0)
    QUALITY_SCORE_DEFAULT: float = Field(default=90.0)
    MISSED_MILESTONES_DEFAULT: int = Field(default=0)
    WEEK_RANGE_MODE: Literal["approx", "iso"] = Field(default="approx")


settings = Settings()
