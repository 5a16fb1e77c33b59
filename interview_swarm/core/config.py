"""
Interview Swarm - Configuration Management.

Uses pydantic-settings for environment variable loading with validation.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Agent Platform (A2A)
    # -------------------------------------------------------------------------
    AGENT_BACKEND: Literal["a2a", "gemini"] = "a2a"
    ARCHESTRA_BASE_URL: str = ""
    ARCHESTRA_API_KEY: str = ""

    INTERVIEWER_AGENT_ID: str = ""
    EVALUATOR_AGENT_ID: str = ""
    CODE_REVIEWER_AGENT_ID: str = ""
    ANALYST_AGENT_ID: str = ""

    # -------------------------------------------------------------------------
    # Gemini Backend
    # -------------------------------------------------------------------------
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash-lite"

    # -------------------------------------------------------------------------
    # Interview Configuration
    # -------------------------------------------------------------------------
    AGENT_TIMEOUT_SECONDS: float = 45.0
    ORCHESTRATION_MODE: Literal["per_step", "session_delegation"] = "per_step"
    TOTAL_VIDEO_QUESTIONS: int = 3
    DEFAULT_ROLE: str = "Senior Frontend Engineer"
    DEFAULT_COMPANY: str = "Nebula Systems"
    SESSION_TIMEOUT_HOURS: int = 0  # 0 keeps sessions for the process lifetime

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    CORS_ORIGINS: list[str] = ["*"]
    RATE_LIMIT_ENABLED: bool = True
    INTERVIEW_RATE_LIMIT: str = "60/hour"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    def agent_ids(self) -> dict[str, str]:
        """Map each agent role to the id the configured backend addresses it by."""
        if self.AGENT_BACKEND == "gemini":
            # Gemini personas are keyed by role name
            return {
                "interviewer": "interviewer",
                "evaluator": "evaluator",
                "code_reviewer": "code_reviewer",
                "analyst": "analyst",
            }
        return {
            "interviewer": self.INTERVIEWER_AGENT_ID,
            "evaluator": self.EVALUATOR_AGENT_ID,
            "code_reviewer": self.CODE_REVIEWER_AGENT_ID,
            "analyst": self.ANALYST_AGENT_ID,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging() -> None:
    """Configure application logging based on settings."""
    settings = get_settings()

    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format=log_format,
        datefmt=date_format,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
