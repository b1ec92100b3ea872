"""
Application configuration settings
"""
import os
from dataclasses import dataclass
from pydantic_settings import BaseSettings
from typing import List, Optional


@dataclass(frozen=True)
class GoalDefaults:
    """Goal values used when a user has not set their own"""
    daily_goal_minutes: int = 30
    streak_goal: int = 7
    books_per_year_goal: int = 12


@dataclass(frozen=True)
class TrackingRules:
    """Product-tuned thresholds for progress reconciliation"""
    auto_finish_threshold: float = 99.8
    min_session_seconds: int = 1
    heartbeat_interval_seconds: int = 30
    heartbeat_min_report_seconds: int = 10

    def reportable_seconds(self, active_seconds: float, exiting: bool = False) -> Optional[int]:
        """
        Reference client rule for the reading heartbeat.

        The server never calls this; readers implement it from the numbers
        published by `GET /read/policy`. Given the active time accumulated
        since the last report, returns the duration to send, or None while
        the interval is still too short to be worth a call. On exit anything
        is flushed, rounded up to the minimum session length.
        """
        if active_seconds < self.heartbeat_min_report_seconds and not exiting:
            return None
        return max(self.min_session_seconds, int(round(active_seconds)))


class Settings(BaseSettings):
    """Application settings"""

    # App Configuration
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HOST: str = "0.0.0.0"
    PORT: int = int(os.getenv("PORT", "8000"))

    # Firebase Configuration (optional for local development)
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_PRIVATE_KEY_ID: Optional[str] = None
    FIREBASE_PRIVATE_KEY: Optional[str] = None
    FIREBASE_CLIENT_EMAIL: Optional[str] = None
    FIREBASE_CLIENT_ID: Optional[str] = None
    FIREBASE_AUTH_URI: str = "https://accounts.google.com/o/oauth2/auth"
    FIREBASE_TOKEN_URI: str = "https://oauth2.googleapis.com/token"

    # Day/month/year buckets are computed in this timezone
    TIMEZONE: str = "UTC"

    # HTTP
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    RATE_LIMIT_CALLS: int = 100
    RATE_LIMIT_PERIOD: int = 60

    # Storage
    MAX_WRITE_ATTEMPTS: int = 5
    SESSION_LIST_LIMIT: int = 365

    # Reading tracking
    AUTO_FINISH_THRESHOLD: float = 99.8
    MIN_SESSION_SECONDS: int = 1
    HEARTBEAT_INTERVAL_SECONDS: int = 30
    HEARTBEAT_MIN_REPORT_SECONDS: int = 10

    # Goals
    DEFAULT_DAILY_GOAL_MINUTES: int = 30
    DEFAULT_STREAK_GOAL: int = 7
    DEFAULT_BOOKS_PER_YEAR_GOAL: int = 12

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = 'ignore'

    @property
    def goal_defaults(self) -> GoalDefaults:
        return GoalDefaults(
            daily_goal_minutes=self.DEFAULT_DAILY_GOAL_MINUTES,
            streak_goal=self.DEFAULT_STREAK_GOAL,
            books_per_year_goal=self.DEFAULT_BOOKS_PER_YEAR_GOAL,
        )

    @property
    def tracking_rules(self) -> TrackingRules:
        return TrackingRules(
            auto_finish_threshold=self.AUTO_FINISH_THRESHOLD,
            min_session_seconds=self.MIN_SESSION_SECONDS,
            heartbeat_interval_seconds=self.HEARTBEAT_INTERVAL_SECONDS,
            heartbeat_min_report_seconds=self.HEARTBEAT_MIN_REPORT_SECONDS,
        )


# Global settings instance
settings = Settings()
