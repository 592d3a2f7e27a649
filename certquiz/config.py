# FILE: certquiz/config.py
"""
Configuration management for the certification quiz backend
Loads from environment variables with validation
"""
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )

    # Backend server
    backend_host: str = Field(default="0.0.0.0", alias="BACKEND_HOST")
    backend_port: int = Field(default=8000, alias="BACKEND_PORT")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Data paths
    data_dir: str = Field(default="./data", alias="DATA_DIR")
    questions_dir: str = Field(default="./data/questions", alias="QUESTIONS_DIR")
    attempts_dir: str = Field(default="./data/attempts", alias="ATTEMPTS_DIR")
    logs_dir: str = Field(default="./logs", alias="LOGS_DIR")

    # Grading
    grading_sink: str = Field(
        default="log",
        alias="GRADING_SINK",
        description="none, log (append-only attempt log) or http (remote grader)"
    )
    grading_url: Optional[str] = Field(default=None, alias="GRADING_URL")
    grading_timeout: float = Field(default=5.0, alias="GRADING_TIMEOUT")
    grading_best_effort: bool = Field(
        default=True,
        alias="GRADING_BEST_EFFORT",
        description="Fall back to the local result when the grading sink fails"
    )
    fill_blank_substring_match: bool = Field(
        default=True,
        alias="FILL_BLANK_SUBSTRING_MATCH",
        description="Accept fill-in-the-blank answers that contain the expected phrase"
    )
    calibration_use_recognition: bool = Field(
        default=False,
        alias="CALIBRATION_USE_RECOGNITION",
        description="Weight the calibration score by recognition method (matrix scoring)"
    )

    # Sessions
    review_due_only: bool = Field(
        default=False,
        alias="REVIEW_DUE_ONLY",
        description="Only serve questions due for spaced-repetition review"
    )
    max_sessions: int = Field(default=1000, alias="MAX_SESSIONS")

    # Telemetry
    telemetry_enabled: bool = Field(default=True, alias="TELEMETRY_ENABLED")
    telemetry_retention_days: int = Field(default=30, alias="TELEMETRY_RETENTION_DAYS")

    # CORS
    cors_origins: List[str] = Field(default=["http://localhost:3000"], alias="CORS_ORIGINS")

    # Validators
    @field_validator("grading_sink")
    @classmethod
    def validate_grading_sink(cls, v):
        if v not in ["none", "log", "http"]:
            raise ValueError("grading_sink must be 'none', 'log', or 'http'")
        return v

    @field_validator("grading_timeout")
    @classmethod
    def validate_grading_timeout(cls, v):
        if v <= 0:
            raise ValueError("grading_timeout must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        if v not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError("log_level must be a standard logging level name")
        return v


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create singleton settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings():
    """Reload settings (useful for testing)"""
    global _settings
    _settings = None
    return get_settings()
