"""
Engine Settings and Configuration Management

Uses pydantic-settings for type-safe configuration from environment variables.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables"""

    # Application
    app_name: str = "Energy AI Engine"
    app_version: str = "1.0.0"
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Storage
    database_url: Optional[str] = Field(default=None, validation_alias="DATABASE_URL")

    # Dataset synthesis
    default_dataset_size: int = Field(default=5000, ge=1, validation_alias="DEFAULT_DATASET_SIZE")
    dataset_history_years: int = Field(default=2, ge=1, validation_alias="DATASET_HISTORY_YEARS")
    random_seed: Optional[int] = Field(default=None, validation_alias="RANDOM_SEED")

    # Analysis
    pattern_sample_limit: int = Field(default=1000, ge=1, validation_alias="PATTERN_SAMPLE_LIMIT")
    dashboard_recent_predictions: int = Field(
        default=10, ge=0, validation_alias="DASHBOARD_RECENT_PREDICTIONS"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        protected_namespaces=("settings_",),
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is valid"""
        allowed = ["development", "staging", "production", "test"]
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name"""
        level = v.upper()
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if level not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return level

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.environment == "development"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
