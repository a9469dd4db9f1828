# habitflow/core/config.py
import secrets
from typing import List, Optional, Union, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment settings
    ENVIRONMENT: Literal["development", "testing", "production"] = "development"

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "HabitFlow API"

    # Identity provider settings (tokens are issued externally and verified here)
    SECRET_KEY: str = secrets.token_urlsafe(32)
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 8  # 8 days

    # CORS settings
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://localhost:3000",
    ]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None  # Path to log file if file logging is enabled

    # Database settings
    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./habitflow.db"
    STORE_READ_RETRIES: int = 1

    # Gamification settings
    LEVEL_BASE_POINTS: int = 100
    POINTS_PER_COMPLETION: int = 10
    EXPERIENCE_PER_COMPLETION: int = 10
    HABIT_CREATION_POINTS: int = 5

    # Cache settings
    CACHE_TTL_SECONDS: int = 5 * 60
    CACHE_MAX_SIZE: int = 100

    # Shop settings
    PURCHASE_EXPIRY_CHECK_INTERVAL: int = 3600  # seconds

    # Validation limits
    HABIT_TITLE_MAX_LENGTH: int = 50
    HABIT_DESCRIPTION_MAX_LENGTH: int = 200
    MAX_MESSAGE_LENGTH: int = 2000
    CONTACT_MESSAGE_MIN_LENGTH: int = 10

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )


# Create settings instance
settings = Settings()
