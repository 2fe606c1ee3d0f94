"""Application settings and configuration."""

from typing import Literal

from pydantic import Field, model_validator  # type: ignore
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    ENV: Literal["dev", "staging", "prod", "test"] = Field(default="dev")
    PROJECT_NAME: str = Field(default="Exam Simulator API")

    # API
    API_PREFIX: str = Field(default="/v1")

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./examsim.db")

    # CORS - Accept string or list, will be normalized to list
    CORS_ORIGINS: str | list[str] = Field(default="http://localhost:3000")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # Localization
    DEFAULT_LOCALE: str = Field(default="es")
    SUPPORTED_LOCALES: list[str] = Field(default=["es", "en"])

    # Exam defaults
    DEFAULT_QUESTION_COUNT: int = Field(default=50)
    MAX_QUESTION_COUNT: int = Field(default=200)
    DEFAULT_TIME_LIMIT_MINUTES: int = Field(default=100)
    # Keys are Domain values; order matters for remainder handling
    DEFAULT_DOMAIN_PERCENTAGES: dict[str, int] = Field(
        default={
            "IDENTITY_GOVERNANCE": 23,
            "STORAGE": 18,
            "COMPUTE": 23,
            "NETWORKING": 18,
            "MONITOR_MAINTAIN": 18,
        }
    )

    # History
    HISTORY_DEFAULT_LIMIT: int = Field(default=20)

    @model_validator(mode="before")
    @classmethod
    def parse_cors_origins(cls, data):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(data, dict) and "CORS_ORIGINS" in data:
            cors_origins = data["CORS_ORIGINS"]
            if isinstance(cors_origins, str):
                data["CORS_ORIGINS"] = [
                    origin.strip() for origin in cors_origins.split(",") if origin.strip()
                ]
        return data

    def __init__(self, **kwargs):
        """Validate settings on initialization."""
        super().__init__(**kwargs)
        # Ensure CORS_ORIGINS is a list after initialization
        if isinstance(self.CORS_ORIGINS, str):
            object.__setattr__(
                self,
                "CORS_ORIGINS",
                [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()],
            )
        if self.DEFAULT_LOCALE not in self.SUPPORTED_LOCALES:
            raise ValueError(
                f"DEFAULT_LOCALE {self.DEFAULT_LOCALE!r} must be one of {self.SUPPORTED_LOCALES}"
            )
        # Fail fast in production if critical vars are missing
        if self.ENV == "prod" and self.DATABASE_URL.startswith("sqlite"):
            raise ValueError("DATABASE_URL must point at a server database in production")


# Global settings instance
settings = Settings()
