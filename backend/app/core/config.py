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
    PROJECT_NAME: str = Field(default="LearnSmart Learning Engine")

    # API
    API_PREFIX: str = Field(default="/v1")

    # Database (local key-value state store)
    DATABASE_URL: str = Field(default="sqlite:///./learnsmart.db")

    # CORS - Accept string or list, will be normalized to list
    CORS_ORIGINS: str | list[str] = Field(default="http://localhost:8081,http://localhost:19006")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # Curriculum
    CURRICULUM_PATH: str | None = Field(default=None)  # None = bundled curriculum.json

    # Local user (the mobile client is single-user)
    DEFAULT_USER_ID: str = Field(default="local-user")
    DEFAULT_USERNAME: str = Field(default="Learner")

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
        # Fail fast in production if critical vars are missing
        if self.ENV == "prod":
            if not self.DATABASE_URL or self.DATABASE_URL.startswith("sqlite:///./"):
                raise ValueError("DATABASE_URL must be set in production")


# Global settings instance
settings = Settings()
