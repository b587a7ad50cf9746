"""Application settings and configuration management."""

from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings


DEFAULT_FIELD_WEIGHTS: Dict[str, float] = {
    "title": 1.0,
    "categories": 0.7,
    "tags": 0.7,
    "author_name": 0.5,
    "excerpt": 0.3,
    "body": 0.2,
}


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    app_name: str = Field(default="Knowledge Search")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    workers: int = Field(default=1)

    # Search Configuration
    fuzzy_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    result_cap: int = Field(default=8, ge=1)
    max_query_length: int = Field(default=100)
    field_weights: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_FIELD_WEIGHTS)
    )
    popular_tags_limit: int = Field(default=10)
    popular_categories_limit: int = Field(default=8)
    sample_documents_path: Optional[str] = Field(default=None)

    # Recent query history
    history_cap: int = Field(default=4, ge=1)
    history_retention_days: int = Field(default=30, ge=1)
    history_key_prefix: str = Field(default="recent_searches_")

    # Input pipeline
    debounce_ms: int = Field(default=300, ge=0)

    # Sessions
    max_sessions: int = Field(default=1000, ge=1)
    session_idle_ttl_seconds: float = Field(default=1800.0, gt=0)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    # CORS
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173", "http://localhost:8000"]
    )

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("field_weights")
    @classmethod
    def validate_field_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Every weight must lie in (0, 1]."""
        if not v:
            raise ValueError("At least one weighted field is required")
        for field, weight in v.items():
            if not 0.0 < weight <= 1.0:
                raise ValueError(f"Weight for '{field}' must be in (0, 1], got {weight}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
