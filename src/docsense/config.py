"""Configuration management using pydantic-settings."""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Generative model endpoint
    google_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("google_generative_ai_api_key", "google_api_key"),
        description="API key for the generative model endpoint",
    )
    model_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        description="OpenAI-compatible base URL of the model endpoint",
    )

    # Document extraction
    primary_model: str = Field(
        default="gemini-2.0-flash",
        description="Model used for the first extraction pass",
    )
    fallback_model: str = Field(
        default="gemini-1.5-flash",
        description="Model used for the chain-of-thought fallback pass",
    )
    extraction_timeout_seconds: float = Field(default=60.0, gt=0)
    extraction_retries: int = Field(default=2, ge=0, le=10)
    fallback_retries: int = Field(default=1, ge=0, le=10)
    retry_base_delay_ms: int = Field(
        default=2000,
        ge=0,
        description="Base delay for linear retry backoff",
    )
    extraction_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    quality_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum pass 1 quality score that skips the fallback pass",
    )

    # Transaction enrichment
    enrichment_model: str = Field(default="gemini-2.5-flash-lite")
    enrichment_batch_size: int = Field(default=50, ge=1, le=50)
    enrichment_retries: int = Field(default=1, ge=0, le=10)
    enrichment_timeout_seconds: float = Field(default=60.0, gt=0)
    enrichment_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    merchant_confidence_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    category_confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)

    # File Processing
    max_file_size_mb: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Maximum attachment size in MB",
    )

    log_level: str = Field(default="INFO")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        """Accept lower-case level names from the environment."""
        return str(value).strip().upper() or "INFO"

    @property
    def is_model_configured(self) -> bool:
        """Whether a model credential is available."""
        return bool(self.google_api_key.strip())

    @property
    def max_file_size_bytes(self) -> int:
        """Maximum file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
