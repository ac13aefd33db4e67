"""
Configuration settings for the article generator
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Provider selection
    ai_provider: Literal["openai", "perplexity"] = Field(default="openai")

    # OpenAI (completion variant, moderation)
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_moderation_model: str = "omni-moderation-latest"

    # Perplexity (retrieval variant)
    perplexity_api_key: Optional[str] = None
    perplexity_model: str = "llama-3.1-sonar-large-128k-online"
    perplexity_base_url: str = "https://api.perplexity.ai"

    # Openverse image search
    openverse_client_id: Optional[str] = None
    openverse_client_secret: Optional[str] = None
    openverse_base_url: str = "https://api.openverse.org/v1"

    # Unset means no client-side timeout
    request_timeout_seconds: Optional[float] = Field(default=None, gt=0)

    # Article length
    default_min_word_count: int = Field(default=500, gt=0)
    default_max_word_count: int = Field(default=2000, gt=0)

    # Author identity for command-line runs
    author_name: Optional[str] = None
    author_email: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @property
    def has_openverse_credentials(self) -> bool:
        return bool(self.openverse_client_id and self.openverse_client_secret)


def get_settings() -> Settings:
    """Get application settings"""
    return Settings()
