# src/code_companion/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict

from code_companion.models.severity import ReviewLevel


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    # GitHub
    github_api_url: str = "https://api.github.com"
    github_token: str
    github_webhook_secret: str

    # LLM Providers
    openai_api_key: str | None = None
    openai_model: str | None = None
    hf_token: str | None = None
    hf_model: str | None = None

    # Defaults
    default_provider: str = "openai"
    default_review_level: ReviewLevel = ReviewLevel.STANDARD
    reviewer_name: str = "AI Code Companion"
    report_dir: str | None = None
    max_concurrency: int = 4
    log_level: str = "INFO"
