"""Application configuration using Pydantic Settings."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "caseload-planner"
    app_version: str = "0.1.0"
    debug: bool = False

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"

    # Identity (bearer JWT decoding)
    jwt_secret: str = "dev-secret"
    jwt_algorithm: str = "HS256"

    # Persistence backend: "local" or "dynamodb"
    storage_backend: str = "local"

    # AWS settings
    aws_region: str = "us-east-1"
    curriculum_table_name: str = "CurriculumTracking"
    documents_bucket_name: str = "caseload-planner-documents"

    # AWS credentials (optional, uses default credential chain if not set)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_session_token: Optional[str] = None

    # Lesson generation API; unset means lessons are built locally
    lesson_api_base_url: Optional[str] = None
    lesson_api_timeout: float = 115.0
    lesson_api_max_retries: int = 2
    lesson_api_retry_base_delay: float = 1.0
    lesson_batch_mode: bool = True
    default_lesson_duration: int = 30

    # Saved-lesson reload debounce, in seconds
    fetch_debounce_delay: float = 0.5

    # Documents
    signed_url_expiry: int = 3600
    max_document_size: int = 10 * 1024 * 1024


# Create a singleton instance
settings = Settings()
