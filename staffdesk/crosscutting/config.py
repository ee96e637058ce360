"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the dashboard's current behavior

Collaborators:
  - container.py: reads settings to wire storage, HTTP and session manager
  - crosscutting/logger.py: reads log_level / log_json
  - infrastructure/services/retry.py: reads retry attempts/delays

Constraints:
  - No business logic: pure configuration

Notes:
  - Singleton via lru_cache
  - Session timings live here so tests can shrink them
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/test/production)
        api_base_url: Base URL of the REST backend (auth + CRUD)
        http_timeout_seconds: Timeout per HTTP request (default: 10)
        local_database_url: SQLAlchemy URL of the durable local store
        seed_default_records: Seed the employee store on first run
        session_default_ttl_seconds: TTL used when the backend omits expiresIn
        session_warning_lead_seconds: Warn this long before expiry (default: 300)
        session_expiring_soon_seconds: Status-badge threshold (default: 600)
        local_page_size: Page size for the local employee table (default: 6)
        remote_page_size: Page size for remote listings (default: 10)
        retry_max_attempts: Attempts for idempotent GETs (default: 3)
        retry_base_delay_seconds: Initial backoff (default: 0.5)
        retry_max_delay_seconds: Backoff ceiling (default: 5)
        log_level: Logging level (default: INFO)
        log_json: Emit JSON logs (default: True)
    """

    # Environment
    app_env: str = "development"

    # REST backend
    api_base_url: str = "http://localhost:5000/api"
    http_timeout_seconds: float = 10.0

    # Durable local storage
    local_database_url: str = "sqlite:///data/staffdesk.db"
    seed_default_records: bool = True

    # Session lifecycle
    session_default_ttl_seconds: int = 3600
    session_warning_lead_seconds: int = 300
    session_expiring_soon_seconds: int = 600

    # Pagination
    local_page_size: int = 6
    remote_page_size: int = 10

    # Retry/Resilience
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 0.5
    retry_max_delay_seconds: float = 5.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("session_default_ttl_seconds")
    @classmethod
    def ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("session_default_ttl_seconds must be greater than 0")
        return v

    @field_validator("session_warning_lead_seconds", "session_expiring_soon_seconds")
    @classmethod
    def thresholds_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("session thresholds must be >= 0")
        return v

    @field_validator("local_page_size", "remote_page_size")
    @classmethod
    def page_size_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("page sizes must be greater than 0")
        return v

    @field_validator("api_base_url")
    @classmethod
    def api_base_url_not_empty(cls, v: str) -> str:
        url = (v or "").strip().rstrip("/")
        if not url:
            raise ValueError("api_base_url must not be empty")
        return url

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        if not self.api_base_url.lower().startswith("https://"):
            raise ValueError("API_BASE_URL must use https in production")

        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
