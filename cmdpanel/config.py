# cmdpanel/config.py
"""Application configuration using pydantic-settings.

Provides a centralized Settings class for all environment variables.
These settings describe the panel itself (where the host lives, timeouts,
buffer sizes); the bot configuration edited by the user is held by
ConfigStore and owned by the host.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Panel settings loaded from environment variables.

    All settings are loaded from .env file and environment variables.
    Environment variables take precedence over .env file values.
    """

    # Host process boundary
    host_url: str = "http://127.0.0.1:8765"
    host_request_timeout: float | None = 30.0  # Seconds, None waits forever
    transition_timeout: float | None = 30.0  # Bound for start/stop replies

    # Log stream
    log_buffer_limit: int = 1000
    log_queue_size: int = 1000
    scroll_delay_ms: int = 10

    # Observability
    logfire_token: str = ""

    # API Security
    api_auth_key: str = ""  # Required for API access (X-API-Key header)
    api_rate_limit: int = 120  # Requests per minute

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
        case_sensitive=False,  # Allow case-insensitive env var names
    )

    @property
    def scroll_delay(self) -> float:
        """Scroll coalescing window in seconds."""
        return self.scroll_delay_ms / 1000.0


# Singleton instance - import this in your code
settings = Settings()
