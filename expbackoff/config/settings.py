"""Settings configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackoffSettings(BaseSettings):
    """Backoff defaults loaded from environment variables."""

    initial_interval: int = 100  # milliseconds
    multiplier: float = 2.0
    max_interval: int = 30000  # 30 seconds
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="expbackoff_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

settings = BackoffSettings()
