"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Tempo daily advice server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default: the server holds profile and health data and has
    # no auth layer. Opt into `0.0.0.0` explicitly for remote access.
    tempo_host: str = "127.0.0.1"
    tempo_port: int = 8010
    tempo_log_level: str = "info"
    tempo_allow_insecure_bind: bool = False

    # Generation provider
    llm_provider: Literal["anthropic", "openai", "mock"] = "anthropic"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"

    # Provider call policy
    provider_timeout_seconds: float = 15.0
    provider_max_retries: int = 3
    provider_backoff_base_seconds: float = 0.5
    provider_backoff_max_seconds: float = 8.0
    schema_max_retries: int = 2

    # Advice
    advice_language: Literal["ja", "en"] = "ja"
    lookback_days: int = 14
    forbid_emoji: bool = True
    daily_try_title_max_length: int = 15

    # Storage
    db_path: str = "~/.tempo/advice.db"

    # Encryption
    encryption_key: str = ""
    # Comma-separated retired keys, still accepted for decryption
    previous_encryption_keys: str = ""

    @property
    def previous_encryption_key_list(self) -> list[str]:
        return [k.strip() for k in self.previous_encryption_keys.split(",") if k.strip()]


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
