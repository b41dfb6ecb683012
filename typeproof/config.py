"""TypeProof configuration module."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="TYPEPROOF_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Server
    app_name: str = "TypeProof"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Drafts
    drafts_path: str = "./typeproof_drafts.json"

    # Telemetry
    pause_threshold_ms: int = 2000
    version_debounce_ms: int = 2000

    # Sessions
    session_timeout_minutes: int = 30

    # Certificates
    certificate_title: str = "Verified Document"
    editor_version: str = "1.0"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
