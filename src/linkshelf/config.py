"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with the LINKSHELF_ prefix.
No config files, just env vars (12-factor app style).
"""

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via LINKSHELF_* env vars."""

    # Database (SQLite has limited write concurrency, so the pool stays small)
    database_url: str = "sqlite+aiosqlite:///./linkshelf.db"
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_timeout: float = 5.0  # seconds to wait for a free connection
    db_busy_timeout: float = 5.0  # seconds SQLite waits on a locked database

    # Sessions
    session_cookie_name: str = "session_token"
    session_cookie_secure: bool = False
    session_ttl_seconds: Optional[int] = None  # None = sessions never expire
    session_sweep_interval_seconds: float = 60.0

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 30022

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    model_config = {"env_prefix": "LINKSHELF_"}

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Session cookies must be Secure outside development."""
        if self.environment != "development" and not self.session_cookie_secure:
            raise ValueError(
                "LINKSHELF_SESSION_COOKIE_SECURE must be enabled in "
                "non-development environments."
            )
        if self.session_ttl_seconds is not None and self.session_ttl_seconds <= 0:
            raise ValueError("LINKSHELF_SESSION_TTL_SECONDS must be positive")
        return self


# Singleton, import this everywhere
settings = Settings()
