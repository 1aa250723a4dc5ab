"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for AuthGate happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. database_url -> DATABASE_URL). Type coercion and validation are
      built in. List fields (allowed_hosts, cors_origins) are read as JSON.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("authgate.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'authgate.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"  # noqa: S104 # nosec B104 -- container default
    port: int = 3030

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL
    # Empty string means "reuse database_url". Point this at a separate DB
    # to keep the high-churn sessions table away from the users table.
    session_store_url: str = ""

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    session_ttl_seconds: int = 24 * 60 * 60
    bcrypt_rounds: int = Field(default=14, ge=4, le=31)
    secure_cookies: bool = True
    session_purge_interval_seconds: int = 6 * 60 * 60

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    rate_limit_enabled: bool = True
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_lifetimes(self) -> "Settings":
        """Reject lifetimes that would make every session dead on arrival.

        A non-positive purge interval would spin the background purge loop;
        dev mode tolerates it by disabling the loop instead.
        """
        if self.session_ttl_seconds <= 0:
            raise ValueError("SESSION_TTL_SECONDS must be a positive number of seconds.")
        if self.session_purge_interval_seconds <= 0:
            if not self.debug:
                raise ValueError(
                    "SESSION_PURGE_INTERVAL_SECONDS must be positive in production mode. "
                    "To disable the purge loop in development, set DEBUG=true."
                )
            logger.warning("Session purge loop disabled (SESSION_PURGE_INTERVAL_SECONDS <= 0).")
        if not self.session_store_url:
            self.session_store_url = self.database_url
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    All modules should call get_settings() rather than constructing Settings()
    directly.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
