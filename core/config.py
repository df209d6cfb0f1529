"""
core/config.py -- Settings for the ISRS auth service.

Every setting comes from the environment or a .env file and is read here
once; get_settings() hands out the same cached instance for the life of the
process. Nothing else in the tree touches os.environ.

The token signing secret is the one setting with a policy attached:

  DEBUG=true   an empty SECRET_KEY is replaced by a random one. Sessions
               are lost on every restart.
  otherwise    an empty SECRET_KEY stops the process at startup.

A configured key must be at least 32 characters. HS256 with a shorter key
can be brute-forced offline from any captured token.

core/ imports nothing from api/, auth/, or audit/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("isrs.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'isrs.sqlite'}"


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
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Fixed 2-hour session window. Tokens are not refreshed or rotated.
    token_expire_seconds: int = Field(default=7200, gt=0)
    # bcrypt cost factor: 10 rounds is tens of milliseconds on current hardware.
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Fill in or refuse an empty SECRET_KEY, then check its length."""
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("SECRET_KEY not set; generated a throwaway key for this DEBUG run")
            else:
                raise ValueError("SECRET_KEY is required unless DEBUG=true.")
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
