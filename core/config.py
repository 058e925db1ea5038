"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for authapi happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. jwt_secret -> JWT_SECRET). Type coercion and validation are built in.

  @model_validator(mode="after"): Cross-field validation once every field is
      resolved. Missing required settings are collected and reported together
      so an operator fixes the environment in one pass, not one restart per
      variable.

Startup policy:
  The relational store (PG_* or DATABASE_URL), MONGO_URI and JWT_SECRET are
  required. Settings() raises ValueError when any is absent; the entry point
  in asgi.py turns that into a non-zero exit before the server binds.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or users/.
"""

import logging
import re
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

logger = logging.getLogger("authapi.config")

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str | int) -> int:
    """Convert a duration such as "7d", "12h", "30m", "45s" or "3600" to seconds.

    Raises ValueError for anything else, including zero.
    """
    if isinstance(value, int):
        seconds = value
    else:
        match = _DURATION_RE.match(value)
        if match is None:
            raise ValueError(f"Invalid duration {value!r}; expected <number>[s|m|h|d].")
        seconds = int(match.group(1)) * _UNIT_SECONDS[match.group(2)]
    if seconds <= 0:
        raise ValueError("Duration must be positive.")
    return seconds


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `jwt_secret` reads from JWT_SECRET, `pg_host` reads from PG_HOST.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    host: str = "0.0.0.0"  # noqa: S104 # nosec B104 -- container bind address
    port: int = 4001
    debug: bool = False

    # ------------------------------------------------------------------
    # Relational store
    # ------------------------------------------------------------------

    pg_host: str = ""
    pg_port: int = 5432
    pg_user: str = ""
    pg_password: str = ""
    pg_database: str = ""
    # Full SQLAlchemy URL. When set, the PG_* fields are ignored. Tests and
    # local development use this to point at SQLite.
    database_url: str = ""

    # ------------------------------------------------------------------
    # Document store -- validated at startup, never connected
    # ------------------------------------------------------------------

    mongo_uri: str = ""

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    jwt_secret: str = ""
    jwt_expires_in: str = "7d"
    bcrypt_rounds: int = 10

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("jwt_expires_in")
    @classmethod
    def validate_expiry(cls, value: str) -> str:
        parse_duration(value)
        return value

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_rounds(cls, value: int) -> int:
        # bcrypt.gensalt() accepts 4..31
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")
        return value

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Fail fast when a required setting is missing.

        The relational store needs either DATABASE_URL or the complete set of
        PG_HOST / PG_USER / PG_PASSWORD / PG_DATABASE. JWT_SECRET must be at
        least 32 characters -- HS256 signing relies on key entropy.
        """
        missing: list[str] = []
        if not self.database_url:
            for name in ("pg_host", "pg_user", "pg_password", "pg_database"):
                if not getattr(self, name):
                    missing.append(name.upper())
        if not self.mongo_uri:
            missing.append("MONGO_URI")
        if not self.jwt_secret:
            missing.append("JWT_SECRET")
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")
        if len(self.jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters.")
        return self

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def sqlalchemy_url(self) -> str:
        """Return the relational store URL, building it from PG_* when needed.

        URL.create() escapes credentials, so passwords containing '@' or '/'
        do not corrupt the connection string.
        """
        if self.database_url:
            return self.database_url
        return URL.create(
            "postgresql",
            username=self.pg_user,
            password=self.pg_password,
            host=self.pg_host,
            port=self.pg_port,
            database=self.pg_database,
        ).render_as_string(hide_password=False)

    @property
    def token_expire_seconds(self) -> int:
        return parse_duration(self.jwt_expires_in)


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
