"""Gatehouse settings.

Every value comes from the environment. A ``.env`` file fills in whatever
the process environment leaves unset; the first existing file wins:

- the path in ``GATEHOUSE_ENV_FILE`` (relative paths resolve against the
  project root)
- ``config/.env.dev`` for local development
- ``config/.env`` for deployments
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr, ValidationError, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gatehouse_auth.exceptions import ConfigurationError

_ROOT_MARKERS = ("config", ".git", "pyproject.toml")


def _project_root() -> Path:
    """Nearest ancestor of this file that looks like a checkout root."""
    here = Path(__file__).resolve()
    for candidate in here.parents:
        if any((candidate / marker).exists() for marker in _ROOT_MARKERS):
            return candidate
    return here.parents[2]


def get_config_dir() -> Path:
    return _project_root() / "config"


def _env_file_candidates() -> Iterator[Path]:
    override = os.environ.get("GATEHOUSE_ENV_FILE")
    if override:
        path = Path(override)
        yield path if path.is_absolute() else _project_root() / path

    config_dir = get_config_dir()
    yield config_dir / ".env.dev"
    yield config_dir / ".env"


def _resolve_env_file_path() -> Path | None:
    return next((path for path in _env_file_candidates() if path.is_file()), None)


class Settings(BaseSettings):
    """Gatehouse configuration.

    Field names map to upper-case environment variables, e.g.
    ``jwt_secret_key`` is read from ``JWT_SECRET_KEY``.
    """

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Required; tokens cannot be signed without it
    jwt_secret_key: SecretStr

    # Application
    app_name: str = "Gatehouse"
    debug: bool = False

    # Which identity table this deployment authenticates against
    auth_entity: str = "users"

    # JWT
    jwt_access_token_expire_minutes: int = 60
    jwt_refresh_token_expire_days: int = 7

    # Password hashing
    bcrypt_rounds: int = 12

    # Account lockout
    max_login_attempts: int = 5
    lock_duration_minutes: int = 15

    # One-time secrets
    password_reset_token_expire_minutes: int = 60
    email_verification_expire_hours: int = 24

    # Session maintenance
    session_inactive_retention_days: int = 30

    # Database (POSTGRES_ prefix)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: SecretStr | None = None
    postgres_db: str = "gatehouse"

    # Full SQLAlchemy URL; overrides the postgres_* components when set
    database_dsn: str | None = None

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    @field_validator("auth_entity", mode="before")
    @classmethod
    def _normalize_auth_entity(cls, v: object) -> str:
        return str(v).strip().lower() if v else "users"

    @field_validator("jwt_secret_key")
    @classmethod
    def _require_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            msg = "JWT_SECRET_KEY cannot be empty"
            raise ValueError(msg)
        return v

    @field_validator("max_login_attempts", "lock_duration_minutes", "bcrypt_rounds")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            msg = "must be a positive integer"
            raise ValueError(msg)
        return v

    # Computed properties
    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Construct the database URL from components."""
        if self.database_dsn:
            return self.database_dsn
        password = (
            self.postgres_password.get_secret_value() if self.postgres_password else ""
        )
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


def load_settings(**overrides: object) -> Settings:
    """Build settings, turning validation failures into ConfigurationError."""
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        msg = f"Invalid configuration: {fields}"
        raise ConfigurationError(msg) from e


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    JWT_SECRET_KEY must be provided via environment variables or .env file.
    """
    return load_settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
