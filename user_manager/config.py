"""Environment-driven configuration for the user manager service."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

DEFAULT_PORT = 3000
DEFAULT_DB_HOST = "postgres"
DEFAULT_DB_PORT = 5432
DEFAULT_POOL_SIZE = 10

_REQUIRED_VARIABLES = {
    "api_key": "N8N_USER_MANAGER_API_KEY",
    "db_name": "POSTGRES_DB",
    "db_user": "POSTGRES_USER",
    "db_password": "POSTGRES_PASSWORD",
}


def _parse_int(raw: Optional[str], *, name: str, default: int) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once at startup."""

    api_key: str = field(repr=False)
    db_name: str
    db_user: str
    db_password: str = field(repr=False)
    db_host: str = DEFAULT_DB_HOST
    db_port: int = DEFAULT_DB_PORT
    port: int = DEFAULT_PORT
    pool_size: int = DEFAULT_POOL_SIZE

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Create :class:`Settings` from environment variables.

        Raises :class:`ValueError` listing every required variable that is unset
        or empty, or naming a numeric variable that cannot be parsed.
        """
        env = os.environ if environ is None else environ

        missing = [
            variable
            for variable in _REQUIRED_VARIABLES.values()
            if not (env.get(variable) or "").strip()
        ]
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

        required = {name: env[variable] for name, variable in _REQUIRED_VARIABLES.items()}

        return Settings(
            api_key=required["api_key"],
            db_name=required["db_name"],
            db_user=required["db_user"],
            db_password=required["db_password"],
            db_host=(env.get("DB_POSTGRESDB_HOST") or "").strip() or DEFAULT_DB_HOST,
            db_port=_parse_int(env.get("DB_POSTGRESDB_PORT"), name="DB_POSTGRESDB_PORT", default=DEFAULT_DB_PORT),
            port=_parse_int(env.get("N8N_USER_MANAGER_PORT"), name="N8N_USER_MANAGER_PORT", default=DEFAULT_PORT),
            pool_size=_parse_int(env.get("DB_POOL_SIZE"), name="DB_POOL_SIZE", default=DEFAULT_POOL_SIZE),
        )


__all__ = ["Settings", "DEFAULT_PORT"]
