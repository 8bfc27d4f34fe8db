"""Security helpers: the shared-secret gate and the password hashing policy."""
from __future__ import annotations

import secrets

import bcrypt
from fastapi import Security
from fastapi.security import APIKeyHeader

from .errors import ErrorKind, ServiceError

API_KEY_HEADER = "x-api-key"
BCRYPT_ROUNDS = 10
# bcrypt only reads the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72

_api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


class APIKeyAuth:
    """Shared-secret header authentication using constant-time comparisons."""

    def __init__(self, api_key: str) -> None:
        if not api_key:
            raise ValueError("An API key must be configured")
        self._api_key = api_key.encode("utf-8")

    async def __call__(self, provided: str | None = Security(_api_key_header)) -> None:
        if not provided:
            raise ServiceError(ErrorKind.AUTH_MISSING, "API key is required in x-api-key header")

        if not secrets.compare_digest(provided.encode("utf-8"), self._api_key):
            raise ServiceError(ErrorKind.AUTH_INVALID, "Invalid API key")


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Return a freshly salted bcrypt hash in the ``$2a$`` form the platform stores."""

    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS, prefix=b"2a")
    return bcrypt.hashpw(_password_bytes(password), salt).decode("ascii")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode("ascii"))
    except ValueError:
        return False


__all__ = [
    "API_KEY_HEADER",
    "APIKeyAuth",
    "BCRYPT_ROUNDS",
    "hash_password",
    "verify_password",
]
