"""Read and password-change operations on the platform's user table."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import anyio
from pydantic import ValidationError

from .database import CredentialStore, DatabaseError
from .errors import ErrorKind, ServiceError
from .models import (
    ChangePasswordResponse,
    UserIdentity,
    UserListResponse,
    UserRecord,
    UserResponse,
)
from .security import hash_password

logger = logging.getLogger("n8n_user_manager.users")

MIN_PASSWORD_LENGTH = 8

_USER_COLUMNS = (
    'id, email, "firstName", "lastName", role, "roleSlug", disabled, '
    '"mfaEnabled", "createdAt", "updatedAt"'
)

LIST_USERS_SQL = f'SELECT {_USER_COLUMNS} FROM "user" ORDER BY "createdAt" DESC'
FIND_USER_SQL = f'SELECT {_USER_COLUMNS} FROM "user" WHERE email = :email'
FIND_IDENTITY_SQL = 'SELECT id, email FROM "user" WHERE email = :email'
UPDATE_PASSWORD_SQL = (
    'UPDATE "user" SET password = :password, "updatedAt" = CURRENT_TIMESTAMP '
    "WHERE email = :email"
)


def _user_not_found() -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, "User not found")


def _to_records(rows: List[Dict[str, Any]]) -> List[UserRecord]:
    try:
        return [UserRecord.model_validate(row) for row in rows]
    except ValidationError as exc:
        first = exc.errors()[0]
        column = ".".join(str(part) for part in first["loc"])
        logger.error("Unexpected user row: %s", exc)
        raise ServiceError(ErrorKind.DATABASE, f"Unexpected value in user column {column}") from exc


class UserQueryService:
    """List users and look them up by email without exposing password hashes."""

    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    async def list_users(self) -> UserListResponse:
        try:
            rows = await self._store.query(LIST_USERS_SQL)
        except DatabaseError as exc:
            logger.error("Error fetching users: %s", exc)
            raise ServiceError(ErrorKind.DATABASE, str(exc)) from exc

        users = _to_records(rows)
        return UserListResponse(users=users, count=len(users))

    async def get_user(self, email: str) -> UserResponse:
        try:
            rows = await self._store.query(FIND_USER_SQL, {"email": email})
        except DatabaseError as exc:
            logger.error("Error fetching user: %s", exc)
            raise ServiceError(ErrorKind.DATABASE, str(exc)) from exc

        if not rows:
            raise _user_not_found()
        return UserResponse(user=_to_records(rows[:1])[0])


class PasswordChangeService:
    """Replace the password hash of an existing user.

    Each call validates the input, confirms the user exists, hashes the new
    password with bcrypt and writes it back together with a fresh ``updatedAt``.
    Nothing is retried: the first failing statement fails the whole request.
    """

    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    async def change_password(
        self,
        email: Optional[str],
        new_password: Optional[str],
    ) -> ChangePasswordResponse:
        if not email or not new_password:
            raise ServiceError(ErrorKind.VALIDATION, "Email and newPassword are required")

        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ServiceError(
                ErrorKind.VALIDATION,
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            )

        try:
            rows = await self._store.query(FIND_IDENTITY_SQL, {"email": email})
            if not rows:
                raise _user_not_found()
            identity = UserIdentity.model_validate(rows[0])

            hashed = await anyio.to_thread.run_sync(hash_password, new_password)
            await self._store.query(UPDATE_PASSWORD_SQL, {"password": hashed, "email": email})
        except ServiceError:
            raise
        except Exception as exc:
            logger.error("Error changing password: %s", exc)
            raise ServiceError(ErrorKind.SERVER, str(exc) or exc.__class__.__name__) from exc

        logger.info("Password changed successfully for user: %s", email)
        return ChangePasswordResponse(user=identity)


__all__ = [
    "MIN_PASSWORD_LENGTH",
    "PasswordChangeService",
    "UserQueryService",
]
