"""Wire models for the user manager API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def _stringify(value: object) -> object:
    # PostgreSQL hands back uuid.UUID for the id column.
    return value if isinstance(value, str) or value is None else str(value)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserRecord(_CamelModel):
    """A row of the platform's user table, minus the password hash."""

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    role_slug: Optional[str] = None
    disabled: Optional[bool] = None
    mfa_enabled: Optional[bool] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("id", mode="before")
    @classmethod
    def _normalise_id(cls, value: object) -> object:
        return _stringify(value)


class UserIdentity(BaseModel):
    id: str
    email: str

    @field_validator("id", mode="before")
    @classmethod
    def _normalise_id(cls, value: object) -> object:
        return _stringify(value)


class UserListResponse(BaseModel):
    success: bool = True
    users: List[UserRecord]
    count: int


class UserResponse(BaseModel):
    success: bool = True
    user: UserRecord


class ChangePasswordRequest(_CamelModel):
    email: Optional[str] = None
    new_password: Optional[str] = None


class ChangePasswordResponse(BaseModel):
    success: bool = True
    message: str = "Password changed successfully"
    user: UserIdentity


class HealthResponse(BaseModel):
    status: str
    database: str


__all__ = [
    "ChangePasswordRequest",
    "ChangePasswordResponse",
    "HealthResponse",
    "UserIdentity",
    "UserListResponse",
    "UserRecord",
    "UserResponse",
]
