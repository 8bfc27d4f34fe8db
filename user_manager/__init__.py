"""Authenticated HTTP middleware over the n8n user table."""

from __future__ import annotations

from typing import Any

from .config import Settings
from .database import CredentialStore


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the user manager application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "CredentialStore",
    "Settings",
    "create_app",
]
