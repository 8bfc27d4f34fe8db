from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tests.helpers import API_KEY, seed_database, sqlite_url
from user_manager.config import Settings
from user_manager.database import CredentialStore


@pytest.fixture()
def database_path(tmp_path: Path) -> Path:
    path = tmp_path / "n8n.sqlite3"
    seed_database(path)
    return path


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        api_key=API_KEY,
        db_name="n8n",
        db_user="n8n",
        db_password="not-used-with-sqlite",
    )


@pytest.fixture()
def store(database_path: Path) -> CredentialStore:
    return CredentialStore(sqlite_url(database_path))
