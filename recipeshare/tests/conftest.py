from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from recipeshare.app import create_app
from recipeshare.config import Settings
from recipeshare.storage.memory import InMemoryDatabase


@pytest.fixture
def settings() -> Settings:
    return Settings(
        db_url="",
        jwt_secret="test-secret-0123456789-abcdefghijklmnop",
        bcrypt_rounds=4,
    )


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def client(settings, database):
    with TestClient(create_app(settings, database=database)) as c:
        yield c
