"""
Shared fixtures for account service tests.

API tests run against the SQLite engine from ``db.py`` with tables
recreated per test; settings are overridden with a fixed signing key and
a cheap hash work factor.
"""
import uuid

import pytest
from fastapi.testclient import TestClient

from signin_platform.signin_platform.account_service import models  # noqa: F401
from signin_platform.signin_platform.account_service.config import Settings, get_settings
from signin_platform.signin_platform.account_service.db import Base, engine
from signin_platform.signin_platform.account_service.main import app
from signin_platform.signin_platform.account_service.models import User
from signin_platform.signin_platform.account_service.store import DuplicateIdentity, IdentityNotFound

TEST_SECRET_KEY = "test-secret-key-with-at-least-32-bytes!!"
STRONG_PASSWORD = "Test1234!@#$"


def make_settings(**overrides) -> Settings:
    values = {"SECRET_KEY": TEST_SECRET_KEY, "PASSWORD_HASH_ROUNDS": 1000}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def test_settings():
    return make_settings()


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture
def client(test_settings):
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class InMemoryCredentialStore:
    """Dict-backed CredentialStore double."""

    def __init__(self):
        self.users = {}

    def find_by_identifier(self, identifier):
        try:
            return self.users[identifier]
        except KeyError:
            raise IdentityNotFound(identifier) from None

    def create(self, identifier, hashed_password, name):
        if identifier in self.users:
            raise DuplicateIdentity(identifier)
        user = User(id=str(uuid.uuid4()), email=identifier, password=hashed_password, name=name)
        self.users[identifier] = user
        return user


class FixedClock:
    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def memory_store():
    return InMemoryCredentialStore()


def signup(client, email="user@example.com", password=STRONG_PASSWORD, name="Test User"):
    return client.post("/signup", json={"email": email, "password": password, "name": name})
