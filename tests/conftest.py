import itertools
import os
import tempfile

os.environ.setdefault(
    "LOG_FILE_PATH", os.path.join(tempfile.gettempdir(), "store_ratings_tests", "app.log")
)
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient

import store_ratings.core.logging_config  # noqa: F401  installs Logger.trace
from store_ratings.core.config import settings
from store_ratings.core.security import create_access_token
from store_ratings.db.database import get_connection, init_db
from store_ratings.models.user import UserRole
from store_ratings.repositories.store_repository import StoreRepository
from store_ratings.repositories.user_repository import UserRepository


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    init_db()


@pytest.fixture
def conn(database):
    connection = get_connection()
    yield connection
    connection.close()


@pytest.fixture
def make_user(conn):
    counter = itertools.count(1)

    def _make(role=UserRole.USER, name=None, email=None, hashed_password="not-a-real-hash"):
        n = next(counter)
        user = UserRepository(conn).create(
            name=name or f"Person {n}",
            email=email or f"person{n}@example.com",
            hashed_password=hashed_password,
            address=f"{n} Main Street",
            role=role,
        )
        conn.commit()
        return user

    return _make


@pytest.fixture
def make_store(conn):
    counter = itertools.count(1)

    def _make(owner, name=None):
        n = next(counter)
        store = StoreRepository(conn).create(
            name=name or f"Store {n}",
            address=f"{n} Market Road",
            contact_email=f"store{n}@example.com",
            owner_id=owner.id,
        )
        conn.commit()
        return store

    return _make


@pytest.fixture
def client(database):
    from store_ratings.main import app

    with TestClient(app) as test_client:
        yield test_client


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}
