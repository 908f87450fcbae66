import sqlite3

import pytest

from store_ratings.db.database import atomic, get_connection
from store_ratings.models.user import UserRole
from store_ratings.repositories.user_repository import UserRepository


def test_atomic_rolls_back_every_write(conn):
    repo = UserRepository(conn)

    with pytest.raises(RuntimeError):
        with atomic(conn):
            repo.create("Alice", "alice@example.com", "hash", "", UserRole.USER)
            repo.create("Bobby", "bob@example.com", "hash", "", UserRole.USER)
            raise RuntimeError("boom")

    assert repo.count() == 0


def test_atomic_nested_rollback_keeps_outer_writes(conn):
    repo = UserRepository(conn)

    with atomic(conn):
        repo.create("Alice", "alice@example.com", "hash", "", UserRole.USER)
        with pytest.raises(RuntimeError):
            with atomic(conn):
                repo.create("Bobby", "bob@example.com", "hash", "", UserRole.USER)
                raise RuntimeError("boom")

    assert [u.email for u in repo.list_filtered()] == ["alice@example.com"]


def test_foreign_keys_are_enforced(conn):
    assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1


def test_email_is_unique_case_insensitively(conn, make_user):
    make_user(email="Case@Example.com")

    with pytest.raises(sqlite3.IntegrityError):
        UserRepository(conn).create("Other", "case@example.com", "hash", "", UserRole.USER)


def test_committed_rows_visible_to_new_connections(make_user):
    user = make_user()

    other = get_connection()
    try:
        assert UserRepository(other).get_by_id(user.id).email == user.email
    finally:
        other.close()


def test_atomic_leaves_commit_to_the_caller():
    fresh = get_connection()
    try:
        assert not fresh.in_transaction
        with atomic(fresh):
            UserRepository(fresh).create("Alice", "alice@example.com", "hash", "", UserRole.USER)
        assert fresh.in_transaction
        fresh.rollback()
        assert UserRepository(fresh).count() == 0
    finally:
        fresh.close()
