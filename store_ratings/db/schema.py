"""
SQL DDL statements for all application tables.
Tables are created in dependency order so foreign keys resolve correctly.

Uniqueness invariants live here as constraints, not only in the services:
- one account per email            (users.email UNIQUE)
- one store per owner              (stores.owner_id UNIQUE)
- one rating per (user, store)     (ratings UNIQUE(user_id, store_id))
"""
from store_ratings.db.database import get_connection

# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    name              TEXT    NOT NULL,
    email             TEXT    NOT NULL UNIQUE COLLATE NOCASE,
    hashed_password   TEXT    NOT NULL,
    address           TEXT    NOT NULL DEFAULT '',
    role              TEXT    NOT NULL DEFAULT 'USER'
                              CHECK(role IN ('USER', 'OWNER', 'ADMIN')),
    created_at        TEXT    NOT NULL,
    updated_at        TEXT    NOT NULL
);
"""

CREATE_REFRESH_TOKENS_TABLE = """
CREATE TABLE IF NOT EXISTS refresh_tokens (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id     INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    token       TEXT    NOT NULL UNIQUE,
    expires_at  TEXT    NOT NULL,
    revoked     INTEGER NOT NULL DEFAULT 0,
    created_at  TEXT    NOT NULL
);
"""

CREATE_STORES_TABLE = """
CREATE TABLE IF NOT EXISTS stores (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    name           TEXT    NOT NULL,
    address        TEXT    NOT NULL DEFAULT '',
    contact_email  TEXT    NOT NULL,
    owner_id       INTEGER NOT NULL UNIQUE REFERENCES users(id) ON DELETE RESTRICT,
    created_at     TEXT    NOT NULL,
    updated_at     TEXT    NOT NULL
);
"""

CREATE_RATINGS_TABLE = """
CREATE TABLE IF NOT EXISTS ratings (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    value       INTEGER NOT NULL CHECK(value BETWEEN 1 AND 5),
    comment     TEXT,
    user_id     INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    store_id    INTEGER NOT NULL REFERENCES stores(id) ON DELETE CASCADE,
    created_at  TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL,
    UNIQUE(user_id, store_id)
);
"""

CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_ratings_store_id ON ratings(store_id)",
    "CREATE INDEX IF NOT EXISTS idx_ratings_created_at ON ratings(created_at)",
    "CREATE INDEX IF NOT EXISTS idx_refresh_tokens_user_id ON refresh_tokens(user_id)",
]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ALL_TABLES = [
    CREATE_USERS_TABLE,
    CREATE_REFRESH_TOKENS_TABLE,
    CREATE_STORES_TABLE,
    CREATE_RATINGS_TABLE,
]


def create_tables() -> None:
    """Create all tables and indexes (IF NOT EXISTS, safe on every restart)."""
    conn = get_connection()
    try:
        cursor = conn.cursor()
        for ddl in ALL_TABLES:
            cursor.execute(ddl)
        for ddl in CREATE_INDEXES:
            cursor.execute(ddl)
        conn.commit()
    finally:
        conn.close()
