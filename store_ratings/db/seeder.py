"""
Database seeder – creates a default admin account on first startup.

⚠️  FOR DEVELOPMENT ONLY.
    Set the SEED_ADMIN_* settings (or remove the seed_admin() call from
    main.py) before deploying to production.
"""
import logging

from store_ratings.core.config import settings
from store_ratings.core.security import hash_password
from store_ratings.db.database import get_connection
from store_ratings.models.timestamps import utc_now_iso
from store_ratings.models.user import UserRole

logger = logging.getLogger(__name__)


def seed_admin() -> None:
    """
    Insert the default admin user if it does not already exist.
    Safe to call on every startup – it is a no-op when the user is present.
    """
    conn = get_connection()
    try:
        existing = conn.execute(
            "SELECT id FROM users WHERE email = ? COLLATE NOCASE",
            (settings.SEED_ADMIN_EMAIL,),
        ).fetchone()

        if existing:
            logger.info(
                "Seeder: admin user '%s' already exists – skipping.", settings.SEED_ADMIN_EMAIL
            )
            return

        now = utc_now_iso()
        conn.execute(
            """
            INSERT INTO users (name, email, hashed_password, address, role, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                settings.SEED_ADMIN_NAME,
                settings.SEED_ADMIN_EMAIL,
                hash_password(settings.SEED_ADMIN_PASSWORD),
                settings.SEED_ADMIN_ADDRESS,
                UserRole.ADMIN.value,
                now,
                now,
            ),
        )
        conn.commit()
        logger.info("Seeder: created default admin user '%s'.", settings.SEED_ADMIN_EMAIL)
    finally:
        conn.close()
