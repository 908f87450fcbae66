"""
Store lifecycle: creation, update and deletion with their role side effects.

Business rules enforced here:
- A user owns at most one store (UNIQUE owner_id is the final arbiter).
- Creating a store for a user promotes them to OWNER unless they already are.
- Creating a store with a brand-new owner account is all-or-nothing.
- Deleting a store removes its ratings and reverts the owner to USER,
  except for ADMIN accounts.
- Only an ADMIN or the store's own owner may edit a store.
"""
import sqlite3
import logging

from store_ratings.core.exceptions import ConflictError, NotFoundError
from store_ratings.core.security import hash_password
from store_ratings.db.database import atomic
from store_ratings.models.store import Store
from store_ratings.models.user import User, UserRole
from store_ratings.repositories.rating_repository import RatingRepository
from store_ratings.repositories.store_repository import StoreRepository
from store_ratings.repositories.user_repository import UserRepository
from store_ratings.schemas.store import StoreCreate, StoreUpdate, StoreWithOwnerCreate
from store_ratings.services.access_control import AccessControl, Actor, Operation

logger = logging.getLogger(__name__)


class StoreService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing StoreService")
        self._conn = conn
        self._repo = StoreRepository(conn)
        self._user_repo = UserRepository(conn)
        self._rating_repo = RatingRepository(conn)
        self._access = AccessControl(conn)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_store(self, store_id: int) -> Store:
        """Return a store or raise 404."""
        store = self._repo.get_by_id(store_id)
        if store is None:
            logger.warning("Store id=%s not found", store_id)
            raise NotFoundError(f"Store with id={store_id} not found")
        return store

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_store(self, data: StoreCreate) -> Store:
        """Create a store for an existing user and promote them to OWNER."""
        logger.info("Creating store '%s' for owner id=%s", data.name, data.owner_id)
        owner = self._user_repo.get_by_id(data.owner_id)
        if owner is None:
            logger.warning("Store owner id=%s not found", data.owner_id)
            raise NotFoundError(f"User with id={data.owner_id} not found")
        if self._repo.get_by_owner_id(owner.id):
            logger.warning("User id=%s already owns a store", owner.id)
            raise ConflictError("User already owns a store")

        try:
            with atomic(self._conn):
                store = self._repo.create(
                    name=data.name,
                    address=data.address,
                    contact_email=data.contact_email,
                    owner_id=owner.id,
                )
                if owner.role != UserRole.OWNER:
                    logger.info(
                        "Promoting user id=%s from %s to OWNER", owner.id, owner.role.value
                    )
                    self._user_repo.set_role(owner.id, UserRole.OWNER)
        except sqlite3.IntegrityError:
            logger.warning("Store insert lost a race for owner id=%s", owner.id)
            raise ConflictError("User already owns a store")

        logger.info("Store created id=%s", store.id)
        return store

    def create_store_with_owner(self, data: StoreWithOwnerCreate) -> tuple[Store, User]:
        """Create a new OWNER account and its store in one atomic unit."""
        logger.info("Creating store '%s' with new owner %s", data.name, data.owner.email)
        if self._user_repo.get_by_email(data.owner.email):
            logger.warning("Owner email already registered: %s", data.owner.email)
            raise ConflictError("Email is already registered")

        try:
            with atomic(self._conn):
                owner = self._user_repo.create(
                    name=data.owner.name,
                    email=data.owner.email,
                    hashed_password=hash_password(data.owner.password),
                    address=data.owner.address,
                    role=UserRole.OWNER,
                )
                store = self._repo.create(
                    name=data.name,
                    address=data.address,
                    contact_email=data.contact_email,
                    owner_id=owner.id,
                )
        except sqlite3.IntegrityError:
            logger.warning("Combined store/owner insert violated a constraint")
            raise ConflictError("Email is already registered")

        logger.info("Store created id=%s with owner id=%s", store.id, owner.id)
        return store, owner

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update_store(self, store_id: int, patch: StoreUpdate, actor: Actor) -> Store:
        store = self.get_store(store_id)
        self._access.enforce(actor, Operation.STORE_MANAGE, store=store)
        fields = patch.model_dump(exclude_unset=True)
        logger.info("Updating store id=%s fields=%s", store_id, sorted(fields))
        return self._repo.update(store_id, **fields)  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete_store(self, store_id: int) -> None:
        """
        Delete a store and every rating of it, then revert the owner's role.

        An ADMIN who owned the store keeps the ADMIN role.
        """
        store = self.get_store(store_id)
        logger.info("Deleting store id=%s owner id=%s", store_id, store.owner_id)
        with atomic(self._conn):
            self._rating_repo.delete_by_store(store_id)
            self._repo.delete(store_id)
            owner = self._user_repo.get_by_id(store.owner_id)
            if owner is not None and owner.role != UserRole.ADMIN:
                logger.info("Reverting user id=%s to USER", owner.id)
                self._user_repo.set_role(owner.id, UserRole.USER)
        logger.info("Store deleted id=%s", store_id)
