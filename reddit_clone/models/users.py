# reddit_clone/models/users.py
import logging
from functools import lru_cache
from typing import Optional, Dict, Any

import bcrypt
from databases import Database
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import Table, Column, Integer, String, select, insert

from reddit_clone.config import HASH_ROUNDS
from reddit_clone.database.connection import metadata, storage_errors
from reddit_clone.errors import ValidationError
from reddit_clone.models.schemas import UserProfile
from reddit_clone.utils import utcnow_iso, clean_text

logger = logging.getLogger(__name__)

# =========================
# users table
# =========================
users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("username", String, unique=True, nullable=False),
    Column("password", String, nullable=False),      # bcrypt hash
    Column("created_at", String, nullable=False),
    Column("updated_at", String, nullable=False),
)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

# =========================
# password hash / verify
# =========================
def _hashpw(plain: bytes) -> str:
    return bcrypt.hashpw(plain, bcrypt.gensalt(rounds=HASH_ROUNDS)).decode("utf-8")


def _checkpw(plain: bytes, hashed: bytes) -> bool:
    try:
        return bcrypt.checkpw(plain, hashed)
    except ValueError as exc:
        raise ValidationError("malformed password hash") from exc


async def hash_password(plain: str) -> str:
    """
    Salted bcrypt hash, fresh salt per call. Runs in the thread pool.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        raise ValidationError(f"password must be at most {BCRYPT_MAX_BYTES} bytes")
    return await run_in_threadpool(_hashpw, encoded)


async def verify_password(plain: str, hashed: str) -> bool:
    """
    Constant-time check of ``plain`` against a stored hash. A mismatch is
    ``False``; only a malformed ``hashed`` raises (ValidationError).
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        # hash_password never stores such a password, so it cannot match
        return False
    return await run_in_threadpool(_checkpw, encoded, hashed.encode("utf-8"))


@lru_cache(maxsize=1)
def dummy_hash() -> str:
    """Hash compared against when a login names an unknown user."""
    return _hashpw(b"reddit-clone-dummy-password")


def to_profile(row) -> UserProfile:
    return UserProfile(
        id=row["id"],
        username=row["username"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# =========================
# DB helpers
# =========================
class UserStore:
    """Owns the users table: signup and lookups."""

    def __init__(self, database: Database):
        self.database = database

    async def create_user(self, username: str, password: str) -> int:
        """
        Create a user and return its id. The password is stored as a bcrypt hash.
        """
        username = clean_text(username)
        if not username or not password:
            raise ValidationError("username and password are required")

        ph = await hash_password(password)
        now = utcnow_iso()
        q = insert(users).values(
            username=username,
            password=ph,
            created_at=now,
            updated_at=now,
        )
        async with storage_errors(conflict="A user with this username already exists"):
            async with self.database.connection() as connection:
                # databases returns the new primary key for sqlite inserts
                new_id = await connection.execute(q)

        logger.info("user created: %s (id=%s)", username, new_id)
        return int(new_id)

    async def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        """
        Fetch one user by username, hash included. Only the login check uses this.
        """
        q = (
            select(
                users.c.id,
                users.c.username,
                users.c.password,   # hash
                users.c.created_at,
                users.c.updated_at,
            )
            .where(users.c.username == username)
            .limit(1)
        )
        async with storage_errors(), self.database.connection() as connection:
            row = await connection.fetch_one(q)
        if not row:
            return None
        return {
            "id": row["id"],
            "username": row["username"],
            "password_hash": row["password"],
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }

    async def get_user_by_id(self, user_id: int) -> Optional[UserProfile]:
        q = (
            select(users.c.id, users.c.username, users.c.created_at, users.c.updated_at)
            .where(users.c.id == user_id)
            .limit(1)
        )
        async with storage_errors(), self.database.connection() as connection:
            row = await connection.fetch_one(q)
        return to_profile(row) if row else None
