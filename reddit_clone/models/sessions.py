# reddit_clone/models/sessions.py
import logging
import secrets

from databases import Database
from fastapi.concurrency import run_in_threadpool

from reddit_clone.database.connection import storage_errors
from reddit_clone.errors import AuthError, NotFound
from reddit_clone.models.schemas import UserProfile
from reddit_clone.models.users import UserStore, verify_password, dummy_hash, to_profile
from reddit_clone.utils import utcnow_iso, clean_text

logger = logging.getLogger(__name__)

# 32 random bytes -> 256 bits of entropy, url-safe so it can live in a cookie
TOKEN_BYTES = 32

LOGIN_FAILED = "username or password incorrect"


class SessionManager:
    """
    Issues, resolves and revokes session tokens.

    Lifecycle: anonymous -> (check_login + create_session) -> authenticated
    -> (revoke_session) -> anonymous. Sessions do not expire on their own.
    """

    def __init__(self, database: Database, users: UserStore):
        self.database = database
        self.users = users

    async def create_session(self, user_id: int) -> str:
        token = secrets.token_urlsafe(TOKEN_BYTES)
        async with storage_errors(), self.database.connection() as connection:
            await connection.execute(
                """
                INSERT INTO sessions (token, user_id, created_at)
                VALUES (:token, :user_id, :created_at)
                """,
                {"token": token, "user_id": user_id, "created_at": utcnow_iso()},
            )
        logger.info("session issued for user %s", user_id)
        return token

    async def resolve_session(self, token: str) -> UserProfile:
        """
        Return the public profile behind ``token``. NotFound means the caller
        is anonymous.
        """
        if not token:
            raise NotFound("session not found")

        async with storage_errors(), self.database.connection() as connection:
            row = await connection.fetch_one(
                """
                SELECT u.id, u.username, u.created_at, u.updated_at
                FROM sessions s
                JOIN users u ON s.user_id = u.id
                WHERE s.token = :token
                """,
                {"token": token},
            )
        if not row:
            raise NotFound("session not found")
        return to_profile(row)

    async def revoke_session(self, user: UserProfile) -> None:
        """
        Delete every session of ``user``. Revoking a user with no sessions is
        an error (NotFound), not a no-op.
        """
        async with storage_errors(), self.database.connection() as connection:
            deleted = await connection.fetch_all(
                "DELETE FROM sessions WHERE user_id = :user_id RETURNING token",
                {"user_id": user.id},
            )
        if not deleted:
            raise NotFound("Deletion not found!")
        logger.info("revoked %d session(s) for user %s", len(deleted), user.id)

    async def check_login(self, username: str, password: str) -> UserProfile:
        user = await self.users.get_user_by_username(clean_text(username))
        if user is None:
            # same bcrypt cost as a real check, so timing does not reveal the username
            await verify_password(password or "", await run_in_threadpool(dummy_hash))
            logger.info("login rejected")
            raise AuthError(LOGIN_FAILED)

        if not await verify_password(password or "", user["password_hash"]):
            logger.info("login rejected")
            raise AuthError(LOGIN_FAILED)

        return to_profile(user)
