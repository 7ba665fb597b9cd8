# reddit_clone/database/connection.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from databases import Database
from sqlalchemy import MetaData

from reddit_clone.config import DATABASE_URL
from reddit_clone.errors import ForumError, ConflictError, StorageError

logger = logging.getLogger(__name__)

metadata = MetaData()


def create_database(url: Optional[str] = None) -> Database:
    """
    Build the shared connection handle. Nothing is opened until ``connect()``.

    Only SQLite URLs are accepted: the hot ranking uses julianday() and inserts
    rely on the sqlite backend returning the new rowid.
    """
    url = url or DATABASE_URL
    if not url.startswith("sqlite"):
        raise ValueError(f"unsupported database url {url!r}, expected sqlite+aiosqlite://")
    return Database(url)


# =========================
# Driver error -> domain error
# =========================
def classify_storage_error(exc: BaseException, conflict: Optional[str] = None) -> ForumError:
    # sqlite3 (3.11+) names the failing constraint, the message is the fallback
    errorname = getattr(exc, "sqlite_errorname", "") or ""
    message = str(exc)

    if (
        errorname in ("SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY")
        or "UNIQUE constraint failed" in message
    ):
        return ConflictError(conflict or "record already exists")

    return StorageError(message or exc.__class__.__name__)


@asynccontextmanager
async def storage_errors(conflict: Optional[str] = None) -> AsyncIterator[None]:
    """
    Wrap a block of storage calls so only the domain taxonomy escapes it.

        async with storage_errors(conflict="A user with this username already exists"):
            await connection.execute(q)
    """
    try:
        yield
    except ForumError:
        raise
    except Exception as exc:
        error = classify_storage_error(exc, conflict)
        if isinstance(error, StorageError):
            logger.error("storage failure: %s", error.message, exc_info=exc)
        raise error from exc


# =========================
# Schema
# =========================
SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL UNIQUE,
        password TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS subreddits (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        description TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS posts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        subreddit_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        url TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(id),
        FOREIGN KEY(subreddit_id) REFERENCES subreddits(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS comments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        post_id INTEGER NOT NULL,
        text TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(id),
        FOREIGN KEY(post_id) REFERENCES posts(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS votes (
        user_id INTEGER NOT NULL,
        post_id INTEGER NOT NULL,
        direction INTEGER NOT NULL CHECK (direction IN (-1, 0, 1)),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE(user_id, post_id),
        FOREIGN KEY(user_id) REFERENCES users(id),
        FOREIGN KEY(post_id) REFERENCES posts(id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
        token TEXT PRIMARY KEY,
        user_id INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(id)
    );
    """,
    # indexes
    """
    CREATE INDEX IF NOT EXISTS idx_posts_subreddit_created
    ON posts(subreddit_id, created_at DESC);
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_posts_created
    ON posts(created_at DESC);
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_comments_post
    ON comments(post_id, created_at DESC);
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_votes_post
    ON votes(post_id);
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_sessions_user
    ON sessions(user_id);
    """,
]


async def create_tables(database: Database) -> None:
    if not database.is_connected:
        await database.connect()

    async with storage_errors(), database.connection() as connection:
        for statement in SCHEMA:
            await connection.execute(statement)
