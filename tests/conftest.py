"""Shared fixtures: a fresh SQLite file database per test."""
import pytest_asyncio

from reddit_clone.database.connection import create_database, create_tables
from reddit_clone.models import Forum


@pytest_asyncio.fixture
async def database(tmp_path):
    db = create_database(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite3'}")
    await db.connect()
    await create_tables(db)
    yield db
    await db.disconnect()


@pytest_asyncio.fixture
async def forum(database):
    return Forum(database)


@pytest_asyncio.fixture
async def alice(forum):
    user_id = await forum.users.create_user("alice", "pw1")
    return await forum.users.get_user_by_id(user_id)


@pytest_asyncio.fixture
async def bob(forum):
    user_id = await forum.users.create_user("bob", "pw2")
    return await forum.users.get_user_by_id(user_id)


@pytest_asyncio.fixture
async def cats(forum):
    await forum.subreddits.create_subreddit("cats", "all about cats")
    return await forum.subreddits.get_subreddit_by_name("cats")


@pytest_asyncio.fixture
async def cute_post(forum, alice, cats):
    return await forum.posts.create_post(alice.id, "cute", "http://x", cats.id)
