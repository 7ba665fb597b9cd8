# reddit_clone/models/subreddits.py
from typing import List, Optional

from databases import Database
from sqlalchemy import Table, Column, Integer, String, Text, select, insert

from reddit_clone.database.connection import metadata, storage_errors
from reddit_clone.errors import ValidationError
from reddit_clone.models.schemas import Subreddit
from reddit_clone.utils import utcnow_iso, clean_text

subreddits = Table(
    "subreddits",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String, unique=True, nullable=False),
    Column("description", Text, nullable=True),
    Column("created_at", String, nullable=False),
    Column("updated_at", String, nullable=False),
)


def to_subreddit(row) -> Subreddit:
    return Subreddit(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SubredditStore:

    def __init__(self, database: Database):
        self.database = database

    async def create_subreddit(self, name: str, description: Optional[str] = None) -> int:
        name = clean_text(name)
        if not name:
            raise ValidationError("subreddit name is required")

        now = utcnow_iso()
        q = insert(subreddits).values(
            name=name,
            description=clean_text(description) or None,
            created_at=now,
            updated_at=now,
        )
        async with storage_errors(conflict="A subreddit with this name already exists"):
            async with self.database.connection() as connection:
                new_id = await connection.execute(q)
        return int(new_id)

    async def list_subreddits(self) -> List[Subreddit]:
        q = select(subreddits).order_by(subreddits.c.name.asc())
        async with storage_errors(), self.database.connection() as connection:
            rows = await connection.fetch_all(q)
        return [to_subreddit(r) for r in rows]

    async def get_subreddit_by_name(self, name: str) -> Optional[Subreddit]:
        q = select(subreddits).where(subreddits.c.name == name).limit(1)
        async with storage_errors(), self.database.connection() as connection:
            row = await connection.fetch_one(q)
        return to_subreddit(row) if row else None
