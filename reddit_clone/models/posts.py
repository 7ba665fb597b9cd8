# reddit_clone/models/posts.py
"""
Post aggregation: vote tallies, rankings and the flat-to-nested PostView
mapping.

Listings are a single grouped query: posts JOIN users JOIN subreddits LEFT
JOIN votes. Every user/subreddit column comes back with a table prefix
(``users_username``, ``subreddits_name``) and ``transform_post`` turns that
flat row into a nested ``PostView``.

Sort orders:

- ``new``: newest first.
- ``top``: highest vote score first.
- ``hot``: ``vote_score / age_in_seconds``, highest first. The age is
  clamped to ``HOT_MIN_AGE_SECONDS`` so a brand-new (or future-dated) post
  never divides by zero or by a negative number.

Ties fall back to the newest post id.
"""
import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional

from databases import Database

from reddit_clone.config import HOT_MIN_AGE_SECONDS, LISTING_LIMIT, SORT_METHODS
from reddit_clone.database.connection import storage_errors
from reddit_clone.errors import NotFound, ValidationError
from reddit_clone.models.schemas import PostView, Subreddit, UserProfile
from reddit_clone.utils import utcnow_iso

logger = logging.getLogger(__name__)

POST_VIEW_SELECT = """
    SELECT
        p.id AS posts_id,
        p.title AS posts_title,
        p.url AS posts_url,
        p.created_at AS posts_created_at,
        p.updated_at AS posts_updated_at,

        u.id AS users_id,
        u.username AS users_username,
        u.created_at AS users_created_at,
        u.updated_at AS users_updated_at,

        s.id AS subreddits_id,
        s.name AS subreddits_name,
        s.description AS subreddits_description,
        s.created_at AS subreddits_created_at,
        s.updated_at AS subreddits_updated_at,

        COALESCE(SUM(v.direction), 0) AS vote_score,
        COALESCE(SUM(CASE WHEN v.direction = 1 THEN 1 ELSE 0 END), 0) AS num_upvotes,
        COALESCE(SUM(CASE WHEN v.direction = -1 THEN 1 ELSE 0 END), 0) AS num_downvotes

    FROM posts p
        JOIN users u ON p.user_id = u.id
        JOIN subreddits s ON p.subreddit_id = s.id
        LEFT JOIN votes v ON p.id = v.post_id
"""

GROUP_BY = "GROUP BY p.id, u.id, s.id"

ORDER_BY = {
    "new": "p.created_at DESC, p.id DESC",
    "top": "vote_score DESC, p.id DESC",
    "hot": (
        "COALESCE(SUM(v.direction), 0) * 1.0"
        " / MAX((julianday(:now) - julianday(p.created_at)) * 86400.0, :min_age) DESC,"
        " p.id DESC"
    ),
}


def transform_post(row: Mapping[str, Any]) -> PostView:
    """Map a flat, prefixed row from POST_VIEW_SELECT to a nested PostView."""
    return PostView(
        id=row["posts_id"],
        title=row["posts_title"],
        url=row["posts_url"],
        created_at=row["posts_created_at"],
        updated_at=row["posts_updated_at"],
        vote_score=row["vote_score"] or 0,
        num_upvotes=row["num_upvotes"] or 0,
        num_downvotes=row["num_downvotes"] or 0,
        user=UserProfile(
            id=row["users_id"],
            username=row["users_username"],
            created_at=row["users_created_at"],
            updated_at=row["users_updated_at"],
        ),
        subreddit=Subreddit(
            id=row["subreddits_id"],
            name=row["subreddits_name"],
            description=row["subreddits_description"],
            created_at=row["subreddits_created_at"],
            updated_at=row["subreddits_updated_at"],
        ),
    )


class PostStore:

    def __init__(self, database: Database):
        self.database = database

    async def create_post(self, user_id: int, title: str, url: str, subreddit_id: Optional[int]) -> int:
        if not subreddit_id:
            raise ValidationError("There is no subreddit id")

        now = utcnow_iso()
        async with storage_errors(), self.database.connection() as connection:
            exists = await connection.fetch_one(
                "SELECT id FROM subreddits WHERE id = :id",
                {"id": subreddit_id},
            )
            if not exists:
                raise NotFound(f"subreddit {subreddit_id} does not exist")

            new_id = await connection.execute(
                """
                INSERT INTO posts (user_id, subreddit_id, title, url, created_at, updated_at)
                VALUES (:user_id, :subreddit_id, :title, :url, :created_at, :updated_at)
                """,
                {
                    "user_id": user_id,
                    "subreddit_id": subreddit_id,
                    "title": title,
                    "url": url,
                    "created_at": now,
                    "updated_at": now,
                },
            )
        logger.info("post %s created in subreddit %s by user %s", new_id, subreddit_id, user_id)
        return int(new_id)

    async def list_posts(
        self,
        subreddit_id: Optional[int] = None,
        sort: str = "new",
        now: Optional[datetime] = None,
    ) -> List[PostView]:
        """
        Up to LISTING_LIMIT posts, optionally restricted to one subreddit.
        ``now`` only matters for the ``hot`` order and defaults to the current time.
        """
        if sort not in SORT_METHODS:
            raise ValidationError(f"sort must be one of {', '.join(SORT_METHODS)}")

        values = {"subreddit_id": subreddit_id, "limit": LISTING_LIMIT}
        if sort == "hot":
            values["now"] = utcnow_iso(now)
            values["min_age"] = HOT_MIN_AGE_SECONDS

        query = f"""
            {POST_VIEW_SELECT}
            WHERE (:subreddit_id IS NULL OR p.subreddit_id = :subreddit_id)
            {GROUP_BY}
            ORDER BY {ORDER_BY[sort]}
            LIMIT :limit
        """
        async with storage_errors(), self.database.connection() as connection:
            rows = await connection.fetch_all(query, values)
        return [transform_post(r) for r in rows]

    async def get_post(self, post_id: int) -> Optional[PostView]:
        """The PostView for ``post_id``, or None when there is no such post."""
        query = f"""
            {POST_VIEW_SELECT}
            WHERE p.id = :post_id
            {GROUP_BY}
        """
        async with storage_errors(), self.database.connection() as connection:
            row = await connection.fetch_one(query, {"post_id": post_id})
        if not row:
            return None
        return transform_post(row)
