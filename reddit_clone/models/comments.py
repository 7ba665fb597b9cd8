# reddit_clone/models/comments.py
from typing import Any, List, Mapping

from databases import Database

from reddit_clone.config import LISTING_LIMIT
from reddit_clone.database.connection import storage_errors
from reddit_clone.errors import NotFound, ValidationError
from reddit_clone.models.schemas import CommentAuthor, CommentView
from reddit_clone.utils import utcnow_iso, clean_text


def transform_comment(row: Mapping[str, Any]) -> CommentView:
    # the author carries only id/username, lighter than a PostView's user
    return CommentView(
        id=row["comments_id"],
        text=row["comments_text"],
        created_at=row["comments_created_at"],
        updated_at=row["comments_updated_at"],
        user=CommentAuthor(
            id=row["users_id"],
            username=row["users_username"],
        ),
    )


class CommentStore:

    def __init__(self, database: Database):
        self.database = database

    async def create_comment(self, user_id: int, post_id: int, text: str) -> int:
        """Add a comment to a post and return its id."""
        text = clean_text(text)
        if not text:
            raise ValidationError("comment text is required")

        now = utcnow_iso()
        async with storage_errors(), self.database.connection() as connection:
            exists = await connection.fetch_one(
                "SELECT id FROM posts WHERE id = :id",
                {"id": post_id},
            )
            if not exists:
                raise NotFound(f"post {post_id} does not exist")

            new_id = await connection.execute(
                """
                INSERT INTO comments (user_id, post_id, text, created_at, updated_at)
                VALUES (:user_id, :post_id, :text, :created_at, :updated_at)
                """,
                {
                    "user_id": user_id,
                    "post_id": post_id,
                    "text": text,
                    "created_at": now,
                    "updated_at": now,
                },
            )
        return int(new_id)

    async def list_comments(self, post_id: int) -> List[CommentView]:
        """Newest first, at most LISTING_LIMIT."""
        async with storage_errors(), self.database.connection() as connection:
            rows = await connection.fetch_all(
                """
                SELECT
                    c.id AS comments_id,
                    c.text AS comments_text,
                    c.created_at AS comments_created_at,
                    c.updated_at AS comments_updated_at,

                    u.id AS users_id,
                    u.username AS users_username

                FROM comments c
                    JOIN users u ON c.user_id = u.id

                WHERE c.post_id = :post_id
                ORDER BY c.created_at DESC, c.id DESC
                LIMIT :limit
                """,
                {"post_id": post_id, "limit": LISTING_LIMIT},
            )
        return [transform_comment(r) for r in rows]
