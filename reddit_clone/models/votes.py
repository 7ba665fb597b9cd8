# reddit_clone/models/votes.py
from typing import Optional

from databases import Database

from reddit_clone.database.connection import storage_errors
from reddit_clone.errors import NotFound, ValidationError
from reddit_clone.utils import utcnow_iso

# 1 = up, -1 = down, 0 = vote withdrawn
VOTE_DIRECTIONS = (-1, 0, 1)


def validate_direction(direction) -> int:
    # bool is an int subclass; True/False are not votes
    if isinstance(direction, bool) or not isinstance(direction, int) or direction not in VOTE_DIRECTIONS:
        raise ValidationError("vote direction must be one of -1, 0, 1")
    return direction


class VoteLedger:
    """
    One vote per (user, post). Casting again overwrites the direction in
    place; the upsert is a single statement so two concurrent casts by the
    same user cannot both insert.
    """

    def __init__(self, database: Database):
        self.database = database

    async def cast_vote(self, user_id: int, post_id: int, direction: int) -> None:
        direction = validate_direction(direction)

        async with storage_errors(), self.database.connection() as connection:
            exists = await connection.fetch_one(
                "SELECT id FROM posts WHERE id = :id",
                {"id": post_id},
            )
            if not exists:
                raise NotFound(f"post {post_id} does not exist")

            await connection.execute(
                """
                INSERT INTO votes (user_id, post_id, direction, created_at, updated_at)
                VALUES (:user_id, :post_id, :direction, :now, :now)
                ON CONFLICT (user_id, post_id)
                DO UPDATE SET direction = excluded.direction, updated_at = excluded.updated_at
                """,
                {"user_id": user_id, "post_id": post_id, "direction": direction, "now": utcnow_iso()},
            )

    async def get_vote(self, user_id: int, post_id: int) -> Optional[int]:
        """Current direction of this user's vote on the post, None if never voted."""
        async with storage_errors(), self.database.connection() as connection:
            row = await connection.fetch_one(
                "SELECT direction FROM votes WHERE user_id = :user_id AND post_id = :post_id",
                {"user_id": user_id, "post_id": post_id},
            )
        return row["direction"] if row else None
