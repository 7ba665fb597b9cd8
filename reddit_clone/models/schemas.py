# reddit_clone/models/schemas.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class UserProfile(BaseModel):
    """Public view of a user. The password hash never appears here."""
    id: int
    username: str
    created_at: datetime
    updated_at: datetime


class Subreddit(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PostView(BaseModel):
    """A post with its author, subreddit and vote tallies embedded."""
    id: int
    title: str
    url: str
    created_at: datetime
    updated_at: datetime
    vote_score: int = 0
    num_upvotes: int = 0
    num_downvotes: int = 0

    user: UserProfile
    subreddit: Subreddit


class CommentAuthor(BaseModel):
    id: int
    username: str


class CommentView(BaseModel):
    id: int
    text: str
    created_at: datetime
    updated_at: datetime

    user: CommentAuthor
