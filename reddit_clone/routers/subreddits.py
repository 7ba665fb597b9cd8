# reddit_clone/routers/subreddits.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, HTTPException
from starlette import status

from reddit_clone.config import SORT_METHODS
from reddit_clone.models import Forum
from reddit_clone.models.schemas import Subreddit, UserProfile
from .security import get_forum, get_current_user

router = APIRouter(tags=["subreddits"])


@router.get("/subreddits", response_model=List[Subreddit])
async def list_subreddits(forum: Forum = Depends(get_forum)):
    return await forum.subreddits.list_subreddits()


@router.post("/subreddits", status_code=status.HTTP_201_CREATED)
async def create_subreddit(
    name: str = Form(...),
    description: Optional[str] = Form(None),
    current_user: UserProfile = Depends(get_current_user),
    forum: Forum = Depends(get_forum),
):
    subreddit_id = await forum.subreddits.create_subreddit(name, description)
    return {"id": subreddit_id}


@router.get("/r/{name}")
async def subreddit_home(name: str, sort: str = "new", forum: Forum = Depends(get_forum)):
    """Subreddit homepage: the subreddit plus its listing."""
    subreddit = await forum.subreddits.get_subreddit_by_name(name)
    if subreddit is None:
        raise HTTPException(status_code=404, detail="Subreddit not found")
    if sort not in SORT_METHODS:
        raise HTTPException(status_code=404, detail="Unknown sort method")
    posts = await forum.posts.list_posts(subreddit_id=subreddit.id, sort=sort)
    return {"subreddit": subreddit, "posts": posts}
