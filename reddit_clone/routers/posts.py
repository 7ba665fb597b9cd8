# reddit_clone/routers/posts.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, HTTPException
from starlette import status

from reddit_clone.config import SORT_METHODS
from reddit_clone.models import Forum
from reddit_clone.models.schemas import CommentView, PostView, UserProfile
from .security import get_forum, get_current_user

router = APIRouter(tags=["posts"])


@router.get("/", response_model=List[PostView])
async def home(forum: Forum = Depends(get_forum)):
    return await forum.posts.list_posts(sort="new")


@router.get("/sort/{method}", response_model=List[PostView])
async def sorted_home(method: str, forum: Forum = Depends(get_forum)):
    if method not in SORT_METHODS:
        raise HTTPException(status_code=404, detail="Unknown sort method")
    return await forum.posts.list_posts(sort=method)


@router.get("/post/{post_id}")
async def single_post(post_id: int, forum: Forum = Depends(get_forum)):
    post = await forum.posts.get_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    comments: List[CommentView] = await forum.comments.list_comments(post_id)
    return {"post": post, "comments": comments}


@router.post("/createPost", status_code=status.HTTP_201_CREATED)
async def create_post(
    title: str = Form(...),
    url: str = Form(...),
    subreddit_id: Optional[int] = Form(None),
    current_user: UserProfile = Depends(get_current_user),
    forum: Forum = Depends(get_forum),
):
    # the author always comes from the session, never from the form
    post_id = await forum.posts.create_post(current_user.id, title, url, subreddit_id)
    return {"id": post_id}


@router.post("/vote", status_code=status.HTTP_204_NO_CONTENT)
async def vote(
    post_id: int = Form(...),
    vote: int = Form(...),
    current_user: UserProfile = Depends(get_current_user),
    forum: Forum = Depends(get_forum),
):
    await forum.votes.cast_vote(current_user.id, post_id, vote)


@router.post("/post/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: int,
    text: str = Form(...),
    current_user: UserProfile = Depends(get_current_user),
    forum: Forum = Depends(get_forum),
):
    if await forum.posts.get_post(post_id) is None:
        raise HTTPException(status_code=404, detail="Post not found")
    comment_id = await forum.comments.create_comment(current_user.id, post_id, text)
    return {"id": comment_id}
