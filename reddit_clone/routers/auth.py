# reddit_clone/routers/auth.py
import logging

from fastapi import APIRouter, Form, Depends, Response
from starlette import status

from reddit_clone.config import SESSION_COOKIE
from reddit_clone.errors import NotFound
from reddit_clone.models import Forum
from reddit_clone.models.schemas import UserProfile
from .security import get_forum, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    username: str = Form(...),
    password: str = Form(...),
    forum: Forum = Depends(get_forum),
):
    user_id = await forum.users.create_user(username, password)
    return {"id": user_id}


@router.post("/login", response_model=UserProfile)
async def login(
    response: Response,
    username: str = Form(...),
    password: str = Form(...),
    forum: Forum = Depends(get_forum),
):
    user = await forum.sessions.check_login(username, password)
    token = await forum.sessions.create_session(user.id)
    response.set_cookie(SESSION_COOKIE, token, httponly=True, samesite="lax")
    return user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    current_user: UserProfile = Depends(get_current_user),
    forum: Forum = Depends(get_forum),
):
    try:
        await forum.sessions.revoke_session(current_user)
    except NotFound:
        # another request logged this user out between resolve and revoke
        logger.info("logout for user %s found no session to revoke", current_user.id)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/me", response_model=UserProfile)
async def me(current_user: UserProfile = Depends(get_current_user)):
    return current_user
