# reddit_clone/routers/security.py
from typing import Optional

from fastapi import Request, HTTPException, status, Depends

from reddit_clone.config import SESSION_COOKIE
from reddit_clone.errors import NotFound
from reddit_clone.models import Forum
from reddit_clone.models.schemas import UserProfile


def get_forum(request: Request) -> Forum:
    return request.app.state.forum


async def get_current_user_optional(
    request: Request,
    forum: Forum = Depends(get_forum),
) -> Optional[UserProfile]:
    """
    Resolve the SESSION cookie to a user, or None for anonymous visitors
    (no cookie, or a token that no longer matches a session).
    """
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        return None
    try:
        return await forum.sessions.resolve_session(token)
    except NotFound:
        return None


async def get_current_user(user: Optional[UserProfile] = Depends(get_current_user_optional)) -> UserProfile:
    """Login-required version. 401 when anonymous."""
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
    return user
