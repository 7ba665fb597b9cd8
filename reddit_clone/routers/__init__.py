# reddit_clone/routers/__init__.py
from fastapi import APIRouter
from .auth import router as auth_router
from .subreddits import router as subreddits_router
from .posts import router as posts_router

router = APIRouter()

router.include_router(auth_router)
router.include_router(subreddits_router)
router.include_router(posts_router)
