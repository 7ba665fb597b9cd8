# reddit_clone/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status

from reddit_clone.config import LOG_LEVEL
from reddit_clone.database.connection import create_database, create_tables
from reddit_clone.errors import (
    ForumError, ValidationError, AuthError, NotFound, ConflictError,
)
from reddit_clone.models import Forum
from reddit_clone.routers import router

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthError: status.HTTP_401_UNAUTHORIZED,
    NotFound: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}


async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
    code = ERROR_STATUS.get(type(exc))
    if code is None:
        # StorageError (already logged at the storage boundary) and anything unmapped
        logger.error("%s on %s %s", type(exc).__name__, request.method, request.url.path)
        return JSONResponse({"detail": "Internal server error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse({"detail": exc.message}, status_code=code)


def create_app(database_url: Optional[str] = None) -> FastAPI:
    database = create_database(database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.connect()
        await create_tables(database)
        app.state.forum = Forum(database)
        yield
        await database.disconnect()

    app = FastAPI(lifespan=lifespan)
    app.add_exception_handler(ForumError, forum_error_handler)
    app.include_router(router)

    for r in app.router.routes:
        logger.debug("route %s %s", getattr(r, "name", None), getattr(r, "path", None))
    return app


logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# uvicorn reddit_clone.main:app
app = create_app()
