"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.sl_catalog.api.router import router as categories_router
from src.sl_common.database import engine
from src.sl_common.errors import AppError
from src.sl_common.redis_client import close_redis, get_redis
from src.sl_common.response import error_response
from src.sl_gateway.api.router import router as auth_router
from src.sl_gateway.api.users_router import router as users_router
from src.sl_gateway.middleware.request_log import RequestLogMiddleware
from src.sl_ledger.api.router import bakis_router, balances_router, transactions_router
from src.sl_note.api.router import router as notes_router
from src.sl_post.api.folders_router import medias_router as post_folder_medias_router
from src.sl_post.api.folders_router import router as post_folders_router
from src.sl_post.api.router import medias_router as post_medias_router
from src.sl_post.api.router import router as posts_router
from src.sl_realtime.relay import router as realtime_router
from src.sl_result.api.router import router as results_router

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    logger.info("%s %s started", settings.APP_NAME, VERSION)
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version=VERSION,
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    if exc.http_status >= 500:
        logger.error("AppError %d on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


for router in (
    auth_router,
    users_router,
    categories_router,
    balances_router,
    bakis_router,
    transactions_router,
    notes_router,
    results_router,
    posts_router,
    post_medias_router,
    post_folders_router,
    post_folder_medias_router,
    realtime_router,
):
    app.include_router(router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": VERSION}
