from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_sync.api.middleware.correlation_id import CorrelationIdMiddleware
from chat_sync.api.v1.routers import (
    conversations,
    health,
    messages,
    summaries,
    ws,
)
from chat_sync.application.context import ReconciliationContext
from chat_sync.application.exceptions import (
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from chat_sync.config import settings
from chat_sync.infrastructure.bus.redis_pubsub import RedisPubSubSubscriber
from chat_sync.infrastructure.http.chat_api import HttpChatApi
from chat_sync.workers.push_consumer import make_dispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle: one reconciliation context per process session."""
    app.state.ctx = ReconciliationContext.from_settings(settings)
    app.state.chat_api = HttpChatApi.from_settings(settings)
    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    logger.info("Session started for user %s", settings.LOCAL_USER_ID)

    subscriber = RedisPubSubSubscriber(
        app.state.redis,
        settings.push_channel,
        make_dispatcher(app.state.ctx),
    )
    await subscriber.start()
    app.state.push_subscriber = subscriber

    yield

    await subscriber.stop()
    app.state.ctx.close()
    await app.state.chat_api.aclose()
    await app.state.redis.aclose()
    logger.info("Session closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Chat Sync",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(summaries.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(UpstreamError)
    async def _upstream(_req: Request, exc: UpstreamError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": exc.detail})
