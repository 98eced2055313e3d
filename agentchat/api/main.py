"""
FastAPI application with assembled routers.

Dependencies: fastapi, uvicorn, agentchat.api.routers
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agentchat.api.deps.dependencies import ServiceCache
from agentchat.api.routers import chat_stream_router, health_router
from agentchat.configs import get_settings
from agentchat.core.exceptions import AgentChatException
from agentchat.observability.logger import configure_logging
from agentchat.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)


def create_app(services: ServiceCache | None = None) -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Args:
        services: Prebuilt service container (tests); built from settings otherwise

    Returns:
        FastAPI: Configured application instance
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cache = services or ServiceCache(get_settings())
        configure_logging(cache.settings.log_level)

        logger.info("Pre-warming service cache...")
        if cache.settings.database.auto_create_tables:
            from agentchat.boundary.db.connection import create_tables

            await create_tables(cache.engine)
        cache.warm()
        app.state.services = cache
        logger.info("Service cache pre-warmed")

        yield

        await cache.aclose()
        logger.info("Service cache closed")

    app = FastAPI(
        title="AgentChat RAG API",
        description="Persona chat with hybrid retrieval and session-scoped streaming",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    @app.exception_handler(AgentChatException)
    async def agentchat_exception_handler(request: Request, exc: AgentChatException) -> JSONResponse:
        logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": exc.message, "error_type": type(exc).__name__},
        )

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(chat_stream_router, prefix="/api/v1")

    return app


if __name__ == "__main__":
    uvicorn.run(
        "agentchat.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
    )
