"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated

import structlog
from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.api.v1.chat_router import router as chat_router
from app.api.v1.chat_socket import router as chat_socket_router
from app.api.v1.upload_router import router as upload_router
from app.core.chat_runtime import close_chat_runtime, init_chat_runtime
from app.core.config import settings
from app.core.exceptions import (
    AppException,
    app_exception_handler,
    validation_exception_handler,
)
from app.core.rate_limit import limiter, rate_limit_exceeded_handler
from app.dependencies import get_chat_query_service
from app.schemas.response_schema import ApiResponse, success_response
from app.schemas.stats_schema import HealthResponse
from app.services.chat_query_service import ChatQueryService

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.app.env,
        port=settings.server.port,
    )
    settings.file_upload.upload_dir.mkdir(parents=True, exist_ok=True)
    await init_chat_runtime()
    yield
    await close_chat_runtime()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app.name,
    description="Real-time group chat with presence, typing indicators and file sharing",
    version=settings.app.version,
    lifespan=lifespan,
    debug=settings.app.debug,
)

app.state.limiter = limiter

# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]

# Middleware (registration order: inner→outer, execution order: outer→inner)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.cors_origins_list,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.mount(
    settings.file_upload.url_prefix,
    StaticFiles(directory=settings.file_upload.upload_dir, check_dir=False),
    name="uploads",
)


@app.get("/health", response_model=ApiResponse[HealthResponse])
async def health_check(
    service: Annotated[ChatQueryService, Depends(get_chat_query_service)],
) -> dict:
    """Health check endpoint."""
    return success_response(service.health())


@app.get("/", response_model=ApiResponse[dict])
async def root() -> dict:
    """Root endpoint."""
    return success_response(
        {
            "app": settings.app.name,
            "version": settings.app.version,
            "docs": "/docs",
            "socket": "/ws",
        }
    )


# Register routers
app.include_router(chat_router)
app.include_router(upload_router)
app.include_router(chat_socket_router)
