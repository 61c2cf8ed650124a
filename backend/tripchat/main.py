"""
TripChat Backend - Main FastAPI Application
"""

import logging
import logging.config
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tripchat import __version__
from tripchat.config import Settings, get_settings
from tripchat.exceptions import TripChatError
from tripchat.models.database import create_tables
from tripchat.models.schemas import HealthCheck

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Console logging for the application and its main libraries."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
                },
            },
            "handlers": {
                "default": {
                    "formatter": "default",
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                "tripchat": {"handlers": ["default"], "level": settings.log_level.upper()},
                "sqlalchemy": {"handlers": ["default"], "level": "WARNING"},
            },
        }
    )


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler - startup and shutdown."""
    # Startup
    create_tables()
    yield
    # Shutdown (cleanup if needed)


async def tripchat_error_handler(request: Request, exc: TripChatError) -> JSONResponse:
    """Flat {error} body; the cause is only logged."""
    if exc.status_code >= 500:
        cause = exc.cause or exc
        logger.error(
            f"{type(exc).__name__} on {request.url.path}: {exc}",
            exc_info=(type(cause), cause, cause.__traceback__),
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Ошибка сервера"})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="TripChat API",
        description="Conversational trip planning API",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TripChatError, tripchat_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Register routers
    from tripchat.routers import attractions, chat, trips

    app.include_router(chat.router, tags=["chat"])
    app.include_router(trips.router, prefix="/trips", tags=["trips"])
    app.include_router(attractions.router, prefix="/attractions", tags=["attractions"])

    @app.get("/health", response_model=HealthCheck)
    async def health_check():
        """Health check endpoint."""
        return HealthCheck(version=__version__, timestamp=datetime.utcnow())

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "tripchat.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
