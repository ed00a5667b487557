"""FastAPI application factory.

Main entry point for the WriteQuest Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from writequest import __version__
from writequest.config.app_config import load_app_config
from writequest.db.database import init_db
from writequest.web.routes import (
    achievements_router,
    auth_router,
    daily_challenge_router,
    exercises_router,
    health_router,
    parent_router,
    progress_router,
    quests_router,
    streak_router,
    teacher_router,
    user_router,
    writing_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config = load_app_config()
    init_db(config.database_path)
    logger.info(
        "api_startup",
        database=str(config.database_path),
        llm_provider=config.llm.provider,
        llm_model=config.llm.model,
    )
    yield


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Report request validation errors field by field."""
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({
            "field": ".".join(location) or "body",
            "message": error.get("msg", "Invalid value"),
        })

    logger.info("request_validation_failed", path=request.url.path, errors=len(errors))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation failed", "errors": errors},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="WriteQuest API",
        description="Gamified writing practice with AI feedback",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(progress_router)
    app.include_router(achievements_router)
    app.include_router(exercises_router)
    app.include_router(quests_router)
    app.include_router(writing_router)
    app.include_router(daily_challenge_router)
    app.include_router(streak_router)
    app.include_router(teacher_router)
    app.include_router(parent_router)

    return app


# Default app instance for uvicorn
app = create_app()
