"""FastAPI application factory.

Main entry point for the EduArch Web API:

    uvicorn eduarch.web.api:app
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eduarch import __version__
from eduarch.config.app_config import load_app_config
from eduarch.store import ConflictError, DomainStore, NotFoundError, StoreError, ValidationError
from eduarch.web.routes import (
    assignments_router,
    courses_router,
    enrollments_router,
    events_router,
    health_router,
    materials_router,
    modules_router,
    notifications_router,
    submissions_router,
    users_router,
)

logger = structlog.get_logger(__name__)

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    store = getattr(app.state, "store", None)
    logger.info(
        "api_startup",
        db_path=str(store.db_path) if store else load_app_config().database.path,
    )
    yield


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Convert store errors to JSON error responses."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info(
        "api_store_error",
        path=request.url.path,
        status=status_code,
        error=str(exc),
    )
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def create_app(store: DomainStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Store to serve. Defaults to the configured database,
            opened on the first request.

    Returns:
        Configured FastAPI app instance
    """
    config = load_app_config()

    app = FastAPI(
        title=config.api.title,
        description="CRUD API for the EduArch e-learning domain store",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StoreError, store_error_handler)

    # Include routers
    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(notifications_router)
    app.include_router(courses_router)
    app.include_router(modules_router)
    app.include_router(materials_router)
    app.include_router(assignments_router)
    app.include_router(submissions_router)
    app.include_router(enrollments_router)
    app.include_router(events_router)

    return app


# Default app instance for uvicorn
app = create_app()
