"""FastAPI application factory and main entry point."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import api_router
from app.common.request_id import RequestIDMiddleware
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import get_logger, setup_logging
from app.curriculum.index import CurriculumIndex
from app.db.base import Base
from app.db.engine import engine
from app.db.session import SessionLocal
from app.services.persistence import KeyValueStore
from app.state import AppState

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    Base.metadata.create_all(bind=engine)

    curriculum = CurriculumIndex.load(settings.CURRICULUM_PATH)
    kv = KeyValueStore(SessionLocal)

    app.state.kv = kv
    app.state.state_lock = asyncio.Lock()
    app.state.learnsmart = AppState.load(
        kv,
        curriculum,
        user_id=settings.DEFAULT_USER_ID,
        username=settings.DEFAULT_USERNAME,
    )
    logger.info("app_started", extra={"env": settings.ENV, "user_id": settings.DEFAULT_USER_ID})
    yield
    # Shutdown
    app.state.learnsmart.save(kv)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Curriculum quizzes, practice tests and gamified progress tracking",
        openapi_url="/openapi.json" if settings.ENV != "prod" else None,
        docs_url="/docs" if settings.ENV != "prod" else None,
        redoc_url="/redoc" if settings.ENV != "prod" else None,
        lifespan=lifespan,
    )

    # Add middleware (order matters - first added is outermost)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API routers
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint - API information."""
        return {
            "message": settings.PROJECT_NAME,
            "version": "1.0.0",
            "docs_url": "/docs" if settings.ENV != "prod" else None,
        }

    return app


# Create app instance
app = create_app()
