"""StayShop — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.responses import register_exception_handlers
from app.api.v1.analytics import router as analytics_router
from app.api.v1.auth import router as auth_router
from app.api.v1.categories import router as categories_router
from app.api.v1.products import router as products_router
from app.api.v1.reservations import router as reservations_router
from app.api.v1.room_types import router as room_types_router
from app.api.v1.rooms import router as rooms_router
from app.auth.verifier import JWTTokenVerifier
from app.config import Settings, settings as default_settings
from app.database import Database
from app.schema import SchemaManager

# Configure root logger so all app.* loggers output to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database handle, bring the schema up to date, and dispose the pool on shutdown.

    A failed schema bootstrap raises SchemaMigrationError and aborts startup.
    """
    settings: Settings = app.state.settings
    database = Database.from_settings(settings)
    app.state.database = database
    try:
        if settings.auto_migrate:
            await SchemaManager(database.engine, settings).ensure_schema()
        yield
    finally:
        await database.dispose()
        logger.info("Database connections closed")


def create_app(settings: Settings = default_settings) -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Catalog, room booking and admin backend.",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.token_verifier = JWTTokenVerifier(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(categories_router)
    app.include_router(products_router)
    app.include_router(room_types_router)
    app.include_router(rooms_router)
    app.include_router(reservations_router)
    app.include_router(analytics_router)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": settings.app_name}

    @app.get("/", tags=["root"])
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
        }

    return app


app = create_app()
