"""
Application entry point.
Run with:  uvicorn store_ratings.main:app --reload

⚠️  DEVELOPMENT NOTE:
    A default admin user is seeded automatically on startup (see store_ratings/db/seeder.py).
    Remove the seed_admin() call below before deploying to production.
"""
import logging

from fastapi import FastAPI

from store_ratings.core.logging_config import configure_logging
from fastapi.middleware.cors import CORSMiddleware

from store_ratings.core.config import settings
from store_ratings.api.v1.router import api_router
from store_ratings.db.database import init_db
from store_ratings.db.seeder import seed_admin

configure_logging()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    logger = logging.getLogger(__name__)
    logger.info("Starting FastAPI application setup")
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=(
            "Role-based API for rating stores: users rate stores, owners follow "
            "their store's statistics and administrators manage the platform."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── Middleware ──────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ─────────────────────────────────────────────────────────────
    app.include_router(api_router)

    @app.get("/", tags=["Root"], summary="Welcome message")
    def root() -> dict:
        return {"message": f"Welcome to the {settings.APP_NAME}", "version": settings.APP_VERSION}

    # ── Startup / shutdown events ───────────────────────────────────────────
    @app.on_event("startup")
    def on_startup() -> None:
        """Initialize the database and development seed data."""
        logger.info("Initializing database and seed data")
        init_db()
        # ⚠️ DEV ONLY – remove this seeder before going to production
        seed_admin()

    return app


app = create_app()
