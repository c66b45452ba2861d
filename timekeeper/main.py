"""
Timekeeper — application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `api/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

import timekeeper.models  # noqa: F401  (registers every table on Base.metadata)
from timekeeper.api.v1.api import api_router
from timekeeper.api.v1.endpoints.auth import limiter
from timekeeper.core.config import settings
from timekeeper.core.exceptions import register_exception_handlers
from timekeeper.core.security import get_password_hash
from timekeeper.db.session import Database
from timekeeper.models.user import User

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def _seed_admin(db: Database) -> None:
    """Create the default admin account on first run."""
    async with db.session_factory() as session:
        result = await session.execute(
            select(User).where(User.email == settings.FIRST_ADMIN_EMAIL)
        )
        if result.scalar_one_or_none() is None:
            session.add(
                User(
                    email=settings.FIRST_ADMIN_EMAIL,
                    hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
                    role="admin",
                )
            )
            await session.commit()
            logger.info(
                "Default admin created: %s (password: <redacted>)",
                settings.FIRST_ADMIN_EMAIL,
            )


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    db: Database = application.state.db
    await db.create_all()
    logger.info("Database tables initialised")
    await _seed_admin(db)

    logger.info("Timekeeper v%s started", settings.VERSION)
    yield
    await db.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app(database: Database | None = None) -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Attendance, leave and employee records",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.db = database or Database(settings.DATABASE_URL)
    application.state.limiter = limiter

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
