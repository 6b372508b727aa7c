from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.ai.routes import quiz as quiz_routes
from app.auth.routes import profile as profile_routes
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.log_config import RequestLoggingMiddleware, setup_logging
from app.core.rate_limit import limiter
from app.db import base  # noqa: F401
from app.db.session import SessionLocal
from app.forum.routes import discussions as discussion_routes
from app.forum.routes import replies as reply_routes

setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "startup", project=settings.PROJECT_NAME, ai_enabled=bool(settings.ANTHROPIC_API_KEY)
    )
    yield
    logger.info("shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="Course discussion forum and AI quiz API",
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(
    discussion_routes.router, prefix=f"{settings.API_V1_PREFIX}/forum", tags=["forum"]
)
app.include_router(
    reply_routes.router, prefix=f"{settings.API_V1_PREFIX}/forum", tags=["forum-replies"]
)
app.include_router(
    profile_routes.router, prefix=f"{settings.API_V1_PREFIX}/user", tags=["user-profile"]
)
app.include_router(quiz_routes.router, prefix=settings.AI_PREFIX, tags=["ai-quiz"])


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": settings.PROJECT_NAME, "version": "1.0.0", "status": "running"}


@app.get("/health")
async def health_check() -> dict[str, str]:
    db_status = "unknown"
    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
            db_status = "healthy"
        finally:
            db.close()
    except SQLAlchemyError:
        db_status = "unhealthy"

    overall = "healthy" if db_status == "healthy" else "degraded"
    return {"status": overall, "database": db_status}
