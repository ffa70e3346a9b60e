"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tms_backend.core.config import settings
from tms_backend.core.exception_handlers import register_exception_handlers
from tms_backend.core.middleware import setup_middleware
from tms_backend.core.rate_limiter import limiter

from tms_backend.api.auth import router as auth_router
from tms_backend.api.roles import router as roles_router
from tms_backend.api.permissions import router as permissions_router
from tms_backend.api.permission_groups import router as permission_groups_router
from tms_backend.api.departments import router as departments_router
from tms_backend.api.users import router as users_router
from tms_backend.api.courses import router as courses_router, subjects_router
from tms_backend.api.reports import router as reports_router, requests_router
from tms_backend.api.profile import router as profile_router
from tms_backend.api.media import router as media_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("tms")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting %s", settings.APP_NAME)
    # Ensure MinIO bucket exists
    try:
        from tms_backend.services.media_service import media_service
        media_service.ensure_bucket()
        logger.info("MinIO bucket ready")
    except Exception as e:
        logger.warning("MinIO not available: %s", e)

    # Redis check
    from tms_backend.services.cache_service import RedisRoleIdCache, role_id_cache
    if isinstance(role_id_cache, RedisRoleIdCache):
        if role_id_cache.health_check():
            logger.info("Redis connected")
        else:
            logger.warning("Redis not available, role ids will be loaded from the database")

    yield

    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="Training management platform API with role-based access control",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Middleware
setup_middleware(app)

# Rate limiting
app.state.limiter = limiter

register_exception_handlers(app)

# Register routers
app.include_router(auth_router, prefix="/api")
app.include_router(roles_router, prefix="/api")
app.include_router(permissions_router, prefix="/api")
app.include_router(permission_groups_router, prefix="/api")
app.include_router(departments_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(courses_router, prefix="/api")
app.include_router(subjects_router, prefix="/api")
app.include_router(reports_router, prefix="/api")
app.include_router(requests_router, prefix="/api")
app.include_router(profile_router, prefix="/api")
app.include_router(media_router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Quick health check endpoint."""
    return {"status": "ok"}
