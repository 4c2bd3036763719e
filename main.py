import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

import glowfit.models  # noqa: F401  registers every table on Base.metadata
from glowfit.core.config import Base, engine, settings
from glowfit.core.exceptions import register_exception_handlers
from glowfit.api.routers import (
    admin,
    auth,
    dashboard,
    fitness_history,
    fitness_items,
    glow_areas,
    glow_devices,
    glow_history,
    glow_plans,
    notifications,
    reminders,
    user,
    videos,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# =====================================================================
# LIFESPAN
# =====================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.APP_NAME} started")
    yield
    engine.dispose()
    logger.info("Database engine disposed")


# =====================================================================
# CREATE APP
# =====================================================================

app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    description="Glow & fitness planning API",
    version="1.0.0",
    lifespan=lifespan,
)

# =====================================================================
# CORS MIDDLEWARE - MUST BE FIRST!
# =====================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)
logger.info(f"CORS allowed origins: {settings.CORS_ORIGINS}")

register_exception_handlers(app)

# =====================================================================
# HEALTH CHECK (before routers)
# =====================================================================


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# =====================================================================
# ROUTES
# =====================================================================

app.include_router(auth.router)
app.include_router(user.router)
app.include_router(glow_areas.router)
app.include_router(glow_devices.router)
app.include_router(glow_plans.router)
app.include_router(glow_history.router)
app.include_router(fitness_items.router)
app.include_router(fitness_history.router)
app.include_router(videos.router)
app.include_router(reminders.glow_router)
app.include_router(reminders.fitness_router)
app.include_router(notifications.router)
app.include_router(dashboard.router)
app.include_router(admin.router)

# uploaded files; the directory is created on first upload
app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)

# =====================================================================
# ROOT ENDPOINT
# =====================================================================


@app.get("/")
def root():
    """API root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": "1.0.0",
        "docs": "/docs",
    }
