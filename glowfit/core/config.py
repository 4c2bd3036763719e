from datetime import datetime, timezone
from typing import Generator, List

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from pydantic_settings import BaseSettings, SettingsConfigDict


# =====================================================================
# SETTINGS
# =====================================================================


class Settings(BaseSettings):
    # App
    APP_NAME: str = "GlowFit API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./glowfit.db"

    # Session / JWT
    SECRET_KEY: str = "change-me-glowfit-secret"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    SESSION_COOKIE_NAME: str = "glowfit_session"
    SESSION_COOKIE_SECURE: bool = False

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Uploads
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_VIDEO_SIZE: int = 300 * 1024 * 1024
    FILE_RETENTION_DAYS: int = 90

    # Reminders / notifications
    REMINDER_TIMEZONE: str = "Asia/Shanghai"
    NOTIFICATION_RETENTION_DAYS: int = 30

    # Bootstrap admin
    ADMIN_EMAIL: str = "admin@glowfit.com"
    ADMIN_PASSWORD: str = "Admin@12345"
    ADMIN_NAME: str = "系统管理员"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()


# =====================================================================
# DATABASE
# =====================================================================

def build_engine(database_url: str):
    """Create the process-wide engine (one connection pool per process)."""
    return create_engine(
        database_url,
        connect_args=(
            {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        ),
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
