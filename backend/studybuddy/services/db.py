# studybuddy/services/db.py
import logging
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from studybuddy.config import settings

logger = logging.getLogger(__name__)

# ---- Single source of truth for Base (models must import from here)
Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _build_url() -> URL:
    if settings.DATABASE_URL:
        return make_url(settings.DATABASE_URL)

    # Fail fast if host is blank
    if not settings.DB_HOST:
        raise RuntimeError("[DB] DB_HOST is empty! Check backend/.env")

    # Build URL safely (handles '@' in password)
    return URL.create(
        drivername="postgresql+psycopg",   # psycopg3
        username=settings.DB_USER,
        password=settings.DB_PASSWORD,
        host=settings.DB_HOST,
        port=settings.DB_PORT,
        database=settings.DB_NAME,
    )


def _mask(u: URL) -> str:
    if u.get_backend_name() == "sqlite":
        return f"sqlite:///{u.database or ':memory:'}"
    user = (u.username or "") + (":" if u.username else "")
    host = u.host or "<NONE>"
    port = f":{u.port}" if u.port else ""
    db = f"/{u.database}" if u.database else ""
    return f"{u.drivername}://{user}****@{host}{port}{db}"


def _engine_kwargs(u: URL) -> dict:
    if u.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}
    kwargs = {"connect_args": {"check_same_thread": False}}
    # every session must see the same in-memory database
    if u.database in (None, "", ":memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


url = _build_url()

engine = create_engine(url, future=True, **_engine_kwargs(url))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@contextmanager
def get_session():
    """Yield a SQLAlchemy session as a context manager."""
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


def init_db():
    """Ping DB, import models to register metadata, then create tables."""
    logger.info("[DB] init_db: using %s, starting connection test…", _mask(url))
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("[DB] init_db: connection OK, creating tables if missing…")

    # IMPORTANT: import models INSIDE this function to avoid circular imports
    import studybuddy.models.catalog  # noqa: F401
    import studybuddy.models.resource  # noqa: F401
    import studybuddy.models.discussion  # noqa: F401
    import studybuddy.models.schedule  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("[DB] init_db: tables ensured.")
