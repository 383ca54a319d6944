"""
Storage setup: declarative base, engine and request-scoped sessions.

The engine is built on first use from ``Settings.database_url`` (or the
``DATABASE_URL`` environment variable) and cached for the process.
"""

import os
from typing import Any, Dict, Generator, Optional

import structlog
from sqlalchemy import Engine, create_engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = structlog.get_logger()


class Base(DeclarativeBase):
    """Declarative base for the planning tables."""


def get_database_url(raw_url: Optional[str] = None) -> str:
    """Explicit URL, else ``DATABASE_URL``, else the configured default."""
    from ..config import get_settings

    url = make_url(raw_url or os.getenv("DATABASE_URL") or get_settings().database_url)
    return url.render_as_string(hide_password=False)


def _engine_options(url: str) -> Dict[str, Any]:
    if make_url(url).get_backend_name() == "sqlite":
        # One shared connection so in-memory databases survive across sessions
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_size": 20, "max_overflow": 30, "pool_pre_ping": True, "pool_recycle": 3600}


_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """Process-wide engine, created lazily."""
    global _engine
    if _engine is None:
        url = get_database_url()
        _engine = create_engine(url, **_engine_options(url))
        logger.info("Database engine created", backend=_engine.dialect.name)
    return _engine


def get_session_local() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, always closed."""
    db = get_session_local()()
    try:
        yield db
    finally:
        db.close()


def init_database(engine: Optional[Engine] = None) -> None:
    """Create any missing tables."""
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())
    logger.info("Database initialized")


def drop_database(engine: Optional[Engine] = None) -> None:
    """Drop every planning table."""
    from . import models  # noqa: F401

    Base.metadata.drop_all(bind=engine or get_engine())
    logger.info("Database tables dropped")
