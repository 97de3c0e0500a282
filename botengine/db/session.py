"""
botengine/db/session.py — Engine, session scopes and schema helpers.

    get_db()          FastAPI dependency, one session per request
    get_session()     the same scope as a context manager, for scripts
    create_tables()   create every table in botengine/db/models.py
    ping()            True when the database answers SELECT 1
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from botengine.config import settings
from botengine.db.models import Base

logger = logging.getLogger(__name__)


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # Request handlers run on a thread pool
        options = {"connect_args": {"check_same_thread": False}}
    else:
        options = {"pool_size": 5, "max_overflow": 10}
    return create_engine(url, pool_pre_ping=True, **options)


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def _session_scope() -> Generator[Session, None, None]:
    """Commit on success, roll back on any error, always close."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    yield from _session_scope()


get_session = contextmanager(_session_scope)


def create_tables(bind: Engine = engine) -> list[str]:
    Base.metadata.create_all(bind=bind)
    return inspect(bind).get_table_names()


def ping(bind: Engine = engine) -> bool:
    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database check failed: %s", e)
        return False
