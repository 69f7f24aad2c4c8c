"""
Database engine, session factory, and metadata shared across the application.

Engines are built by the application factory and kept on ``app.state`` so each
app instance (and each test) owns its own connection pool.
"""

from __future__ import annotations

import logging
from typing import Any, Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base: DeclarativeMeta = declarative_base()

_DEFAULT_POOL_KWARGS: dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 5,
    "pool_timeout": 10,
    "pool_recycle": 300,
    "pool_pre_ping": True,
}


def _build_engine_kwargs(url: URL) -> dict[str, Any]:
    if url.get_backend_name() != "sqlite":
        return dict(_DEFAULT_POOL_KWARGS)

    kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        # One shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = StaticPool
    return kwargs


def with_service_key(db_url: str, service_key: Optional[str] = None) -> URL:
    """
    Parse ``db_url``, using the hosted database's service credential as the
    password when the URL carries none. An explicit password wins.
    """
    url = make_url(db_url)
    if service_key and url.get_backend_name() != "sqlite" and not url.password:
        url = url.set(password=service_key)
    return url


def build_engine(db_url: str, *, echo: bool = False, service_key: Optional[str] = None) -> Engine:
    """Create an engine for ``db_url`` with dialect-appropriate pooling."""
    url = with_service_key(db_url, service_key)
    engine = create_engine(url, echo=echo, **_build_engine_kwargs(url))

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    logger.info("Database engine created for dialect %s", engine.dialect.name)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Get a request-scoped database session with proper cleanup."""
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
