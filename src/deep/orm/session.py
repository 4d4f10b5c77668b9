"""SQLAlchemy engine factory and session class.

This module provides:

* ``create_deep_engine``          -- Create a SA engine from a URL.
* ``create_engine_from_settings`` -- Same, driven by ``DeepSettings``.
* ``DeepSession``                 -- A pre-configured ``Session`` subclass.
* ``deep_session_factory``        -- ``sessionmaker`` producing ``DeepSession``.

Tags:
    deep, orm, sqlalchemy, session, engine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from deep.logging import get_logger

if TYPE_CHECKING:
    from deep.settings import DeepSettings

logger = get_logger(__name__)


def create_deep_engine(
    url: str = "sqlite:///deep.db",
    *,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    pool_timeout: int | None = None,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``mysql+pymysql://…``, etc.)
    echo:
        If ``True``, log all SQL.
    pool_size, max_overflow, pool_timeout:
        Connection pool parameters (ignored for SQLite).
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """

    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})

        engine = _sa_create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        logger.debug("engine_created", dialect="sqlite")
        return engine

    pool_kwargs: dict[str, Any] = {}
    if pool_size is not None:
        pool_kwargs["pool_size"] = pool_size
    if max_overflow is not None:
        pool_kwargs["max_overflow"] = max_overflow
    if pool_timeout is not None:
        pool_kwargs["pool_timeout"] = pool_timeout

    engine = _sa_create_engine(url, echo=echo, **pool_kwargs, **kwargs)
    logger.debug("engine_created", dialect=engine.dialect.name)
    return engine


def create_engine_from_settings(settings: DeepSettings) -> Engine:
    """Build the engine described by *settings*."""
    return create_deep_engine(
        settings.database_url,
        echo=settings.echo,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
    )


class DeepSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Loaded models keep their attributes after the transaction ends, which
    lets request-scoped code read entries after the session is closed.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def deep_session_factory(engine: Engine) -> sessionmaker[DeepSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``DeepSession`` instances."""
    return sessionmaker(bind=engine, class_=DeepSession)


__all__ = [
    "create_deep_engine",
    "create_engine_from_settings",
    "DeepSession",
    "deep_session_factory",
]
