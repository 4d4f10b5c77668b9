"""
Lazy-initialised container wiring settings, engine and repositories.

Usage::

    from deep.container import DeepContainer

    with DeepContainer() as deep:
        with deep.session() as session:
            entries = deep.entries(session)
            blog = entries.fetch(entries.query().channel_name("blog").limit(5))
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from deep.orm.session import DeepSession, create_engine_from_settings, deep_session_factory
from deep.repositories import AssetRepository, EntryRepository, MatrixColRepository
from deep.settings import DeepSettings


class DeepContainer:
    """Components are created on first access and disposed via :meth:`close`."""

    def __init__(self, settings: DeepSettings | None = None, *, engine: Engine | None = None) -> None:
        self._settings = settings
        self._engine = engine
        self._session_factory: sessionmaker[DeepSession] | None = None

    # ── Properties (lazy) ────────────────────────────────────────

    @property
    def settings(self) -> DeepSettings:
        if self._settings is None:
            self._settings = DeepSettings()
        return self._settings

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_engine_from_settings(self.settings)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[DeepSession]:
        if self._session_factory is None:
            self._session_factory = deep_session_factory(self.engine)
        return self._session_factory

    @contextmanager
    def session(self) -> Iterator[DeepSession]:
        with self.session_factory() as session:
            yield session

    # ── Repositories ─────────────────────────────────────────────

    def entries(self, session: DeepSession) -> EntryRepository:
        return EntryRepository.from_settings(session, self.settings)

    def assets(self, session: DeepSession) -> AssetRepository:
        return AssetRepository(session)

    def matrix_cols(self, session: DeepSession) -> MatrixColRepository:
        return MatrixColRepository(session)

    # ── Lifecycle ────────────────────────────────────────────────

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._session_factory = None

    def __enter__(self) -> DeepContainer:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
