"""SQLAlchemy 2.0 plumbing for deep.

Modules
-------
base        DeepBase (declarative base)
session     Engine factory, DeepSession, session factory

Tags:
    deep, orm, sqlalchemy, declarative

Doc-Types:
    package-overview, module-index
"""

from __future__ import annotations

from deep.orm.base import DeepBase
from deep.orm.session import (
    DeepSession,
    create_deep_engine,
    create_engine_from_settings,
    deep_session_factory,
)

__all__ = [
    "DeepBase",
    "create_deep_engine",
    "create_engine_from_settings",
    "DeepSession",
    "deep_session_factory",
]
