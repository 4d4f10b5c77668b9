"""Read repositories for the CMS tables.

Architecture::

    ┌────────────────────────────────────────────────────────────────┐
    │  caller code (templates, exports, APIs)                        │
    └────────────────────────────┬───────────────────────────────────┘
                                 │ builds queries with scopes, then
                                 ▼
    ┌────────────────────────────────────────────────────────────────┐
    │  deep.repositories  (this package)                             │
    │                                                                │
    │  base.py   - BaseRepository (holds the Session)                │
    │  entry.py  - EntryRepository                                   │
    │  asset.py  - AssetRepository, MatrixColRepository              │
    └────────────────────────────────────────────────────────────────┘

Tags:
    repository, sql, deep, data-access

Doc-Types:
    - API Reference
"""

from deep.repositories.asset import AssetRepository, MatrixColRepository
from deep.repositories.base import BaseRepository
from deep.repositories.entry import EntryRepository

__all__ = [
    "BaseRepository",
    "EntryRepository",
    "AssetRepository",
    "MatrixColRepository",
]
