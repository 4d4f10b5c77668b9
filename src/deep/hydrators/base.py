"""Collection hydrator contract.

A hydrator post-processes a whole ``EntryCollection`` after it has been
loaded. ``preload`` gathers what every entry will need in as few queries as
possible; ``hydrate`` then attaches the results to each entry. The
collection runs all ``preload`` passes before any ``hydrate`` pass.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from deep.models.entry import EntryCollection


class AbstractHydrator(ABC):
    #: fieldtype name this hydrator handles
    fieldtype: ClassVar[str] = ""

    def preload(self, collection: EntryCollection) -> None:
        """Batch work that must happen before per-entry hydration (optional)."""

    @abstractmethod
    def hydrate(self, collection: EntryCollection) -> None:
        """Attach hydrated values to every entry of *collection*."""
