"""Collection hydrators, keyed by the fieldtype they handle.

Tags:
    deep, hydration, collections

Doc-Types:
    api-reference
"""

from __future__ import annotations

from deep.hydrators.assets import AssetsHydrator
from deep.hydrators.base import AbstractHydrator
from deep.hydrators.matrix import MatrixHydrator

HYDRATORS: dict[str, type[AbstractHydrator]] = {
    AssetsHydrator.fieldtype: AssetsHydrator,
    MatrixHydrator.fieldtype: MatrixHydrator,
}

__all__ = [
    "AbstractHydrator",
    "AssetsHydrator",
    "MatrixHydrator",
    "HYDRATORS",
]
