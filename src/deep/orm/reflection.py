"""Reflection of tables whose columns depend on the installation.

``channel_data`` gains a ``field_id_<n>`` column per custom field and
``matrix_data`` a ``col_id_<n>`` column per matrix column, so neither can be
fully declared up front. The declared models map the fixed columns; queries
that need the custom columns use the reflected table instead.
"""

from __future__ import annotations

import re

from sqlalchemy import MetaData, Table
from sqlalchemy.engine import Connection, Engine

from deep.logging import get_logger

logger = get_logger(__name__)

FIELD_COLUMN = re.compile(r"^field_id_(\d+)$")
MATRIX_COLUMN = re.compile(r"^col_id_(\d+)$")


def reflect_table(bind: Connection | Engine, name: str) -> Table:
    """Load *name* with every column currently present in the database."""
    table = Table(name, MetaData(), autoload_with=bind)
    logger.debug("table_reflected", table=name, columns=len(table.c))
    return table


def numbered_columns(table: Table, pattern: re.Pattern[str] = FIELD_COLUMN) -> dict[int, str]:
    """Map the number in each ``<prefix>_<n>`` column to the column name."""
    found: dict[int, str] = {}
    for column in table.c:
        match = pattern.match(column.name)
        if match:
            found[int(match.group(1))] = column.name
    return found
