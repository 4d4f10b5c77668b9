"""Declarative base for every deep model.

Uses SQLAlchemy 2.0 ``DeclarativeBase`` with a ``type_annotation_map``
matching the integer/text storage of the CMS schema: dates are stored as
integer epoch seconds (or packed strings for ``edit_date``), flags as
``y``/``n`` strings.
"""

from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import DeclarativeBase


class DeepBase(DeclarativeBase):
    """Shared declarative base for every CMS table.

    * ``str``   → ``Text``
    * ``int``   → ``Integer``
    """

    type_annotation_map = {
        str: Text,
        int: Integer,
    }
