"""Mapped CMS tables and the read-only Entry record.

Import from ``deep.models``::

    from deep.models import Entry, Asset, MatrixCol

Tags:
    deep, models, sqlalchemy

Doc-Types:
    api-reference
"""

from deep.models.asset import Asset, AssetsCollection, AssetSelection, UploadPref  # noqa: F401
from deep.models.channel import Channel, ChannelField, FieldCollection, Fieldtype  # noqa: F401
from deep.models.entry import (  # noqa: F401
    ChannelData,
    ChannelTitle,
    Entry,
    EntryCollection,
)
from deep.models.matrix import MatrixCol, MatrixData  # noqa: F401
from deep.models.member import Member  # noqa: F401

__all__ = [
    # channels
    "Channel",
    "ChannelField",
    "Fieldtype",
    "FieldCollection",
    # entries
    "ChannelTitle",
    "ChannelData",
    "Entry",
    "EntryCollection",
    # members
    "Member",
    # assets
    "UploadPref",
    "Asset",
    "AssetSelection",
    "AssetsCollection",
    # matrix
    "MatrixCol",
    "MatrixData",
]
