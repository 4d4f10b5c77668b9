"""Immutable query specs and the per-model scope objects built on them.

Modules
-------
spec        QuerySpec, JoinDef, join registry helpers
entry       EntryQuery (channel_titles + channel_data scopes)
asset       AssetQuery
matrix      MatrixColQuery
"""

from deep.query.asset import AssetQuery
from deep.query.entry import EntryQuery, SearchPolicy, entry_joins, new_entry_spec
from deep.query.matrix import MatrixColQuery
from deep.query.spec import JoinDef, QuerySpec, as_list, join_registry

__all__ = [
    "QuerySpec",
    "JoinDef",
    "as_list",
    "join_registry",
    "EntryQuery",
    "SearchPolicy",
    "entry_joins",
    "new_entry_spec",
    "AssetQuery",
    "MatrixColQuery",
]
