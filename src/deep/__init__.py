"""
Deep - read-only data access for a channel/entry CMS database.

Subpackages:
- deep.models: mapped CMS tables and the Entry record
- deep.query: immutable query specs and scope objects
- deep.repositories: fetch entries, assets and matrix columns
- deep.hydrators: bulk-load assets and matrix rows into entry collections
- deep.validation: rule-based validation and field-type validators
"""

__version__ = "0.3.0"
