"""
Persistence layer: backings, record stores and the repository set.

The SQL backing (``sql_backing``) and its engine helpers import
SQLAlchemy and are loaded only when that backend is chosen.
"""

from housing_kernel.db.backing import Backing, FlatFileBacking, InMemoryBacking
from housing_kernel.db.repositories import Repositories
from housing_kernel.db.store import RecordStore

__all__ = [
    "Backing",
    "FlatFileBacking",
    "InMemoryBacking",
    "RecordStore",
    "Repositories",
]
