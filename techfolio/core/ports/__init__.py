# techfolio/core/ports/__init__.py
"""
Core Ports (Interfaces).

This package defines the Protocols that the Infrastructure Adapters must
implement. These interfaces allow the Core Domain to reach storage without
knowing whether it is a dict in memory or a SQL database.
"""

from .category_repository import ICategoryRepository, TreeChangeSet, TreeSnapshot
from .content_repository import IContentRepository
from .errors import DuplicateKeyError, RepositoryError, StaleSnapshotError
from .tag_repository import ITagRepository

__all__ = [
    "ICategoryRepository",
    "IContentRepository",
    "ITagRepository",
    "TreeChangeSet",
    "TreeSnapshot",
    "RepositoryError",
    "DuplicateKeyError",
    "StaleSnapshotError",
]
