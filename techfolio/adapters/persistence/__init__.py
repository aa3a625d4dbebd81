# techfolio/adapters/persistence/__init__.py
"""
Persistence Adapters.

This package implements the Repository ports defined in the Core Domain.
It handles the translation between Domain Entities and the underlying storage mechanism.

Components:
- InMemory*Repository: process-local stores, the default backend and the test double.
- Sql*Repository: SQLAlchemy-backed stores for any database the engine URL points at.
"""

from .memory_repo import InMemoryCategoryRepository, InMemoryContentRepository, InMemoryTagRepository

__all__ = [
    "InMemoryCategoryRepository",
    "InMemoryContentRepository",
    "InMemoryTagRepository",
]
