# techfolio/adapters/persistence/sql/__init__.py
"""
SQLAlchemy persistence.

Tables mirror the domain entities; the single `category_tree_state` row
carries the version that category commits compare-and-swap on.
"""

from .repositories import SqlCategoryRepository, SqlContentRepository, SqlTagRepository
from .session import Base, bootstrap, db_session, init_db, make_engine, make_session_factory

__all__ = [
    "Base",
    "bootstrap",
    "SqlCategoryRepository",
    "SqlContentRepository",
    "SqlTagRepository",
    "db_session",
    "init_db",
    "make_engine",
    "make_session_factory",
]
