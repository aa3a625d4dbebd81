# techfolio/core/use_cases/__init__.py
"""
Core Use Cases (Application Logic).

This package contains the "Interactors" of the system. They orchestrate
the flow of data between the Domain Entities and the Repository Ports.
Each use case owns one area of business rules:
1. `CategoryTree`: the category forest and its structural invariants.
2. `ContentLifecycle`: content items and their publication state machine.
3. `TagResolver`: the deduplicated tag vocabulary.

The `Dispatcher` sits in front of them and maps command/query messages to
the operation that serves them, after checking the caller's role.
"""

from .category_tree import CategoryTree
from .content_lifecycle import ContentLifecycle
from .tag_resolver import TagResolver
from .dispatcher import Dispatcher, build_dispatcher

__all__ = [
    "CategoryTree",
    "ContentLifecycle",
    "TagResolver",
    "Dispatcher",
    "build_dispatcher",
]
