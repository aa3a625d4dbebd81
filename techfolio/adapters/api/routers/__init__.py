# techfolio/adapters/api/routers/__init__.py
"""
API Route Definitions.

This package contains the route handlers (controllers) organized by domain area.
- `categories`: The category tree (create, move, reorder, delete, queries).
- `content`: Articles, projects and certificates and their lifecycle.
- `tags`: Tag resolution and listing.
- `health`: System health checks.
"""

from .categories import router as categories_router
from .content import router as content_router
from .tags import router as tags_router
from .health import router as health_router

__all__ = [
    "categories_router",
    "content_router",
    "tags_router",
    "health_router",
]
