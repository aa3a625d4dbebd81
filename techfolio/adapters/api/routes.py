# techfolio/adapters/api/routes.py
"""
Versioned API surface.

Aggregates the domain routers under a single router so the application only
mounts one prefix (`/api/v1`). Health probes are mounted separately, outside
the version prefix.
"""
from fastapi import APIRouter

from techfolio.adapters.api.routers import categories_router, content_router, tags_router

router = APIRouter()

router.include_router(categories_router)
router.include_router(content_router)
router.include_router(tags_router)
