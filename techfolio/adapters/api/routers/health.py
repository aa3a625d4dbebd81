# techfolio/adapters/api/routers/health.py
from fastapi import APIRouter, Depends, status, Response
from dependency_injector.wiring import inject, Provide
from typing import Dict
import structlog

from techfolio.shared.config import settings
from techfolio.shared.container import Container
from techfolio.core.ports import ICategoryRepository, IContentRepository, ITagRepository

logger = structlog.get_logger()

router = APIRouter(prefix="/health", tags=["System"])

@router.get("/live", status_code=status.HTTP_200_OK)
def liveness_probe():
    """
    K8s Liveness Probe.
    Returns 200 OK if the service is operational.
    """
    return {"status": "ok", "service": settings.APP_NAME}

@router.get("/ready", status_code=status.HTTP_200_OK)
@inject
def readiness_probe(
    response: Response,
    categories: ICategoryRepository = Depends(Provide[Container.category_repository]),
    content: IContentRepository = Depends(Provide[Container.content_repository]),
    tags: ITagRepository = Depends(Provide[Container.tag_repository]),
) -> Dict[str, str]:
    """
    K8s Readiness Probe.
    Checks every repository; 503 when any of them is down.
    """
    checks = {"categories": categories, "content": content, "tags": tags}
    health_status = {
        name: "up" if repo.health_check() else "down"
        for name, repo in checks.items()
    }

    if not all(value == "up" for value in health_status.values()):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning("readiness_probe_failed", status=health_status)

    return health_status
