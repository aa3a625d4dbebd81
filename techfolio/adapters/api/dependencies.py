# techfolio/adapters/api/dependencies.py
from typing import Annotated, Optional

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Header, HTTPException, status

from techfolio.core.domain.models import Role
from techfolio.core.use_cases.dispatcher import Dispatcher
from techfolio.shared.container import Container

logger = structlog.get_logger()

# -----------------------------------------------------------------------------
# Caller identity
# -----------------------------------------------------------------------------
# Token validation happens upstream (gateway / identity provider). By the time
# a request reaches us the caller is authenticated and its role is forwarded
# in this header.
CALLER_ROLE_HEADER = "X-Caller-Role"


def _normalize_role(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = value.strip().lower()
    if value in {"administrator", "superuser"}:
        value = Role.ADMIN.value
    return value


def get_caller_role(
    x_caller_role: Annotated[
        Optional[str],
        Header(alias=CALLER_ROLE_HEADER, description="Role of the authenticated caller: admin | user"),
    ] = None,
) -> Role:
    """Resolves the caller's role; a missing header means a plain user."""
    raw = _normalize_role(x_caller_role)
    if raw is None:
        return Role.USER
    try:
        return Role(raw)
    except ValueError:
        logger.warning("unknown_caller_role", role=x_caller_role)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown caller role '{x_caller_role}'",
        )


# -----------------------------------------------------------------------------
# Mediator injection
# -----------------------------------------------------------------------------
@inject
def get_dispatcher(
    dispatcher: Dispatcher = Depends(Provide[Container.dispatcher]),
) -> Dispatcher:
    """Dependency to inject the Dispatcher (container-managed)."""
    return dispatcher
