# techfolio/adapters/api/routers/tags.py
from typing import List

from fastapi import APIRouter, Depends

from techfolio.core.domain.models import Role, Tag
from techfolio.core.use_cases import commands as c
from techfolio.core.use_cases.dispatcher import Dispatcher
from techfolio.adapters.api.dependencies import get_caller_role, get_dispatcher
from techfolio.adapters.api.schemas import TagResolveRequest

router = APIRouter(prefix="/tags", tags=["Tags"])

@router.get("", response_model=List[Tag])
def list_tags(
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    return dispatcher.dispatch(c.ListTags(), role)

@router.post("", response_model=Tag, summary="Resolve Tag")
def resolve_tag(
    request: TagResolveRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    """Returns the tag for the normalized label, creating it on first use."""
    return dispatcher.dispatch(c.ResolveTag(label=request.label), role)
