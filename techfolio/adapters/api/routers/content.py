# techfolio/adapters/api/routers/content.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from techfolio.core.domain.models import ContentKind, PublicationState, Role
from techfolio.core.use_cases import commands as c
from techfolio.core.use_cases.dispatcher import Dispatcher
from techfolio.adapters.api.dependencies import get_caller_role, get_dispatcher
from techfolio.adapters.api.schemas import ContentCreateRequest, ContentUpdateRequest

router = APIRouter(prefix="/content", tags=["Content"])

# Items are returned as-is: the body shape depends on `kind`.

@router.get("", summary="List Content")
def list_content(
    kind: Optional[ContentKind] = Query(None),
    state: Optional[PublicationState] = Query(None, description="Ignored for non-admins (always published)"),
    category_id: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    return dispatcher.dispatch(
        c.ListContent(kind=kind, state=state, category_id=category_id, tag=tag),
        role,
    )

@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Draft")
def create_content(
    request: ContentCreateRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    """
    Creates a new item in the `draft` state.

    Only the fields that belong to `kind` are accepted; sending e.g. `body`
    for a project is a 422.
    """
    return dispatcher.dispatch(
        c.CreateContent(
            kind=request.kind,
            title=request.title,
            slug=request.slug,
            category_id=request.category_id,
            tags=request.tags,
            attributes=request.attributes(),
        ),
        role,
    )

@router.get("/{item_id}")
def get_content(
    item_id: str,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    return dispatcher.dispatch(c.GetContent(item_id=item_id), role)

@router.patch("/{item_id}", summary="Update Content")
def update_content(
    item_id: str,
    request: ContentUpdateRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    return dispatcher.dispatch(c.UpdateContent(item_id=item_id, changes=request.changes()), role)

@router.post("/{item_id}/publish")
def publish_content(
    item_id: str,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    return dispatcher.dispatch(c.PublishContent(item_id=item_id), role)

@router.post("/{item_id}/unpublish")
def unpublish_content(
    item_id: str,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    return dispatcher.dispatch(c.UnpublishContent(item_id=item_id), role)

@router.post("/{item_id}/archive")
def archive_content(
    item_id: str,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    return dispatcher.dispatch(c.ArchiveContent(item_id=item_id), role)

@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_content(
    item_id: str,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    dispatcher.dispatch(c.DeleteContent(item_id=item_id), role)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
