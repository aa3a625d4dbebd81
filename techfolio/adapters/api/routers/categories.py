# techfolio/adapters/api/routers/categories.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
import structlog

from techfolio.core.domain.models import Category, DeletePolicy, Role
from techfolio.core.use_cases import commands as c
from techfolio.core.use_cases.dispatcher import Dispatcher
from techfolio.adapters.api.dependencies import get_caller_role, get_dispatcher
from techfolio.adapters.api.schemas import (
    CategoryCreateRequest,
    CategoryDeleteResponse,
    CategoryMoveRequest,
    CategoryRenameRequest,
    CategoryReorderRequest,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/categories", tags=["Categories"])

@router.get("", response_model=List[Category], summary="List Categories")
def list_categories(
    parent_id: Optional[str] = Query(None, description="Only meaningful with children_only"),
    children_only: bool = Query(False, description="Return the direct children of parent_id (roots when omitted)"),
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    """
    Without filters: every category, parents before children, siblings in
    their display order.
    """
    return dispatcher.dispatch(c.ListCategories(parent_id=parent_id, children_only=children_only), role)

@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED, summary="Create Category")
def create_category(
    request: CategoryCreateRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    return dispatcher.dispatch(
        c.CreateCategory(name=request.name, slug=request.slug, parent_id=request.parent_id),
        role,
    )

@router.post("/reorder", response_model=List[Category], summary="Reorder Siblings")
def reorder_categories(
    request: CategoryReorderRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    """`ordered_ids` must list every child of `parent_id` exactly once."""
    return dispatcher.dispatch(
        c.ReorderCategories(parent_id=request.parent_id, ordered_ids=request.ordered_ids),
        role,
    )

@router.get("/{category_id}", response_model=Category)
def get_category(
    category_id: str,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    return dispatcher.dispatch(c.GetCategory(category_id=category_id), role)

@router.patch("/{category_id}", response_model=Category, summary="Rename Category")
def rename_category(
    category_id: str,
    request: CategoryRenameRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    return dispatcher.dispatch(
        c.RenameCategory(category_id=category_id, name=request.name, slug=request.slug),
        role,
    )

@router.post("/{category_id}/move", response_model=Category, summary="Move Category")
def move_category(
    category_id: str,
    request: CategoryMoveRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    """
    Re-parents a category (with its whole subtree).

    Rejected with 409 when the target is the category itself or one of its
    descendants, or when the subtree would exceed the depth limit.
    """
    return dispatcher.dispatch(
        c.MoveCategory(category_id=category_id, new_parent_id=request.parent_id),
        role,
    )

@router.delete("/{category_id}", response_model=CategoryDeleteResponse, summary="Delete Category")
def delete_category(
    category_id: str,
    policy: Optional[DeletePolicy] = Query(None, description="Defaults to the configured policy"),
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    removed = dispatcher.dispatch(c.DeleteCategory(category_id=category_id, policy=policy), role)
    logger.info("category_delete_requested", category_id=category_id, removed=len(removed))
    return CategoryDeleteResponse(removed=list(removed))

@router.get("/{category_id}/ancestors", response_model=List[Category])
def get_ancestors(
    category_id: str,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    """Nearest parent first, root last."""
    return dispatcher.dispatch(c.GetAncestors(category_id=category_id), role)

@router.get("/{category_id}/descendants", response_model=List[Category])
def get_descendants(
    category_id: str,
    dispatcher: Dispatcher = Depends(get_dispatcher),
    role: Role = Depends(get_caller_role),
):
    return dispatcher.dispatch(c.GetDescendants(category_id=category_id), role)
