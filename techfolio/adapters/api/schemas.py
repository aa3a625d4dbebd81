# techfolio/adapters/api/schemas.py
"""
Request bodies (DTOs) for the REST adapter.

Responses are the domain snapshots themselves; only inputs get their own
shapes here, so that unknown JSON keys never reach the use cases.
"""
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from techfolio.core.domain.models import ContentKind

# --- Categories ---

class CategoryCreateRequest(BaseModel):
    name: str = Field(..., description="Display name")
    slug: Optional[str] = Field(None, description="URL-safe slug; derived from the name when omitted")
    parent_id: Optional[str] = Field(None, description="Parent category id; omit for a root")

class CategoryRenameRequest(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None

class CategoryMoveRequest(BaseModel):
    parent_id: Optional[str] = Field(None, description="New parent id; null makes the category a root")

class CategoryReorderRequest(BaseModel):
    parent_id: Optional[str] = Field(None, description="Parent whose children are reordered; null for roots")
    ordered_ids: List[str]

class CategoryDeleteResponse(BaseModel):
    removed: List[str]

# --- Content ---

class ContentFields(BaseModel):
    """Every field a content item of any kind may carry."""
    summary: Optional[str] = None

    # Article
    body: Optional[str] = None

    # Project
    description: Optional[str] = None
    repository_url: Optional[str] = None
    live_url: Optional[str] = None
    tech_stack: Optional[List[str]] = None

    # Certificate
    issuer: Optional[str] = None
    issued_on: Optional[date] = None
    credential_url: Optional[str] = None
    asset_ref: Optional[str] = Field(None, description="Reference returned by the asset storage")

class ContentCreateRequest(ContentFields):
    kind: ContentKind
    title: str = ""
    slug: Optional[str] = None
    category_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    def attributes(self) -> Dict[str, Any]:
        """Kind-specific fields the client actually sent."""
        return self.model_dump(
            include=set(ContentFields.model_fields),
            exclude_unset=True,
        )

class ContentUpdateRequest(ContentFields):
    title: Optional[str] = None
    slug: Optional[str] = None
    category_id: Optional[str] = None
    tags: Optional[List[str]] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)

# --- Tags ---

class TagResolveRequest(BaseModel):
    label: str = Field(..., description="Free-form label; trimmed and case-folded")
