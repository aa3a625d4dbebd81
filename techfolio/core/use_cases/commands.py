# techfolio/core/use_cases/commands.py
"""
Command and query messages understood by the Dispatcher.

Each message declares which roles may send it. Commands mutate state and are
reserved to admins; queries are open to every authenticated caller.
"""
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from techfolio.core.domain.models import ContentKind, DeletePolicy, PublicationState, Role

class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed_roles: ClassVar[FrozenSet[Role]] = frozenset({Role.ADMIN})

    @classmethod
    def operation_name(cls) -> str:
        return cls.__name__

class Command(Message):
    allowed_roles: ClassVar[FrozenSet[Role]] = frozenset({Role.ADMIN})

class Query(Message):
    allowed_roles: ClassVar[FrozenSet[Role]] = frozenset({Role.ADMIN, Role.USER})

# --- Categories ---

class CreateCategory(Command):
    name: str
    slug: Optional[str] = None
    parent_id: Optional[str] = None

class RenameCategory(Command):
    category_id: str
    name: Optional[str] = None
    slug: Optional[str] = None

class MoveCategory(Command):
    category_id: str
    new_parent_id: Optional[str] = None

class ReorderCategories(Command):
    parent_id: Optional[str] = None
    ordered_ids: List[str]

class DeleteCategory(Command):
    category_id: str
    policy: Optional[DeletePolicy] = None

class GetCategory(Query):
    category_id: str

class ListCategories(Query):
    """All categories, or only the children of `parent_id` when `children_only` is set."""
    parent_id: Optional[str] = None
    children_only: bool = False

class GetAncestors(Query):
    category_id: str

class GetDescendants(Query):
    category_id: str

# --- Content ---

class CreateContent(Command):
    kind: ContentKind
    title: str = ""
    slug: Optional[str] = None
    category_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    attributes: Dict[str, Any] = Field(default_factory=dict)

class UpdateContent(Command):
    item_id: str
    changes: Dict[str, Any]

class PublishContent(Command):
    item_id: str

class UnpublishContent(Command):
    item_id: str

class ArchiveContent(Command):
    item_id: str

class DeleteContent(Command):
    item_id: str

class GetContent(Query):
    item_id: str

class ListContent(Query):
    kind: Optional[ContentKind] = None
    state: Optional[PublicationState] = None
    category_id: Optional[str] = None
    tag: Optional[str] = None

# --- Tags ---

class ResolveTag(Command):
    label: str

class ListTags(Query):
    pass
