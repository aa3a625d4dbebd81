# techfolio/core/domain/models.py
import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, ClassVar, FrozenSet, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

def new_id() -> str:
    return uuid.uuid4().hex

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

# --- Enums ---

class ContentKind(str, Enum):
    """The three content item kinds. Slugs are unique per kind."""
    ARTICLE = "article"
    PROJECT = "project"
    CERTIFICATE = "certificate"

class PublicationState(str, Enum):
    """Lifecycle state of a content item."""
    DRAFT = "draft"           # Initial state, editable
    PUBLISHED = "published"   # Visible to every role
    ARCHIVED = "archived"     # Terminal

# Allowed state changes. ARCHIVED has no way out.
_TRANSITIONS = {
    PublicationState.DRAFT: frozenset({PublicationState.PUBLISHED, PublicationState.ARCHIVED}),
    PublicationState.PUBLISHED: frozenset({PublicationState.DRAFT, PublicationState.ARCHIVED}),
    PublicationState.ARCHIVED: frozenset(),
}

def can_transition(current: PublicationState, target: PublicationState) -> bool:
    return target in _TRANSITIONS[current]

class DeletePolicy(str, Enum):
    """What happens to the children of a deleted category."""
    BLOCK_IF_HAS_CHILDREN = "block_if_has_children"
    REASSIGN_CHILDREN_TO_PARENT = "reassign_children_to_parent"
    CASCADE_DELETE = "cascade_delete"

class Role(str, Enum):
    """Caller role supplied by the identity collaborator."""
    ADMIN = "admin"
    USER = "user"

# --- Entities ---

class Category(BaseModel):
    """
    A node in the category forest.

    Categories reference their parent by id only; the tree shape lives in the
    repository snapshot, never in object references.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=96)
    slug: str = Field(..., description="URL-safe, unique across the whole tree")
    parent_id: Optional[str] = None
    position: int = Field(0, ge=0, description="Order among siblings")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

class Tag(BaseModel):
    """A normalized label. The label itself is the identity."""
    model_config = ConfigDict(frozen=True)

    label: str
    created_at: datetime = Field(default_factory=utcnow)

class ContentItem(BaseModel):
    """
    Fields shared by every content kind.

    Snapshots are immutable. Edits re-validate the merged fields into a new
    snapshot; state transitions use `model_copy(update=...)`.
    """
    model_config = ConfigDict(frozen=True)

    # Fields a publish requires to be non-empty.
    REQUIRED_FOR_PUBLISH: ClassVar[Tuple[str, ...]] = ("title", "slug")
    # Fields an update may touch, besides the common ones.
    KIND_ATTRIBUTES: ClassVar[FrozenSet[str]] = frozenset()
    COMMON_ATTRIBUTES: ClassVar[FrozenSet[str]] = frozenset(
        {"title", "slug", "summary", "category_id", "tags"}
    )

    id: str = Field(default_factory=new_id)
    kind: ContentKind
    title: str = ""
    slug: str
    summary: Optional[str] = None
    category_id: Optional[str] = None
    tags: Tuple[str, ...] = ()
    state: PublicationState = PublicationState.DRAFT
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    published_at: Optional[datetime] = None

    @classmethod
    def editable_fields(cls) -> FrozenSet[str]:
        return cls.COMMON_ATTRIBUTES | cls.KIND_ATTRIBUTES

    def missing_required_fields(self) -> List[str]:
        """Names of required fields that are empty or whitespace only."""
        missing = []
        for name in self.REQUIRED_FOR_PUBLISH:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing

class Article(ContentItem):
    """A written article. `body` is free-form marked-up text (e.g. Markdown)."""
    REQUIRED_FOR_PUBLISH: ClassVar[Tuple[str, ...]] = ("title", "slug", "body")
    KIND_ATTRIBUTES: ClassVar[FrozenSet[str]] = frozenset({"body"})

    kind: Literal[ContentKind.ARTICLE] = ContentKind.ARTICLE
    body: str = ""

class Project(ContentItem):
    """A showcased project."""
    KIND_ATTRIBUTES: ClassVar[FrozenSet[str]] = frozenset(
        {"description", "repository_url", "live_url", "tech_stack"}
    )

    kind: Literal[ContentKind.PROJECT] = ContentKind.PROJECT
    description: str = ""
    repository_url: Optional[str] = None
    live_url: Optional[str] = None
    tech_stack: Tuple[str, ...] = ()

class Certificate(ContentItem):
    """
    A certificate. The image lives in external asset storage; the item only
    keeps the reference handed back by that storage.
    """
    REQUIRED_FOR_PUBLISH: ClassVar[Tuple[str, ...]] = ("title", "slug", "asset_ref")
    KIND_ATTRIBUTES: ClassVar[FrozenSet[str]] = frozenset(
        {"issuer", "issued_on", "credential_url", "asset_ref"}
    )

    kind: Literal[ContentKind.CERTIFICATE] = ContentKind.CERTIFICATE
    issuer: Optional[str] = None
    issued_on: Optional[date] = None
    credential_url: Optional[str] = None
    asset_ref: Optional[str] = None

AnyContentItem = Annotated[Union[Article, Project, Certificate], Field(discriminator="kind")]

CONTENT_TYPES = {
    ContentKind.ARTICLE: Article,
    ContentKind.PROJECT: Project,
    ContentKind.CERTIFICATE: Certificate,
}
