# techfolio/core/use_cases/content_lifecycle.py
from typing import Any, Dict, Iterable, List, Optional, Tuple

import structlog
from pydantic import ValidationError as SchemaError

from techfolio.core.domain.exceptions import (
    CategoryNotFoundError,
    ContentNotFoundError,
    InvalidOperationError,
    SlugConflictError,
    ValidationError,
)
from techfolio.core.domain.models import (
    CONTENT_TYPES,
    ContentItem,
    ContentKind,
    PublicationState,
    can_transition,
    utcnow,
)
from techfolio.core.domain.text import slugify, validate_slug
from techfolio.core.ports.category_repository import ICategoryRepository
from techfolio.core.ports.content_repository import IContentRepository
from techfolio.core.ports.errors import DuplicateKeyError
from techfolio.core.use_cases.tag_resolver import TagResolver
from techfolio.shared.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)

def _invalid(kind: ContentKind, error: SchemaError) -> ValidationError:
    """Maps the first pydantic error onto the domain ValidationError."""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or None
    return ValidationError(f"Invalid {kind.value}: {field}: {first['msg']}", field=field)

class ContentLifecycle:
    """
    Use Case: Creates and edits content items and drives their publication
    state machine (draft -> published -> archived, published -> draft).

    Responsibilities:
    1. Per-kind slug uniqueness on create and on slug-changing updates.
    2. Referential checks against the category tree and the tag vocabulary.
    3. Publish preconditions (required fields per kind).
    """

    def __init__(self, repo: IContentRepository, categories: ICategoryRepository, tags: TagResolver):
        self.repo = repo
        self.categories = categories
        self.tags = tags

    # --- Queries ---

    def get(self, item_id: str) -> ContentItem:
        item = self.repo.get(item_id)
        if item is None:
            raise ContentNotFoundError(item_id)
        return item

    def list(
        self,
        kind: Optional[ContentKind] = None,
        state: Optional[PublicationState] = None,
        category_id: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> List[ContentItem]:
        if tag is not None:
            tag = self.tags.normalize(tag)
        return self.repo.list(kind=kind, state=state, category_id=category_id, tag=tag)

    # --- Commands ---

    def create(
        self,
        kind: ContentKind,
        title: str = "",
        slug: Optional[str] = None,
        category_id: Optional[str] = None,
        tags: Iterable[str] = (),
        **attributes: Any,
    ) -> ContentItem:
        """
        Creates a new item in the draft state.

        An omitted slug is derived from the title. Drafts may have an empty
        title; publishing is what enforces required fields.
        """
        kind = ContentKind(kind)
        model = CONTENT_TYPES[kind]
        self._ensure_known_attributes(model, attributes)

        slug = validate_slug(slug if slug is not None else slugify(title))

        with tracer.start_as_current_span("use_case.content.create") as span:
            span.set_attribute("techfolio.content_kind", kind.value)

            self._ensure_slug_free(kind, slug)
            self._ensure_category_exists(category_id)

            try:
                item = model(
                    title=title or "",
                    slug=slug,
                    category_id=category_id,
                    tags=self._normalize_labels(tags),
                    **attributes,
                )
            except SchemaError as e:
                raise _invalid(kind, e) from e

            # Tags are only created once the item is known to be valid.
            self.tags.resolve_many(item.tags)
            self._save(item)

            logger.info("content_created", item_id=item.id, kind=kind.value, slug=slug)
            return item

    def update(self, item_id: str, **changes: Any) -> ContentItem:
        """
        Applies a partial update. `tags`, when given, replaces the tag set.

        Every change is validated against the item's model before anything
        is written, so a rejected update leaves the item and the tag
        vocabulary untouched.

        Raises:
            InvalidOperationError: the item is archived.
            ValidationError: unknown field for this kind, a value of the wrong
                type (including null for a text field), or malformed slug.
            ConflictError: new slug taken within the kind.
            NotFoundError: item or new category does not exist.
        """
        with tracer.start_as_current_span("use_case.content.update"):
            item = self.get(item_id)
            if item.state == PublicationState.ARCHIVED:
                raise InvalidOperationError(f"Content item '{item_id}' is archived and can no longer change.")

            self._ensure_known_attributes(type(item), changes, common=True)
            update: Dict[str, Any] = dict(changes)

            if "slug" in update:
                slug = validate_slug(update["slug"])
                if slug != item.slug:
                    self._ensure_slug_free(item.kind, slug, exclude_id=item.id)
            if "category_id" in update:
                self._ensure_category_exists(update["category_id"])
            if "tags" in update:
                update["tags"] = self._normalize_labels(update["tags"] or ())
            if "title" in update and update["title"] is None:
                update["title"] = ""
            if "tech_stack" in update and update["tech_stack"] is None:
                update["tech_stack"] = ()

            update["updated_at"] = utcnow()
            try:
                updated = type(item).model_validate({**item.model_dump(), **update})
            except SchemaError as e:
                raise _invalid(item.kind, e) from e

            if "tags" in update:
                self.tags.resolve_many(updated.tags)
            self._save(updated)

            logger.info("content_updated", item_id=item_id, fields=sorted(changes))
            return updated

    def publish(self, item_id: str) -> ContentItem:
        """
        draft -> published.

        Raises:
            InvalidOperationError: the item is not a draft.
            ValidationError: a required field is empty, or the category or a
                tag it references no longer exists.
        """
        with tracer.start_as_current_span("use_case.content.publish"):
            item = self.get(item_id)
            if not can_transition(item.state, PublicationState.PUBLISHED):
                raise InvalidOperationError(
                    f"Cannot publish content item '{item_id}' from state '{item.state.value}'."
                )

            missing = item.missing_required_fields()
            if missing:
                raise ValidationError(
                    f"Cannot publish {item.kind.value} '{item_id}': missing {', '.join(missing)}.",
                    field=missing[0],
                )
            if item.category_id is not None and self.categories.get(item.category_id) is None:
                raise ValidationError(
                    f"Cannot publish '{item_id}': category '{item.category_id}' does not exist.",
                    field="category_id",
                )
            unknown_tags = [t for t in item.tags if not self.tags.exists(t)]
            if unknown_tags:
                raise ValidationError(
                    f"Cannot publish '{item_id}': unknown tags {', '.join(unknown_tags)}.",
                    field="tags",
                )

            now = utcnow()
            published = item.model_copy(update={
                "state": PublicationState.PUBLISHED,
                "published_at": now,
                "updated_at": now,
            })
            self._save(published)

            logger.info("content_published", item_id=item_id, kind=item.kind.value)
            return published

    def unpublish(self, item_id: str) -> ContentItem:
        """published -> draft."""
        item = self.get(item_id)
        if not can_transition(item.state, PublicationState.DRAFT):
            raise InvalidOperationError(
                f"Cannot unpublish content item '{item_id}' from state '{item.state.value}'."
            )
        draft = item.model_copy(update={
            "state": PublicationState.DRAFT,
            "published_at": None,
            "updated_at": utcnow(),
        })
        self._save(draft)

        logger.info("content_unpublished", item_id=item_id)
        return draft

    def archive(self, item_id: str) -> ContentItem:
        """Any state -> archived. Archiving an archived item returns it unchanged."""
        item = self.get(item_id)
        if item.state == PublicationState.ARCHIVED:
            return item

        archived = item.model_copy(update={
            "state": PublicationState.ARCHIVED,
            "updated_at": utcnow(),
        })
        self._save(archived)

        logger.info("content_archived", item_id=item_id, previous_state=item.state.value)
        return archived

    def delete(self, item_id: str) -> None:
        if not self.repo.delete(item_id):
            raise ContentNotFoundError(item_id)
        logger.info("content_deleted", item_id=item_id)

    def detach_category(self, category_ids: Iterable[str]) -> int:
        """Clears the category of every item pointing at a removed category."""
        category_ids = list(category_ids)
        count = self.repo.clear_category(category_ids)
        if count:
            logger.info("content_detached_from_categories", categories=len(category_ids), items=count)
        return count

    # --- Internals ---

    def _ensure_known_attributes(self, model, attributes: Dict[str, Any], common: bool = False) -> None:
        allowed = model.editable_fields() if common else model.KIND_ATTRIBUTES | {"summary"}
        unknown = sorted(set(attributes) - allowed)
        if unknown:
            raise ValidationError(
                f"Unknown field(s) for {model.__name__.lower()}: {', '.join(unknown)}.",
                field=unknown[0],
            )

    def _normalize_labels(self, labels: Iterable[str]) -> Tuple[str, ...]:
        """Distinct normalized labels in input order. Creates nothing."""
        return tuple(dict.fromkeys(self.tags.normalize(label) for label in labels))

    def _ensure_slug_free(self, kind: ContentKind, slug: str, exclude_id: Optional[str] = None) -> None:
        if self.repo.slug_exists(kind, slug, exclude_id=exclude_id):
            raise SlugConflictError(slug, scope=f"{kind.value}s")

    def _ensure_category_exists(self, category_id: Optional[str]) -> None:
        if category_id is not None and self.categories.get(category_id) is None:
            raise CategoryNotFoundError(category_id)

    def _save(self, item: ContentItem) -> None:
        try:
            self.repo.save(item)
        except DuplicateKeyError as e:
            # A concurrent writer claimed the slug after our check.
            raise SlugConflictError(item.slug, scope=f"{item.kind.value}s") from e
