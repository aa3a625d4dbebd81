# techfolio/adapters/persistence/sql/repositories.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from techfolio.core.domain.models import (
    CONTENT_TYPES,
    Category,
    ContentItem,
    ContentKind,
    PublicationState,
    Tag,
)
from techfolio.core.ports.category_repository import ICategoryRepository, TreeChangeSet, TreeSnapshot
from techfolio.core.ports.content_repository import IContentRepository
from techfolio.core.ports.errors import DuplicateKeyError, StaleSnapshotError
from techfolio.core.ports.tag_repository import ITagRepository

from .models import TREE_STATE_ID, CategoryRow, ContentItemRow, ContentTagRow, TagRow, TreeStateRow

logger = structlog.get_logger()


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops the offset; everything we store is UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def _category_from_row(row: CategoryRow) -> Category:
    return Category(
        id=row.id,
        name=row.name,
        slug=row.slug,
        parent_id=row.parent_id,
        position=row.position,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _category_to_row(category: Category) -> CategoryRow:
    return CategoryRow(
        id=category.id,
        name=category.name,
        slug=category.slug,
        parent_id=category.parent_id,
        position=category.position,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


class SqlCategoryRepository(ICategoryRepository):
    """
    Category forest stored in `categories`, versioned by `category_tree_state`.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def get(self, category_id: str) -> Optional[Category]:
        with self._session_factory() as session:
            row = session.get(CategoryRow, category_id)
            return _category_from_row(row) if row is not None else None

    def get_by_slug(self, slug: str) -> Optional[Category]:
        with self._session_factory() as session:
            row = session.scalars(select(CategoryRow).where(CategoryRow.slug == slug)).first()
            return _category_from_row(row) if row is not None else None

    def snapshot(self) -> TreeSnapshot:
        with self._session_factory() as session:
            # Version first: a commit landing between the two reads makes the
            # snapshot look older than its rows, so its own commit is rejected.
            version = session.scalar(
                select(TreeStateRow.version).where(TreeStateRow.id == TREE_STATE_ID)
            ) or 0
            rows = session.scalars(select(CategoryRow)).all()
            return TreeSnapshot(
                categories={row.id: _category_from_row(row) for row in rows},
                version=version,
            )

    def commit(self, changes: TreeChangeSet, expected_version: int) -> int:
        new_version = expected_version + 1
        try:
            with self._session_factory.begin() as session:
                result = session.execute(
                    update(TreeStateRow)
                    .where(TreeStateRow.id == TREE_STATE_ID, TreeStateRow.version == expected_version)
                    .values(version=new_version)
                )
                if result.rowcount != 1:
                    actual = session.scalar(
                        select(TreeStateRow.version).where(TreeStateRow.id == TREE_STATE_ID)
                    )
                    raise StaleSnapshotError(expected_version, actual or 0)

                for category in changes.upserts:
                    session.merge(_category_to_row(category))
                session.flush()

                # Deletes arrive parent-first; remove leaves first.
                for category_id in reversed(changes.deletes):
                    session.execute(delete(CategoryRow).where(CategoryRow.id == category_id))
        except IntegrityError as e:
            logger.warning("category_commit_rejected", error=str(e.orig))
            raise DuplicateKeyError("categories.slug") from e

        return new_version

    def health_check(self) -> bool:
        try:
            with self._session_factory() as session:
                session.execute(select(TreeStateRow.version).limit(1))
            return True
        except SQLAlchemyError as e:
            logger.error("repo_health_check_failed", repo="categories", error=str(e))
            return False


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


def _content_from_row(row: ContentItemRow) -> ContentItem:
    model = CONTENT_TYPES[ContentKind(row.kind)]
    return model.model_validate({
        **(row.attributes or {}),
        "id": row.id,
        "kind": model.model_fields["kind"].default,
        "title": row.title,
        "slug": row.slug,
        "summary": row.summary,
        "category_id": row.category_id,
        "tags": tuple(link.tag_label for link in row.tag_links),
        "state": row.state,
        "created_at": _aware(row.created_at),
        "updated_at": _aware(row.updated_at),
        "published_at": _aware(row.published_at),
    })


def _apply_to_row(row: ContentItemRow, item: ContentItem) -> None:
    row.kind = item.kind.value
    row.title = item.title
    row.slug = item.slug
    row.summary = item.summary
    row.category_id = item.category_id
    row.state = item.state.value
    row.attributes = item.model_dump(mode="json", include=set(item.KIND_ATTRIBUTES))
    row.created_at = item.created_at
    row.updated_at = item.updated_at
    row.published_at = item.published_at

    # Diff the tag links instead of replacing the collection: a fresh link
    # with the same key as an orphaned one would clash in the identity map.
    wanted = {label: position for position, label in enumerate(item.tags)}
    for link in list(row.tag_links):
        if link.tag_label in wanted:
            link.position = wanted.pop(link.tag_label)
        else:
            row.tag_links.remove(link)
    for label, position in wanted.items():
        row.tag_links.append(ContentTagRow(tag_label=label, position=position))


class SqlContentRepository(IContentRepository):

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def get(self, item_id: str) -> Optional[ContentItem]:
        with self._session_factory() as session:
            row = session.get(ContentItemRow, item_id)
            return _content_from_row(row) if row is not None else None

    def slug_exists(self, kind: ContentKind, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(ContentItemRow.id).where(
            ContentItemRow.kind == ContentKind(kind).value,
            ContentItemRow.slug == slug,
        )
        if exclude_id is not None:
            stmt = stmt.where(ContentItemRow.id != exclude_id)
        with self._session_factory() as session:
            return session.scalars(stmt.limit(1)).first() is not None

    def list(
        self,
        kind: Optional[ContentKind] = None,
        state: Optional[PublicationState] = None,
        category_id: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> List[ContentItem]:
        stmt = select(ContentItemRow)
        if kind is not None:
            stmt = stmt.where(ContentItemRow.kind == ContentKind(kind).value)
        if state is not None:
            stmt = stmt.where(ContentItemRow.state == PublicationState(state).value)
        if category_id is not None:
            stmt = stmt.where(ContentItemRow.category_id == category_id)
        if tag is not None:
            stmt = stmt.join(ContentTagRow, ContentTagRow.item_id == ContentItemRow.id).where(
                ContentTagRow.tag_label == tag
            )
        stmt = stmt.order_by(ContentItemRow.created_at.desc(), ContentItemRow.id.desc())

        with self._session_factory() as session:
            return [_content_from_row(row) for row in session.scalars(stmt).all()]

    def save(self, item: ContentItem) -> None:
        try:
            with self._session_factory.begin() as session:
                row = session.get(ContentItemRow, item.id)
                if row is None:
                    row = ContentItemRow(id=item.id)
                    session.add(row)
                _apply_to_row(row, item)
        except IntegrityError as e:
            logger.warning("content_save_rejected", item_id=item.id, error=str(e.orig))
            raise DuplicateKeyError(f"{item.kind.value}:{item.slug}") from e

    def delete(self, item_id: str) -> bool:
        with self._session_factory.begin() as session:
            row = session.get(ContentItemRow, item_id)
            if row is None:
                return False
            session.delete(row)
            return True

    def clear_category(self, category_ids: Iterable[str]) -> int:
        ids = list(category_ids)
        if not ids:
            return 0
        with self._session_factory.begin() as session:
            result = session.execute(
                update(ContentItemRow)
                .where(ContentItemRow.category_id.in_(ids))
                .values(category_id=None)
            )
            return result.rowcount or 0

    def health_check(self) -> bool:
        try:
            with self._session_factory() as session:
                session.execute(select(ContentItemRow.id).limit(1))
            return True
        except SQLAlchemyError as e:
            logger.error("repo_health_check_failed", repo="content", error=str(e))
            return False


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


class SqlTagRepository(ITagRepository):

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def get(self, label: str) -> Optional[Tag]:
        with self._session_factory() as session:
            row = session.get(TagRow, label)
            return Tag(label=row.label, created_at=_aware(row.created_at)) if row is not None else None

    def add(self, tag: Tag) -> None:
        try:
            with self._session_factory.begin() as session:
                session.add(TagRow(label=tag.label, created_at=tag.created_at))
        except IntegrityError as e:
            raise DuplicateKeyError(tag.label) from e

    def list(self) -> List[Tag]:
        with self._session_factory() as session:
            rows = session.scalars(select(TagRow).order_by(TagRow.label)).all()
            return [Tag(label=row.label, created_at=_aware(row.created_at)) for row in rows]

    def health_check(self) -> bool:
        try:
            with self._session_factory() as session:
                session.execute(select(TagRow.label).limit(1))
            return True
        except SQLAlchemyError as e:
            logger.error("repo_health_check_failed", repo="tags", error=str(e))
            return False
