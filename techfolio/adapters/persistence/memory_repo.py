# techfolio/adapters/persistence/memory_repo.py
from threading import Lock
from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from techfolio.core.domain.models import Category, ContentItem, ContentKind, PublicationState, Tag
from techfolio.core.ports.category_repository import ICategoryRepository, TreeChangeSet, TreeSnapshot
from techfolio.core.ports.content_repository import IContentRepository
from techfolio.core.ports.errors import DuplicateKeyError, StaleSnapshotError
from techfolio.core.ports.tag_repository import ITagRepository

logger = structlog.get_logger()

class InMemoryCategoryRepository(ICategoryRepository):
    """
    Process-local category store.

    Every commit swaps in a new dict under the lock, so a snapshot handed out
    earlier is never mutated behind its reader's back.
    """

    def __init__(self):
        self._lock = Lock()
        self._nodes: Dict[str, Category] = {}
        self._version = 0

    def get(self, category_id: str) -> Optional[Category]:
        return self._nodes.get(category_id)

    def get_by_slug(self, slug: str) -> Optional[Category]:
        return next((c for c in self._nodes.values() if c.slug == slug), None)

    def snapshot(self) -> TreeSnapshot:
        with self._lock:
            return TreeSnapshot(categories=dict(self._nodes), version=self._version)

    def commit(self, changes: TreeChangeSet, expected_version: int) -> int:
        with self._lock:
            if self._version != expected_version:
                raise StaleSnapshotError(expected_version, self._version)

            nodes = dict(self._nodes)
            for category_id in changes.deletes:
                nodes.pop(category_id, None)
            for category in changes.upserts:
                nodes[category.id] = category

            slugs = [c.slug for c in nodes.values()]
            if len(slugs) != len(set(slugs)):
                raise DuplicateKeyError("categories.slug")

            self._nodes = nodes
            self._version += 1
            return self._version

    def health_check(self) -> bool:
        return True

class InMemoryContentRepository(IContentRepository):

    def __init__(self):
        self._lock = Lock()
        self._items: Dict[str, ContentItem] = {}

    def get(self, item_id: str) -> Optional[ContentItem]:
        return self._items.get(item_id)

    def slug_exists(self, kind: ContentKind, slug: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            i.kind == kind and i.slug == slug and i.id != exclude_id
            for i in list(self._items.values())
        )

    def list(
        self,
        kind: Optional[ContentKind] = None,
        state: Optional[PublicationState] = None,
        category_id: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> List[ContentItem]:
        items = [
            i for i in list(self._items.values())
            if (kind is None or i.kind == kind)
            and (state is None or i.state == state)
            and (category_id is None or i.category_id == category_id)
            and (tag is None or tag in i.tags)
        ]
        items.sort(key=lambda i: (i.created_at, i.id), reverse=True)
        return items

    def save(self, item: ContentItem) -> None:
        with self._lock:
            key: Tuple[ContentKind, str] = (item.kind, item.slug)
            for other in self._items.values():
                if other.id != item.id and (other.kind, other.slug) == key:
                    raise DuplicateKeyError(f"{item.kind.value}:{item.slug}")
            self._items[item.id] = item

    def delete(self, item_id: str) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None

    def clear_category(self, category_ids: Iterable[str]) -> int:
        removed = set(category_ids)
        with self._lock:
            affected = [i for i in self._items.values() if i.category_id in removed]
            for item in affected:
                self._items[item.id] = item.model_copy(update={"category_id": None})
            return len(affected)

    def health_check(self) -> bool:
        return True

class InMemoryTagRepository(ITagRepository):

    def __init__(self):
        self._lock = Lock()
        self._tags: Dict[str, Tag] = {}

    def get(self, label: str) -> Optional[Tag]:
        return self._tags.get(label)

    def add(self, tag: Tag) -> None:
        with self._lock:
            if tag.label in self._tags:
                raise DuplicateKeyError(tag.label)
            self._tags[tag.label] = tag

    def list(self) -> List[Tag]:
        return sorted(self._tags.values(), key=lambda t: t.label)

    def health_check(self) -> bool:
        return True
