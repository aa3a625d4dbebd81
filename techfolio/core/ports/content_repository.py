# techfolio/core/ports/content_repository.py
from typing import Iterable, List, Optional, Protocol

from techfolio.core.domain.models import ContentItem, ContentKind, PublicationState


class IContentRepository(Protocol):
    """
    Port for content items (articles, projects, certificates).
    """

    def get(self, item_id: str) -> Optional[ContentItem]:
        ...

    def slug_exists(self, kind: ContentKind, slug: str, exclude_id: Optional[str] = None) -> bool:
        """
        True if an item of `kind` other than `exclude_id` already uses `slug`.
        """
        ...

    def list(
        self,
        kind: Optional[ContentKind] = None,
        state: Optional[PublicationState] = None,
        category_id: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> List[ContentItem]:
        """
        Lists items matching every given filter, newest first.
        """
        ...

    def save(self, item: ContentItem) -> None:
        """
        Inserts or replaces the item snapshot.

        Raises:
            DuplicateKeyError: the (kind, slug) pair is taken by another item.
        """
        ...

    def delete(self, item_id: str) -> bool:
        """Removes the item. Returns False if it did not exist."""
        ...

    def clear_category(self, category_ids: Iterable[str]) -> int:
        """Detaches every item pointing at one of `category_ids`. Returns the count."""
        ...

    def health_check(self) -> bool:
        ...
