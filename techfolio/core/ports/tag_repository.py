# techfolio/core/ports/tag_repository.py
from typing import List, Optional, Protocol

from techfolio.core.domain.models import Tag


class ITagRepository(Protocol):
    """
    Port for the tag vocabulary.

    Implementations must enforce uniqueness of `Tag.label` at the storage
    boundary: that constraint is what makes concurrent resolution safe.
    """

    def get(self, label: str) -> Optional[Tag]:
        """Looks up a tag by its normalized label."""
        ...

    def add(self, tag: Tag) -> None:
        """
        Inserts a new tag.

        Raises:
            DuplicateKeyError: a tag with the same label already exists.
        """
        ...

    def list(self) -> List[Tag]:
        """All tags ordered by label."""
        ...

    def health_check(self) -> bool:
        ...
