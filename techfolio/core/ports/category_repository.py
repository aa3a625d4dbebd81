# techfolio/core/ports/category_repository.py
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, Tuple

from techfolio.core.domain.models import Category


@dataclass(frozen=True)
class TreeSnapshot:
    """All categories as of one committed tree version."""
    categories: Dict[str, Category]
    version: int


@dataclass(frozen=True)
class TreeChangeSet:
    """
    A structural mutation to apply atomically.

    `upserts` are full category snapshots (insert or replace by id);
    `deletes` are ids to remove.
    """
    upserts: Tuple[Category, ...] = field(default_factory=tuple)
    deletes: Tuple[str, ...] = field(default_factory=tuple)

    def is_empty(self) -> bool:
        return not self.upserts and not self.deletes


class ICategoryRepository(Protocol):
    """
    Port for the category forest.

    Reads are unsynchronized against the latest committed state. Writes go
    through `commit`, a compare-and-swap on the tree version.
    """

    def get(self, category_id: str) -> Optional[Category]:
        """Returns the category if found, None otherwise."""
        ...

    def get_by_slug(self, slug: str) -> Optional[Category]:
        ...

    def snapshot(self) -> TreeSnapshot:
        """Returns every category together with the current tree version."""
        ...

    def commit(self, changes: TreeChangeSet, expected_version: int) -> int:
        """
        Applies `changes` iff the tree version still equals `expected_version`.

        Returns:
            The new tree version.

        Raises:
            StaleSnapshotError: another commit landed first; nothing was applied.
        """
        ...

    def health_check(self) -> bool:
        """Returns True if the underlying storage is accessible."""
        ...
