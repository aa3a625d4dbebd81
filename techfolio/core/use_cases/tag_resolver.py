# techfolio/core/use_cases/tag_resolver.py
from typing import Iterable, List, Tuple

import structlog

from techfolio.core.domain.exceptions import ConflictError
from techfolio.core.domain.models import Tag
from techfolio.core.domain.text import normalize_label
from techfolio.core.ports.errors import DuplicateKeyError
from techfolio.core.ports.tag_repository import ITagRepository
from techfolio.shared.resilience import tag_conflict_retrying

logger = structlog.get_logger()

class TagResolver:
    """
    Use Case: Turns free-form labels into shared, deduplicated tags.
    """

    def __init__(self, repo: ITagRepository, max_attempts: int = 5):
        self.repo = repo
        self.max_attempts = max_attempts

    normalize = staticmethod(normalize_label)

    def resolve(self, label: str) -> Tag:
        """
        Returns the tag for the normalized label, creating it on first use.

        Safe under concurrent calls for the same label: the repository's
        uniqueness constraint rejects the losing insert and the retry picks
        up the row the winner created.
        """
        normalized = normalize_label(label)
        try:
            for attempt in tag_conflict_retrying(self.max_attempts):
                with attempt:
                    existing = self.repo.get(normalized)
                    if existing is not None:
                        return existing
                    tag = Tag(label=normalized)
                    self.repo.add(tag)
                    logger.info("tag_created", label=normalized)
                    return tag
        except DuplicateKeyError as e:
            raise ConflictError(f"Could not resolve tag '{normalized}' after {self.max_attempts} attempts.") from e

    def resolve_many(self, labels: Iterable[str]) -> Tuple[str, ...]:
        """Resolves each label and returns the distinct normalized labels in input order."""
        seen = {}
        for label in labels:
            tag = self.resolve(label)
            seen.setdefault(tag.label, None)
        return tuple(seen)

    def exists(self, label: str) -> bool:
        return self.repo.get(label) is not None

    def list(self) -> List[Tag]:
        return self.repo.list()
