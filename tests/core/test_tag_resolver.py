# tests/core/test_tag_resolver.py
from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

import pytest

from techfolio.core.domain.exceptions import ConflictError, ValidationError
from techfolio.core.domain.models import Tag
from techfolio.core.ports.errors import DuplicateKeyError
from techfolio.core.use_cases.tag_resolver import TagResolver

class TestResolve:
    def test_creates_on_first_use(self, tags, tag_repo):
        tag = tags.resolve("  Machine Learning ")
        assert tag.label == "machine learning"
        assert tag_repo.get("machine learning") == tag

    def test_same_normalized_label_resolves_to_one_tag(self, tags):
        first = tags.resolve("Python")
        second = tags.resolve("PYTHON ")
        assert first == second
        assert len(tags.list()) == 1

    def test_blank_label(self, tags):
        with pytest.raises(ValidationError):
            tags.resolve("  ")

    def test_resolve_many_keeps_order(self, tags):
        assert tags.resolve_many(["b", "A", "B", "c"]) == ("b", "a", "c")

class TestConcurrency:
    def test_concurrent_resolves_create_exactly_one_tag(self, tag_repo):
        """
        Scenario: N callers resolve differently-cased forms of one label at once.
        Expected: Exactly one tag exists and every caller gets it.
        """
        n = 16
        resolver = TagResolver(tag_repo, max_attempts=5)
        barrier = Barrier(n)
        labels = [("Rust" if i % 2 else " rUST ") for i in range(n)]

        def resolve(label):
            barrier.wait()
            return resolver.resolve(label)

        with ThreadPoolExecutor(max_workers=n) as pool:
            results = list(pool.map(resolve, labels))

        assert {t.label for t in results} == {"rust"}
        assert len({t.created_at for t in results}) == 1
        assert [t.label for t in tag_repo.list()] == ["rust"]

    def test_lost_insert_is_retried(self, tag_repo):
        """
        Scenario: Another writer inserts the label between our lookup and insert.
        Expected: The duplicate insert is rejected and the retry returns the winner.
        """
        real_add = tag_repo.add
        winner = Tag(label="go")

        def racing_add(tag):
            real_add(winner)
            real_add(tag)

        tag_repo.add = racing_add
        resolver = TagResolver(tag_repo, max_attempts=3)

        assert resolver.resolve("Go") == winner

    def test_persistent_duplicates_become_conflict(self, tag_repo):
        def always_duplicate(tag):
            raise DuplicateKeyError(tag.label)

        tag_repo.add = always_duplicate
        resolver = TagResolver(tag_repo, max_attempts=2)

        with pytest.raises(ConflictError):
            resolver.resolve("ghost")
