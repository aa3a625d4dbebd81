# tests/core/test_category_tree.py
from concurrent.futures import ThreadPoolExecutor

import pytest

from techfolio.core.domain.exceptions import (
    CategoryNotFoundError,
    ConflictError,
    InvalidOperationError,
    ValidationError,
)
from techfolio.core.domain.hierarchy import CategoryForest
from techfolio.core.domain.models import DeletePolicy
from techfolio.core.ports.errors import StaleSnapshotError
from techfolio.core.use_cases.category_tree import CategoryTree

def assert_forest(repo):
    """Every parent exists, no node is its own ancestor, slugs are unique."""
    nodes = repo.snapshot().categories
    forest = CategoryForest(nodes)
    for node in nodes.values():
        assert node.parent_id is None or node.parent_id in nodes
        assert not forest.is_ancestor(node.id, node.id)
        chain = [node.id] + [a.id for a in forest.ancestors_of(node.id)]
        assert len(chain) == len(set(chain))
        assert nodes[chain[-1]].parent_id is None
    slugs = [n.slug for n in nodes.values()]
    assert len(slugs) == len(set(slugs))

class TestCreate:
    def test_slug_derived_from_name(self, tree):
        node = tree.create("Engineering")
        assert node.slug == "engineering"
        assert node.parent_id is None

    def test_children_are_appended(self, tree):
        root = tree.create("Engineering")
        first = tree.create("Backend", parent_id=root.id)
        second = tree.create("Frontend", parent_id=root.id)
        assert (first.position, second.position) == (0, 1)
        assert [c.id for c in tree.children_of(root.id)] == [first.id, second.id]

    def test_slug_is_unique_across_the_whole_tree(self, tree):
        """Siblings or not, two categories never share a slug."""
        a = tree.create("A")
        tree.create("Tools", parent_id=a.id)
        with pytest.raises(ConflictError):
            tree.create("Tools")

    def test_unknown_parent(self, tree):
        with pytest.raises(CategoryNotFoundError):
            tree.create("Orphan", parent_id="nope")

    def test_empty_name(self, tree):
        with pytest.raises(ValidationError):
            tree.create("   ")

    def test_max_depth(self, category_repo):
        tree = CategoryTree(category_repo, max_depth=2)
        root = tree.create("L1")
        child = tree.create("L2", parent_id=root.id)
        with pytest.raises(InvalidOperationError):
            tree.create("L3", parent_id=child.id)

class TestMove:
    def test_engineering_scenario(self, tree):
        """
        Scenario: Engineering > Backend; moving Engineering under Backend.
        Expected: InvalidOperation; a second 'backend' slug conflicts; deleting
        the childless Backend with the blocking policy succeeds.
        """
        # Arrange
        engineering = tree.create("Engineering")
        backend = tree.create("Backend", parent_id=engineering.id)
        assert backend.slug == "backend"

        # Act & Assert
        with pytest.raises(InvalidOperationError):
            tree.move(engineering.id, backend.id)
        with pytest.raises(ConflictError):
            tree.create("Other", slug="backend")

        removed = tree.delete(backend.id, policy=DeletePolicy.BLOCK_IF_HAS_CHILDREN)
        assert removed == [backend.id]
        assert tree.children_of(engineering.id) == []

    def test_self_parent_rejected(self, tree):
        node = tree.create("Solo")
        with pytest.raises(InvalidOperationError):
            tree.move(node.id, node.id)

    def test_move_under_deep_descendant_rejected(self, tree):
        a = tree.create("A")
        b = tree.create("B", parent_id=a.id)
        c = tree.create("C", parent_id=b.id)
        with pytest.raises(InvalidOperationError):
            tree.move(a.id, c.id)
        assert tree.get(a.id).parent_id is None

    def test_move_to_root_and_back(self, tree):
        a = tree.create("A")
        b = tree.create("B", parent_id=a.id)
        moved = tree.move(b.id, None)
        assert moved.parent_id is None
        assert [r.id for r in tree.roots()] == [a.id, b.id]

        moved = tree.move(b.id, a.id)
        assert tree.ancestors_of(b.id)[0].id == a.id
        assert moved.position == 0

    def test_move_carries_subtree(self, tree):
        a = tree.create("A")
        b = tree.create("B", parent_id=a.id)
        c = tree.create("C", parent_id=b.id)
        d = tree.create("D")
        tree.move(b.id, d.id)
        assert [n.id for n in tree.descendants_of(d.id)] == [b.id, c.id]
        assert tree.descendants_of(a.id) == []

    def test_move_respects_depth_of_subtree(self, category_repo):
        tree = CategoryTree(category_repo, max_depth=3)
        a = tree.create("A")
        b = tree.create("B", parent_id=a.id)
        x = tree.create("X")
        y = tree.create("Y", parent_id=x.id)
        # X has height 2; under B (depth 2) its leaf would sit at depth 4.
        with pytest.raises(InvalidOperationError):
            tree.move(x.id, b.id)
        assert tree.get(y.id).parent_id == x.id

    def test_unknown_target(self, tree):
        a = tree.create("A")
        with pytest.raises(CategoryNotFoundError):
            tree.move(a.id, "missing")

class TestQueries:
    def test_ancestors_and_descendants(self, tree):
        a = tree.create("A")
        b = tree.create("B", parent_id=a.id)
        c = tree.create("C", parent_id=b.id)
        e = tree.create("E", parent_id=a.id)

        assert [n.id for n in tree.ancestors_of(c.id)] == [b.id, a.id]
        assert [n.id for n in tree.descendants_of(a.id)] == [b.id, c.id, e.id]
        assert [n.id for n in tree.list()] == [a.id, b.id, c.id, e.id]

    def test_unknown_node(self, tree):
        with pytest.raises(CategoryNotFoundError):
            tree.ancestors_of("missing")

class TestRenameAndReorder:
    def test_rename_keeps_slug_unique(self, tree):
        a = tree.create("A")
        b = tree.create("B")
        renamed = tree.rename(a.id, name="Alpha", slug="alpha")
        assert (renamed.name, renamed.slug) == ("Alpha", "alpha")
        with pytest.raises(ConflictError):
            tree.rename(b.id, slug="alpha")

    def test_reorder_siblings(self, tree):
        root = tree.create("Root")
        x = tree.create("X", parent_id=root.id)
        y = tree.create("Y", parent_id=root.id)
        z = tree.create("Z", parent_id=root.id)

        tree.reorder(root.id, [z.id, x.id, y.id])
        assert [c.id for c in tree.children_of(root.id)] == [z.id, x.id, y.id]

    def test_reorder_requires_exact_children(self, tree):
        root = tree.create("Root")
        x = tree.create("X", parent_id=root.id)
        tree.create("Y", parent_id=root.id)
        with pytest.raises(ValidationError):
            tree.reorder(root.id, [x.id])
        with pytest.raises(ValidationError):
            tree.reorder(root.id, [x.id, x.id])

class TestDelete:
    @pytest.fixture
    def family(self, tree):
        top = tree.create("Top")
        mid = tree.create("Mid", parent_id=top.id)
        sibling = tree.create("Sibling", parent_id=top.id)
        leaf = tree.create("Leaf", parent_id=mid.id)
        return top, mid, sibling, leaf

    def test_block_if_has_children(self, tree, family):
        top, mid, _, _ = family
        with pytest.raises(ConflictError):
            tree.delete(mid.id, policy=DeletePolicy.BLOCK_IF_HAS_CHILDREN)
        assert tree.get(mid.id)

    def test_default_policy_blocks(self, tree, family):
        _, mid, _, _ = family
        with pytest.raises(ConflictError):
            tree.delete(mid.id)

    def test_reassign_children_to_parent(self, tree, family):
        top, mid, sibling, leaf = family
        removed = tree.delete(mid.id, policy=DeletePolicy.REASSIGN_CHILDREN_TO_PARENT)
        assert removed == [mid.id]
        assert [c.id for c in tree.children_of(top.id)] == [sibling.id, leaf.id]

    def test_reassign_root_children_become_roots(self, tree, family):
        top, mid, sibling, _ = family
        tree.delete(top.id, policy=DeletePolicy.REASSIGN_CHILDREN_TO_PARENT)
        assert {r.id for r in tree.roots()} == {mid.id, sibling.id}

    def test_cascade_delete(self, tree, family, category_repo):
        top, mid, sibling, leaf = family
        removed = tree.delete(mid.id, policy=DeletePolicy.CASCADE_DELETE)
        assert set(removed) == {mid.id, leaf.id}
        assert [c.id for c in tree.children_of(top.id)] == [sibling.id]
        assert_forest(category_repo)

    def test_unknown_node(self, tree):
        with pytest.raises(CategoryNotFoundError):
            tree.delete("missing")

class TestConcurrency:
    def test_concurrent_opposite_moves_never_create_a_cycle(self, category_repo):
        """
        Scenario: Two writers race to put A under B and B under A.
        Expected: At most one succeeds; the other sees the committed move and
        is rejected. The forest invariant holds afterwards.
        """
        tree = CategoryTree(category_repo, max_attempts=50)
        for i in range(20):
            a = tree.create(f"A-{i}")
            b = tree.create(f"B-{i}")

            def attempt(args):
                node, parent = args
                try:
                    tree.move(node, parent)
                    return True
                except (InvalidOperationError, ConflictError):
                    return False

            with ThreadPoolExecutor(max_workers=2) as pool:
                results = list(pool.map(attempt, [(a.id, b.id), (b.id, a.id)]))

            assert results.count(True) <= 1
            assert_forest(category_repo)

    def test_many_concurrent_moves_keep_the_forest(self, category_repo):
        tree = CategoryTree(category_repo, max_depth=64, max_attempts=100)
        ids = [tree.create(f"N{i}").id for i in range(8)]
        pairs = [(ids[i], ids[j]) for i in range(8) for j in range(8) if i != j]

        def attempt(args):
            try:
                tree.move(*args)
            except (InvalidOperationError, ConflictError):
                pass

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(attempt, pairs))

        assert_forest(category_repo)

    def test_stale_commit_is_retried(self, category_repo):
        """
        Scenario: The first commit loses the race (stale version).
        Expected: The cycle reruns on a fresh snapshot and succeeds.
        """
        calls = {"count": 0}
        real_commit = category_repo.commit

        def flaky_commit(changes, expected_version):
            calls["count"] += 1
            if calls["count"] == 1:
                raise StaleSnapshotError(expected_version, expected_version + 1)
            return real_commit(changes, expected_version)

        category_repo.commit = flaky_commit
        tree = CategoryTree(category_repo, max_attempts=3)

        node = tree.create("Retried")

        assert calls["count"] == 2
        assert tree.get(node.id).slug == "retried"

    def test_retries_exhausted_becomes_conflict(self, category_repo):
        def always_stale(changes, expected_version):
            raise StaleSnapshotError(expected_version, expected_version + 1)

        category_repo.commit = always_stale
        tree = CategoryTree(category_repo, max_attempts=2)

        with pytest.raises(ConflictError):
            tree.create("Never")
