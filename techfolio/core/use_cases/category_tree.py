# techfolio/core/use_cases/category_tree.py
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

import structlog

from techfolio.core.domain.exceptions import (
    ConflictError,
    InvalidOperationError,
    SlugConflictError,
    ValidationError,
)
from techfolio.core.domain.hierarchy import CategoryForest
from techfolio.core.domain.models import Category, DeletePolicy, utcnow
from techfolio.core.domain.text import slugify, validate_slug
from techfolio.core.ports.category_repository import ICategoryRepository, TreeChangeSet
from techfolio.core.ports.errors import DuplicateKeyError, StaleSnapshotError
from techfolio.shared.observability import get_tracer
from techfolio.shared.resilience import tree_commit_retrying

logger = structlog.get_logger()
tracer = get_tracer(__name__)

T = TypeVar("T")

NAME_MAX_LENGTH = 96

def _clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name must not be empty.", field="name")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Category name must be at most {NAME_MAX_LENGTH} characters.", field="name")
    return name

class CategoryTree:
    """
    Use Case: Maintains a consistent forest of categories.

    Every structural mutation runs as read-validate-commit against a single
    tree snapshot. The commit is a compare-and-swap on the tree version, so a
    move validated against a stale tree can never be applied; the whole cycle
    is retried on a fresh snapshot instead.
    """

    def __init__(
        self,
        repo: ICategoryRepository,
        max_depth: int = 8,
        default_delete_policy: DeletePolicy = DeletePolicy.BLOCK_IF_HAS_CHILDREN,
        max_attempts: int = 5,
    ):
        self.repo = repo
        self.max_depth = max_depth
        self.default_delete_policy = DeletePolicy(default_delete_policy)
        self.max_attempts = max_attempts

    # --- Queries ---

    def _forest(self) -> CategoryForest:
        return CategoryForest(self.repo.snapshot().categories)

    def get(self, node_id: str) -> Category:
        return self._forest().get(node_id)

    def list(self) -> List[Category]:
        """Every category, roots first, each followed by its subtree."""
        forest = self._forest()
        result = []
        for root in forest.roots():
            result.append(root)
            result.extend(forest.descendants_of(root.id))
        return result

    def roots(self) -> List[Category]:
        return self._forest().roots()

    def children_of(self, node_id: str) -> List[Category]:
        return self._forest().children_of(node_id)

    def ancestors_of(self, node_id: str) -> List[Category]:
        """Parent chain of the node, nearest first, ending at its root."""
        return self._forest().ancestors_of(node_id)

    def descendants_of(self, node_id: str) -> List[Category]:
        """Full subtree of the node in depth-first pre-order, node excluded."""
        return self._forest().descendants_of(node_id)

    # --- Commands ---

    def create(self, name: str, slug: Optional[str] = None, parent_id: Optional[str] = None) -> Category:
        """
        Creates a category as the last child of `parent_id` (or as a root).

        Raises:
            ValidationError: empty name or malformed slug.
            ConflictError: slug already used anywhere in the tree.
            NotFoundError: parent does not exist.
            InvalidOperationError: the new node would exceed the maximum depth.
        """
        name = _clean_name(name)
        slug = validate_slug(slug if slug is not None else slugify(name))

        def plan(forest: CategoryForest) -> Tuple[TreeChangeSet, Category]:
            self._ensure_slug_free(forest, slug)
            depth = 1
            if parent_id is not None:
                depth = forest.depth_of(forest.get(parent_id).id) + 1
            self._ensure_depth(depth)

            node = Category(
                name=name,
                slug=slug,
                parent_id=parent_id,
                position=forest.next_position(parent_id),
            )
            return TreeChangeSet(upserts=(node,)), node

        with tracer.start_as_current_span("use_case.category_tree.create") as span:
            span.set_attribute("techfolio.category_slug", slug)
            node = self._mutate("create", plan)
            logger.info("category_created", category_id=node.id, slug=slug, parent_id=parent_id)
            return node

    def rename(self, node_id: str, name: Optional[str] = None, slug: Optional[str] = None) -> Category:
        """Changes the display name and/or the slug of a category."""
        if name is not None:
            name = _clean_name(name)
        if slug is not None:
            validate_slug(slug)

        def plan(forest: CategoryForest) -> Tuple[TreeChangeSet, Category]:
            node = forest.get(node_id)
            update = {}
            if name is not None and name != node.name:
                update["name"] = name
            if slug is not None and slug != node.slug:
                self._ensure_slug_free(forest, slug)
                update["slug"] = slug
            if not update:
                return TreeChangeSet(), node
            update["updated_at"] = utcnow()
            renamed = node.model_copy(update=update)
            return TreeChangeSet(upserts=(renamed,)), renamed

        with tracer.start_as_current_span("use_case.category_tree.rename"):
            node = self._mutate("rename", plan)
            logger.info("category_renamed", category_id=node_id, slug=node.slug)
            return node

    def move(self, node_id: str, new_parent_id: Optional[str] = None) -> Category:
        """
        Re-parents a category. `new_parent_id=None` makes it a root.

        The proposed parent's ancestor chain is walked up to its root; meeting
        `node_id` on the way means the move would close a cycle.

        Raises:
            NotFoundError: node or new parent does not exist.
            InvalidOperationError: self-parenting, cycle, or depth overflow.
        """
        if new_parent_id is not None and new_parent_id == node_id:
            raise InvalidOperationError(f"Category '{node_id}' cannot be its own parent.")

        def plan(forest: CategoryForest) -> Tuple[TreeChangeSet, Category]:
            node = forest.get(node_id)
            if new_parent_id == node.parent_id:
                return TreeChangeSet(), node

            parent_depth = 0
            if new_parent_id is not None:
                forest.get(new_parent_id)
                if forest.is_ancestor(node_id, new_parent_id):
                    raise InvalidOperationError(
                        f"Cannot move category '{node_id}' under its own descendant '{new_parent_id}'."
                    )
                parent_depth = forest.depth_of(new_parent_id)
            self._ensure_depth(parent_depth + forest.height_of(node_id))

            moved = node.model_copy(update={
                "parent_id": new_parent_id,
                "position": forest.next_position(new_parent_id),
                "updated_at": utcnow(),
            })
            return TreeChangeSet(upserts=(moved,)), moved

        with tracer.start_as_current_span("use_case.category_tree.move") as span:
            span.set_attribute("techfolio.category_id", node_id)
            node = self._mutate("move", plan)
            logger.info("category_moved", category_id=node_id, parent_id=new_parent_id)
            return node

    def reorder(self, parent_id: Optional[str], ordered_ids: Sequence[str]) -> List[Category]:
        """
        Sets the sibling order under `parent_id` (None for the roots).

        `ordered_ids` must name every current child exactly once.
        """
        ordered_ids = list(ordered_ids)

        def plan(forest: CategoryForest) -> Tuple[TreeChangeSet, List[Category]]:
            siblings = forest.children_of(parent_id) if parent_id is not None else forest.roots()
            current = {c.id for c in siblings}
            if len(ordered_ids) != len(set(ordered_ids)) or set(ordered_ids) != current:
                raise ValidationError(
                    "Reorder must list every child of the parent exactly once.", field="ordered_ids"
                )
            now = utcnow()
            by_id = {c.id: c for c in siblings}
            reordered = []
            changed = []
            for position, category_id in enumerate(ordered_ids):
                node = by_id[category_id]
                if node.position != position:
                    node = node.model_copy(update={"position": position, "updated_at": now})
                    changed.append(node)
                reordered.append(node)
            return TreeChangeSet(upserts=tuple(changed)), reordered

        with tracer.start_as_current_span("use_case.category_tree.reorder"):
            result = self._mutate("reorder", plan)
            logger.info("categories_reordered", parent_id=parent_id, count=len(result))
            return result

    def delete(self, node_id: str, policy: Optional[DeletePolicy] = None) -> List[str]:
        """
        Deletes a category according to `policy` (configured default if None).

        - BLOCK_IF_HAS_CHILDREN: ConflictError if the node has any child.
        - REASSIGN_CHILDREN_TO_PARENT: children move to the node's parent,
          appended after its existing children.
        - CASCADE_DELETE: the whole subtree is removed.

        Returns:
            Ids of every removed category.
        """
        policy = DeletePolicy(policy) if policy is not None else self.default_delete_policy

        def plan(forest: CategoryForest) -> Tuple[TreeChangeSet, List[str]]:
            node = forest.get(node_id)
            children = forest.children_of(node_id)

            if policy == DeletePolicy.CASCADE_DELETE:
                removed = [node_id] + [d.id for d in forest.descendants_of(node_id)]
                return TreeChangeSet(deletes=tuple(removed)), removed

            if children and policy == DeletePolicy.BLOCK_IF_HAS_CHILDREN:
                raise ConflictError(
                    f"Category '{node_id}' has {len(children)} child categories; "
                    "choose a reassign or cascade policy to delete it."
                )

            now = utcnow()
            start = forest.next_position(node.parent_id)
            reparented = tuple(
                child.model_copy(update={
                    "parent_id": node.parent_id,
                    "position": start + offset,
                    "updated_at": now,
                })
                for offset, child in enumerate(children)
            )
            return TreeChangeSet(upserts=reparented, deletes=(node_id,)), [node_id]

        with tracer.start_as_current_span("use_case.category_tree.delete") as span:
            span.set_attribute("techfolio.delete_policy", policy.value)
            removed = self._mutate("delete", plan)
            logger.info("category_deleted", category_id=node_id, policy=policy.value, removed=len(removed))
            return removed

    # --- Internals ---

    def _ensure_slug_free(self, forest: CategoryForest, slug: str) -> None:
        if forest.find_by_slug(slug) is not None:
            raise SlugConflictError(slug, scope="categories")

    def _ensure_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            raise InvalidOperationError(
                f"Category tree depth would be {depth}; the maximum is {self.max_depth}."
            )

    def _mutate(self, operation: str, plan: Callable[[CategoryForest], Tuple[TreeChangeSet, T]]) -> T:
        """
        Runs `plan` against a fresh snapshot and commits its change set with
        the snapshot's version. Lost races are retried; domain errors are not.
        """
        try:
            for attempt in tree_commit_retrying(self.max_attempts):
                with attempt:
                    snapshot = self.repo.snapshot()
                    changes, result = plan(CategoryForest(snapshot.categories))
                    if not changes.is_empty():
                        self.repo.commit(changes, expected_version=snapshot.version)
        except StaleSnapshotError as e:
            logger.warning("category_commit_contended", operation=operation, attempts=self.max_attempts)
            raise ConflictError(
                f"Category tree is being modified concurrently; '{operation}' gave up after "
                f"{self.max_attempts} attempts."
            ) from e
        except DuplicateKeyError as e:
            # The store saw a slug clash our snapshot did not.
            raise ConflictError(f"Category slug is already in use; '{operation}' was rejected.") from e
        return result
