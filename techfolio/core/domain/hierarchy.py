# techfolio/core/domain/hierarchy.py
from collections import defaultdict
from typing import Dict, Iterator, List, Mapping, Optional

from techfolio.core.domain.exceptions import CategoryNotFoundError
from techfolio.core.domain.models import Category


class CategoryForest:
    """
    Read-only view over a snapshot of categories keyed by id.

    All structural questions (ancestry, subtree, depth) are answered from the
    parent-id references alone, so the view works the same over an in-memory
    dict or rows loaded from a database.
    """

    def __init__(self, categories: Mapping[str, Category]):
        self._nodes: Dict[str, Category] = dict(categories)
        self._children: Dict[Optional[str], List[Category]] = defaultdict(list)
        for node in self._nodes.values():
            self._children[node.parent_id].append(node)
        for siblings in self._children.values():
            siblings.sort(key=lambda c: (c.position, c.name.casefold(), c.id))

    def __contains__(self, node_id: Optional[str]) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: str) -> Category:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise CategoryNotFoundError(node_id) from None

    def find_by_slug(self, slug: str) -> Optional[Category]:
        return next((c for c in self._nodes.values() if c.slug == slug), None)

    def roots(self) -> List[Category]:
        return list(self._children.get(None, ()))

    def children_of(self, node_id: str) -> List[Category]:
        self.get(node_id)
        return list(self._children.get(node_id, ()))

    def walk_up(self, node_id: str) -> Iterator[Category]:
        """
        Yields the parent chain of `node_id`, nearest first, ending at a root.

        Stops on a repeated id so a corrupted store cannot hang the walk.
        """
        seen = {node_id}
        current = self.get(node_id).parent_id
        while current is not None and current not in seen:
            node = self._nodes.get(current)
            if node is None:
                return
            yield node
            seen.add(current)
            current = node.parent_id

    def ancestors_of(self, node_id: str) -> List[Category]:
        return list(self.walk_up(node_id))

    def descendants_of(self, node_id: str) -> List[Category]:
        """Pre-order depth-first traversal of the subtree, node excluded."""
        self.get(node_id)
        result: List[Category] = []
        stack = list(reversed(self._children.get(node_id, ())))
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(reversed(self._children.get(node.id, ())))
        return result

    def is_ancestor(self, ancestor_id: str, node_id: str) -> bool:
        """True if `ancestor_id` appears on the parent chain of `node_id`."""
        return any(a.id == ancestor_id for a in self.walk_up(node_id))

    def depth_of(self, node_id: str) -> int:
        """Roots have depth 1."""
        return 1 + sum(1 for _ in self.walk_up(node_id))

    def height_of(self, node_id: str) -> int:
        """Number of levels in the subtree rooted at `node_id` (a leaf is 1)."""
        self.get(node_id)
        height = 1
        frontier = [(node_id, 1)]
        while frontier:
            current, level = frontier.pop()
            height = max(height, level)
            frontier.extend((c.id, level + 1) for c in self._children.get(current, ()))
        return height

    def next_position(self, parent_id: Optional[str]) -> int:
        siblings = self._children.get(parent_id, ())
        return max((c.position for c in siblings), default=-1) + 1
