"""
Code element hierarchy reconstruction.

The platform returns code elements as a flat list where each node points at
its parent through ``parentId``. ``build_forest`` links them into trees:

    [{id: 1, code: "NotificationDefect"},
     {id: 2, parentId: 1, name: "Maintenance"},
     {id: 3, parentId: 2, name: "Electricity"}]

    ->  1 NotificationDefect
        └── 2 Maintenance
            └── 3 Electricity

Only nodes reachable from a root end up in the forest. A node whose
``parentId`` does not match any node's ``id`` is dropped, together with its
descendants, without error.
"""

import logging
from collections import defaultdict, deque
from collections.abc import Iterable, Iterator

from core.errors.exceptions import HierarchyCycleError
from taskrequest.schemas.code_elements import CodeElement

logger = logging.getLogger(__name__)


def build_forest(flat_nodes: Iterable[CodeElement]) -> list[CodeElement]:
    """
    Build the code element forest from a flat, parent-referencing list.

    Roots are nodes without a parent reference that carry a ``code``. Children
    keep their input order. The input nodes are not modified: the forest is
    made of copies, so calling this twice on the same list gives two
    structurally identical forests.

    Traversal is iterative (work queue plus a visited set keyed by node id),
    so depth is unbounded and cyclic input cannot recurse forever.

    Args:
        flat_nodes: Code elements as returned by the API

    Returns:
        Root nodes, each with ``children`` filled in recursively

    Raises:
        HierarchyCycleError: A node id is reached a second time, either through
            a parent cycle or because the id appears more than once
    """
    nodes = list(flat_nodes)

    roots: list[CodeElement] = []
    children_by_parent: dict[int | str, list[CodeElement]] = defaultdict(list)
    for node in nodes:
        if node.is_root:
            roots.append(node)
        elif node.parent_id:
            children_by_parent[node.parent_id].append(node)

    forest: list[CodeElement] = []
    queue: deque[CodeElement] = deque()
    for root in roots:
        root_copy = root.model_copy(update={"children": []})
        forest.append(root_copy)
        queue.append(root_copy)

    visited: set[int | str] = set()
    while queue:
        current = queue.popleft()
        if current.id in visited:
            raise HierarchyCycleError(current.id)
        visited.add(current.id)

        for child in children_by_parent.get(current.id, ()):
            child_copy = child.model_copy(update={"children": []})
            current.children.append(child_copy)
            queue.append(child_copy)

    dropped = len(nodes) - len(visited)
    logger.debug(
        "Built code element hierarchy",
        extra={
            "flat_nodes": len(nodes),
            "root_count": len(forest),
            "node_count": len(visited),
        },
    )
    if dropped:
        logger.debug(f"{dropped} code elements not reachable from any root")

    return forest


def walk_forest(forest: Iterable[CodeElement]) -> Iterator[CodeElement]:
    """Yield every node of the forest depth-first, parents before children."""
    stack = list(reversed(list(forest)))
    while stack:
        node = stack.pop()
        yield node
        if node.children:
            stack.extend(reversed(node.children))


def count_nodes(forest: Iterable[CodeElement]) -> int:
    """Total number of nodes in the forest, roots included."""
    return sum(1 for _ in walk_forest(forest))
