"""Graph algorithms used to order model elements."""

from collections import deque
from collections.abc import Collection, Hashable, Mapping


def topological_sort[T: Hashable](successors: Mapping[T, Collection[T]]) -> list[T]:
    """Sort a graph topologically (dependencies before dependents).

    Nodes with equal standing keep the iteration order of ``successors``,
    so the result is deterministic for an insertion-ordered mapping.

    Args:
        successors: Mapping from node to the nodes that depend on it.
            An edge (a -> b) means "b depends on a". Successor collections
            may name nodes that are not keys of the mapping.

    Returns:
        List of nodes in topological order.

    Raises:
        ValueError: If the graph contains a cycle.

    Example:
        >>> # a requirement used by a strat used by a link
        >>> topological_sort({"requirement": ["strat"], "strat": ["link"], "link": []})
        ['requirement', 'strat', 'link']

    """
    indegree: dict[T, int] = {}
    for node, deps in successors.items():
        indegree.setdefault(node, 0)
        for dep in deps:
            indegree[dep] = indegree.get(dep, 0) + 1

    queue = deque(node for node, degree in indegree.items() if degree == 0)
    order: list[T] = []

    while queue:
        node = queue.popleft()
        order.append(node)
        for successor in successors.get(node, ()):
            indegree[successor] -= 1
            if indegree[successor] == 0:
                queue.append(successor)

    if len(order) != len(indegree):
        stuck = [node for node, degree in indegree.items() if degree > 0]
        msg = f"Cycle detected in graph involving {len(stuck)} node(s), e.g. {stuck[0]!r}"
        raise ValueError(msg)

    return order
