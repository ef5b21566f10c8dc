"""Generic dependency graph abstraction."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ._algorithms import topological_sort


@dataclass(frozen=True, slots=True)
class DependencyGraph[T]:
    """A directed graph of "depends on" relationships between nodes.

    - predecessors[b] = (a,) means "b depends on a"
    - successors[a] = (b,) means "a is depended on by b"

    Adjacency is kept as insertion-ordered tuples so that orderings derived
    from the graph are reproducible.

    Attributes:
        _predecessors: Mapping from node to its direct dependencies.
        _successors: Mapping from node to nodes that depend on it.

    """

    _predecessors: dict[T, tuple[T, ...]] = field(default_factory=dict)
    _successors: dict[T, tuple[T, ...]] = field(default_factory=dict)

    @classmethod
    def from_edges(cls, edges: Iterable[tuple[T, T]], nodes: Iterable[T] = ()) -> DependencyGraph[T]:
        """Build a graph from (source, target) edges.

        An edge (a, b) means "b depends on a". ``nodes`` adds nodes that may
        have no edge at all.

        Example:
            >>> graph = DependencyGraph.from_edges([("leaf", "and")], nodes=["orphan"])
            >>> graph.predecessors("and")
            ('leaf',)
            >>> "orphan" in graph
            True

        """
        predecessors: dict[T, dict[T, None]] = {node: {} for node in nodes}
        successors: dict[T, dict[T, None]] = {node: {} for node in predecessors}

        for src, dst in edges:
            predecessors.setdefault(src, {})
            successors.setdefault(src, {})
            predecessors.setdefault(dst, {})[src] = None
            successors.setdefault(dst, {})
            successors[src][dst] = None

        return cls(
            _predecessors={k: tuple(v) for k, v in predecessors.items()},
            _successors={k: tuple(v) for k, v in successors.items()},
        )

    @property
    def nodes(self) -> tuple[T, ...]:
        """All nodes, in insertion order."""
        return tuple(self._successors)

    def predecessors(self, node: T) -> tuple[T, ...]:
        """Direct dependencies of a node."""
        return self._predecessors.get(node, ())

    def successors(self, node: T) -> tuple[T, ...]:
        """Direct dependents of a node."""
        return self._successors.get(node, ())

    def descendants(self, node: T) -> frozenset[T]:
        """All nodes that transitively depend on ``node``."""
        visited: set[T] = set()
        stack = list(self.successors(node))
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(self.successors(current))
        return frozenset(visited)

    def topological_order(self) -> list[T]:
        """Return nodes with every dependency before its dependents.

        Raises:
            ValueError: If the graph contains a cycle.

        """
        return topological_sort(self._successors)

    def __len__(self) -> int:
        return len(self._successors)

    def __contains__(self, node: object) -> bool:
        return node in self._successors
