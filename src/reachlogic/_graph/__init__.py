"""Dependency ordering of model elements.

This module contains:
- DependencyGraph[T]: an immutable directed graph of "depends on" edges
- topological_sort: ordering of nodes, dependencies first
"""

from ._algorithms import topological_sort
from ._dependency_graph import DependencyGraph

__all__ = ["DependencyGraph", "topological_sort"]
