"""Dependency graph of cached targets.

The build engine caches one graph per build. An edge ``upstream ->
downstream`` means ``downstream`` was built from ``upstream``.
"""

from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from revive.log import logger
from revive.parallel import lightly_parallelize
from revive.store import Store

logger = logger.getChild(__name__)


class DependencyGraph:
    """Directed acyclic graph of target dependencies."""

    def __init__(self, edges: Iterable[tuple[str, str]] = (), nodes: Iterable[str] = ()):
        self._nodes: set[str] = set()
        self.edges: dict[str, set[str]] = defaultdict(set)
        self.reverse_edges: dict[str, set[str]] = defaultdict(set)
        for node in nodes:
            self.add_node(node)
        for upstream, downstream in edges:
            self.add_edge(upstream, downstream)

    def __repr__(self) -> str:
        return f"DependencyGraph(nodes={len(self)}, edges={self.edge_count})"

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node: object) -> bool:
        return node in self._nodes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyGraph):
            return NotImplemented
        return self._nodes == other._nodes and self.edge_set() == other.edge_set()

    @property
    def nodes(self) -> set[str]:
        return set(self._nodes)

    @property
    def edge_count(self) -> int:
        return sum(len(v) for v in self.edges.values())

    def edge_set(self) -> set[tuple[str, str]]:
        return {(u, d) for u, downs in self.edges.items() for d in downs}

    def add_node(self, node: str):
        self._nodes.add(node)

    def add_edge(self, upstream: str, downstream: str):
        """Record that ``downstream`` depends on ``upstream``."""
        self._nodes.update((upstream, downstream))
        self.edges[upstream].add(downstream)
        self.reverse_edges[downstream].add(upstream)

    def predecessors(self, node: str) -> set[str]:
        """Direct dependencies of a node."""
        return set(self.reverse_edges.get(node, ()))

    def successors(self, node: str) -> set[str]:
        """Direct dependents of a node."""
        return set(self.edges.get(node, ()))

    def ancestors(self, node: str) -> set[str]:
        """All transitive dependencies of a node (excluding the node itself)."""
        ancestors: set[str] = set()
        to_visit = list(self.reverse_edges.get(node, ()))
        while to_visit:
            dep = to_visit.pop()
            if dep not in ancestors:
                ancestors.add(dep)
                to_visit.extend(self.reverse_edges.get(dep, ()))
        ancestors.discard(node)
        return ancestors

    def check_cycles(self) -> list[str] | None:
        """Check for cycles.

        Returns:
            None if the graph is acyclic, otherwise the nodes of one cycle
            with the first node repeated at the end
        """
        visited: set[str] = set()
        on_path: list[str] = []
        on_path_set: set[str] = set()

        def visit(node: str) -> list[str] | None:
            if node in on_path_set:
                start = on_path.index(node)
                return on_path[start:] + [node]
            if node in visited:
                return None
            visited.add(node)
            on_path.append(node)
            on_path_set.add(node)
            for child in sorted(self.edges.get(node, ())):
                cycle = visit(child)
                if cycle:
                    return cycle
            on_path.pop()
            on_path_set.discard(node)
            return None

        for node in sorted(self._nodes):
            if node not in visited:
                cycle = visit(node)
                if cycle:
                    return cycle
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": sorted(self._nodes),
            "edges": sorted([u, d] for u, d in self.edge_set()),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DependencyGraph":
        return cls(
            edges=[tuple(edge) for edge in data.get("edges", [])],
            nodes=data.get("nodes", []),
        )


def dependencies(seeds: Iterable[str], graph: DependencyGraph) -> set[str]:
    """Transitive dependencies of the seeds, without the seeds themselves.

    Seeds absent from the graph contribute nothing.
    """
    seeds = set(seeds)
    deps: set[str] = set()
    for seed in seeds:
        if seed in graph:
            deps |= graph.ancestors(seed)
    return deps - seeds


def existing_dependencies(
    seeds: Iterable[str],
    graph: DependencyGraph,
    store: Store,
    namespace: str | None = None,
    jobs: int | None = 1,
) -> set[str]:
    """Dependencies of the seeds that were actually cached.

    A graph edge does not guarantee the dependency was ever stored, so each
    candidate is checked against the store.
    """
    candidates = sorted(dependencies(seeds, graph))
    exists = lightly_parallelize(
        candidates,
        lambda key: store.exists(key, namespace=namespace),
        jobs=jobs,
    )
    found = {key for key, present in zip(candidates, exists) if present}
    missing = len(candidates) - len(found)
    if missing:
        logger.debug("%d dependency(ies) in the graph are not cached", missing)
    return found
