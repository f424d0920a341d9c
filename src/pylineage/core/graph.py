"""
Inheritance graph — parent/child adjacency built from resolved bases.

Traversal is breadth-first with a visited set, so cyclic input (which only
broken code can produce) terminates.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Iterable

from ..store.models import BaseRef, ClassId
from .registry import ClassRegistry

logger = logging.getLogger(__name__)

TRAVERSAL_MODES = ("all", "direct")


@dataclass(frozen=True)
class UnresolvedBase:
    """A base expression that did not become an edge, kept for diagnostics."""
    class_id: ClassId
    base: BaseRef
    reason: str  # external | unresolved | keyword | unsupported


class InheritanceGraph:
    def __init__(self):
        self.parent_to_children: dict[ClassId, set[ClassId]] = {}
        self.child_to_parents: dict[ClassId, set[ClassId]] = {}
        self.unresolved: list[UnresolvedBase] = []

    @classmethod
    def build(cls, registry: ClassRegistry) -> "InheritanceGraph":
        """Resolve every class's bases and record an edge for each hit."""
        graph = cls()
        resolver = registry.resolver
        for class_id in sorted(registry.by_id):
            definition = registry.by_id[class_id]
            for base in definition.raw_bases:
                if not base.is_inheritance:
                    graph.unresolved.append(UnresolvedBase(class_id, base, base.kind))
                    continue
                outcome = resolver.resolve_base(base, class_id.module_path, class_id.scope)
                if outcome.is_resolved:
                    graph.add_edge(outcome.class_id, class_id)
                else:
                    logger.debug("%s: base %s is %s", class_id, base.text, outcome.kind)
                    graph.unresolved.append(UnresolvedBase(class_id, base, outcome.kind))
        logger.info("Inheritance graph: %d edges, %d bases not linked",
                    graph.edge_count, len(graph.unresolved))
        return graph

    def add_edge(self, parent: ClassId, child: ClassId):
        if parent == child:
            return
        self.parent_to_children.setdefault(parent, set()).add(child)
        self.child_to_parents.setdefault(child, set()).add(parent)

    @property
    def edge_count(self) -> int:
        return sum(len(c) for c in self.parent_to_children.values())

    def find_subclasses(self, root: ClassId, mode: str = "all") -> list[ClassId]:
        """Classes inheriting from root, directly or (mode="all") transitively."""
        return _traverse(self.parent_to_children, root, mode)

    def find_superclasses(self, root: ClassId, mode: str = "all") -> list[ClassId]:
        return _traverse(self.child_to_parents, root, mode)

    def edges_between(self, nodes: Iterable[ClassId]) -> list[tuple[ClassId, ClassId]]:
        """(parent, child) edges with both ends in nodes, sorted."""
        members = set(nodes)
        edges = []
        for parent in members:
            for child in self.parent_to_children.get(parent, ()):
                if child in members:
                    edges.append((parent, child))
        return sorted(edges)


def _traverse(adjacency: dict[ClassId, set[ClassId]], root: ClassId, mode: str) -> list[ClassId]:
    if mode not in TRAVERSAL_MODES:
        raise ValueError(f"Unknown traversal mode {mode!r}, expected one of {TRAVERSAL_MODES}")

    if mode == "direct":
        return sorted(adjacency.get(root, set()) - {root})

    visited = {root}
    queue = deque([root])
    while queue:
        current = queue.popleft()
        for nxt in adjacency.get(current, ()):
            if nxt not in visited:
                visited.add(nxt)
                queue.append(nxt)
    visited.discard(root)
    return sorted(visited)
