"""Graph analytics: reachability, longest dependency path, purl schemes.

All functions are read-only over a finished :class:`PackageGraph`. Any
visited set or memo table is passed in explicitly and lives for a single
statistics computation, never at module level, so repeated or concurrent
computations cannot interfere with each other.

Reachability modes
------------------
``ReachableMode.INDEPENDENT`` (default) counts every root's subgraph with
a fresh visited set: overlapping subgraphs count once *per root*.

``ReachableMode.SHARED`` threads one visited and one counted set through
all roots, in identifier order. Nodes shared between roots are only
counted for the first root that reaches them, so per-root numbers depend
on evaluation order. It is kept for comparison with older reports.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from nix2sbom.core.graph.models import PackageGraph, PackageNode
from nix2sbom.exceptions import GraphInconsistencyError

logger = logging.getLogger(__name__)


class ReachableMode(Enum):
    INDEPENDENT = "independent"
    SHARED = "shared"


def _get_node(graph: PackageGraph, node_id: str) -> PackageNode:
    node = graph.nodes.get(node_id)
    if node is None:
        raise GraphInconsistencyError(f"Node {node_id} is referenced but not in the graph")
    return node


# ---------------------------------------------------------------------------
# Reachability
# ---------------------------------------------------------------------------


def reachable_count(
    root: str,
    graph: PackageGraph,
    visited: set[str] | None = None,
    counted: set[str] | None = None,
) -> int:
    """Count the nodes reachable from ``root``, ``root`` included.

    The traversal follows ``children``. Patches attached to a visited node
    are counted as leaves but not traversed; a patch that is also the child
    of another visited node is still expanded through that edge. Every node
    is counted at most once.

    Args:
        root: Identifier to start from.
        graph: The package graph.
        visited: Nodes already expanded through ``children``.
        counted: Nodes already counted, expanded or not. Pass the same
            ``visited`` and ``counted`` sets to several calls to count
            shared nodes only once. ``None`` starts from an empty set,
            which makes the count independent of other roots.

    Returns:
        Number of newly counted nodes. A leaf with no patches counts ``1``.
    """
    if visited is None:
        visited = set()
    if counted is None:
        counted = set()

    count = 0
    stack = [root]
    while stack:
        node_id = stack.pop()
        if node_id in visited:
            continue
        visited.add(node_id)
        if node_id not in counted:
            counted.add(node_id)
            count += 1

        node = _get_node(graph, node_id)
        for patch_id in sorted(node.patches):
            if patch_id not in counted:
                counted.add(patch_id)
                count += 1
        stack.extend(child for child in sorted(node.children, reverse=True) if child not in visited)
    return count


# ---------------------------------------------------------------------------
# Longest path
# ---------------------------------------------------------------------------

# node id -> (longest downstream path length, next node on that path)
LongestPathMemo = dict[str, tuple[int, str | None]]


def _fill_longest_path_memo(root: str, graph: PackageGraph, memo: LongestPathMemo) -> None:
    """Post-order DFS computing the longest ``children`` path below each node.

    Each node is expanded at most once across every call sharing ``memo``,
    so a full statistics run is linear in nodes plus edges.
    """
    in_progress: set[str] = set()
    stack: list[tuple[str, bool]] = [(root, False)]
    while stack:
        node_id, expanded = stack.pop()
        if node_id in memo:
            continue
        node = _get_node(graph, node_id)

        if not expanded:
            if node_id in in_progress:
                raise GraphInconsistencyError(f"Dependency cycle detected through {node_id}")
            in_progress.add(node_id)
            stack.append((node_id, True))
            for child in sorted(node.children, reverse=True):
                if child not in memo:
                    stack.append((child, False))
            continue

        best_length, best_child = 0, None
        for child in sorted(node.children):
            length = memo[child][0] + 1
            if length > best_length:
                best_length, best_child = length, child
        memo[node_id] = (best_length, best_child)
        in_progress.discard(node_id)


def longest_path_ids(root: str, graph: PackageGraph, memo: LongestPathMemo | None = None) -> list[str]:
    """Identifiers along the longest ``children`` path from ``root`` to a leaf.

    Ties go to the lexicographically smallest child identifier.
    """
    if memo is None:
        memo = {}
    _fill_longest_path_memo(root, graph, memo)

    path = [root]
    next_id = memo[root][1]
    while next_id is not None:
        path.append(next_id)
        next_id = memo[next_id][1]
    return path


def longest_path(root: str, graph: PackageGraph, memo: LongestPathMemo | None = None) -> list[str]:
    """Node names along the longest ``children`` path from ``root``.

    Names come from inference and fall back to the recipe identifier.
    """
    return [
        graph.nodes[node_id].get_display_name()
        for node_id in longest_path_ids(root, graph, memo)
    ]


def longest_path_length(root: str, graph: PackageGraph, memo: LongestPathMemo | None = None) -> int:
    """Number of edges on the longest path: ``0`` for a node without children."""
    if memo is None:
        memo = {}
    _fill_longest_path_memo(root, graph, memo)
    return memo[root][0]


# ---------------------------------------------------------------------------
# Purl schemes
# ---------------------------------------------------------------------------


def purl_scheme_histogram(graph: PackageGraph) -> dict[str, int]:
    """Tally the purl scheme of every node reachable from the roots.

    Breadth-first over ``children`` from all roots, each node counted
    once. Patches are not packages and are not traversed.
    """
    histogram: Counter[str] = Counter()
    visited: set[str] = set(graph.root_nodes)
    queue: deque[str] = deque(graph.sorted_roots())
    while queue:
        node = _get_node(graph, queue.popleft())
        histogram[node.get_purl().scheme] += 1
        for child in sorted(node.children):
            if child not in visited:
                visited.add(child)
                queue.append(child)
    return dict(sorted(histogram.items()))


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PackageGraphStats:
    """Read-only statistics snapshot of a package graph."""

    node_count: int
    root_count: int
    reachable_counts: dict[str, int] = field(default_factory=dict)
    longest_path_lengths: dict[str, int] = field(default_factory=dict)
    longest_path: list[str] = field(default_factory=list)
    patch_count: int = 0
    source_count: int = 0
    metadata_match_count: int = 0
    purl_scheme_histogram: dict[str, int] = field(default_factory=dict)
    reachable_mode: ReachableMode = ReachableMode.INDEPENDENT

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation with sorted keys."""
        return {
            "node_count": self.node_count,
            "root_count": self.root_count,
            "reachable_mode": self.reachable_mode.value,
            "reachable_counts": dict(sorted(self.reachable_counts.items())),
            "longest_path_lengths": dict(sorted(self.longest_path_lengths.items())),
            "longest_path": list(self.longest_path),
            "patch_count": self.patch_count,
            "source_count": self.source_count,
            "metadata_match_count": self.metadata_match_count,
            "purl_scheme_histogram": dict(sorted(self.purl_scheme_histogram.items())),
        }


def compute_stats(graph: PackageGraph, mode: ReachableMode = ReachableMode.INDEPENDENT) -> PackageGraphStats:
    """Compute a :class:`PackageGraphStats` snapshot for ``graph``.

    Raises:
        GraphInconsistencyError: If a traversal meets a missing node or a
            dependency cycle.
    """
    roots = graph.sorted_roots()
    if mode is ReachableMode.SHARED:
        visited: set[str] = set()
        counted: set[str] = set()
        reachable = {root: reachable_count(root, graph, visited, counted) for root in roots}
    else:
        reachable = {root: reachable_count(root, graph) for root in roots}

    memo: LongestPathMemo = {}
    lengths = {root: longest_path_length(root, graph, memo) for root in roots}

    overall: list[str] = []
    if lengths:
        deepest_root = min(lengths, key=lambda root: (-lengths[root], root))
        overall = longest_path(deepest_root, graph, memo)

    patch_ids: set[str] = set()
    source_ids: set[str] = set()
    for node in graph.nodes.values():
        patch_ids.update(node.patches)
        source_ids.update(node.source_ids)

    stats = PackageGraphStats(
        node_count=len(graph.nodes),
        root_count=len(roots),
        reachable_counts=reachable,
        longest_path_lengths=lengths,
        longest_path=overall,
        patch_count=len(patch_ids),
        source_count=len(source_ids),
        metadata_match_count=sum(1 for n in graph.nodes.values() if n.metadata is not None),
        purl_scheme_histogram=purl_scheme_histogram(graph),
        reachable_mode=mode,
    )
    logger.debug("Computed stats for %d nodes (%s reachability)", stats.node_count, mode.value)
    return stats
