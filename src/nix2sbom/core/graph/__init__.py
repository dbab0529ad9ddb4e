"""Package graph construction, analytics and display.

Builds the semantic package graph from a flat recipe store and computes
read-only statistics over it. All public names are re-exported here.
"""

from nix2sbom.core.graph.analytics import (
    PackageGraphStats,
    ReachableMode,
    compute_stats,
    longest_path,
    longest_path_ids,
    longest_path_length,
    purl_scheme_histogram,
    reachable_count,
)
from nix2sbom.core.graph.builder import build_node, build_package_graph
from nix2sbom.core.graph.display import (
    STDENV_PACKAGE_PREFIXES,
    DisplayOptions,
    is_stdenv_package,
    pretty_print,
)
from nix2sbom.core.graph.models import PackageGraph, PackageNode

__all__ = [
    "DisplayOptions",
    "PackageGraph",
    "PackageGraphStats",
    "PackageNode",
    "ReachableMode",
    "STDENV_PACKAGE_PREFIXES",
    "build_node",
    "build_package_graph",
    "compute_stats",
    "is_stdenv_package",
    "longest_path",
    "longest_path_ids",
    "longest_path_length",
    "pretty_print",
    "purl_scheme_histogram",
    "reachable_count",
]
