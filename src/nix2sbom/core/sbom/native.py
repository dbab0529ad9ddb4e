"""Native nix2sbom document: a flat, sorted list of packages.

The native format keeps the Nix-specific information the standard SBOM
formats have no field for, such as the fetcher recipes of each package.
"""

from __future__ import annotations

from typing import Any

from nix2sbom.core.graph.models import PackageGraph, PackageNode


def encode_package(node: PackageNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "name": node.get_name(),
        "version": node.get_version(),
        "purl": node.get_purl().to_string(),
        "git_urls": node.get_git_urls(),
        "download_urls": node.get_urls(),
        "homepages": node.get_homepages(),
        "source_recipes": sorted(node.source_ids),
        "patches": sorted(node.patches),
    }


def encode_packages(graph: PackageGraph) -> list[dict[str, Any]]:
    """Encode every non-inline node of ``graph``, sorted by identifier."""
    return [
        encode_package(graph.nodes[node_id])
        for node_id in sorted(graph.nodes)
        if not graph.nodes[node_id].is_inline_script()
    ]
