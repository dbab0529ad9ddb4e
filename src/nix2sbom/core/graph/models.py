"""Package graph data structure.

A ``PackageNode`` wraps exactly one recipe and classifies its outgoing
edges into three disjoint kinds:

- **children**: genuine downstream package dependencies, build-time only
  inputs included;
- **sources**: fixed-output fetchers producing the node's source archive;
- **patches**: recipes whose output is listed in the node's ``patches``.

Whether a child is "really a package" is not decided here. That judgment
belongs to the consumers, through the inference accessors on the node.

Thread safety: the graph is built once and never mutated afterwards, so
concurrent reads are safe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nix2sbom.core.nix.inference import PackageURL, infer_name, infer_purl, infer_version
from nix2sbom.core.nix.models import License, Maintainer, PackageMetadata, Recipe
from nix2sbom.core.nix.urls import get_git_url_from_generic_url

if TYPE_CHECKING:
    from nix2sbom.core.graph.analytics import PackageGraphStats, ReachableMode
    from nix2sbom.core.graph.display import DisplayOptions


@dataclass
class PackageNode:
    """One recipe of the store, enriched with classified edges.

    Attributes:
        id: The recipe identifier (derivation path).
        main_recipe: The wrapped recipe.
        metadata: nixpkgs metadata, present only when the recipe's name
            matched an entry of the metadata index.
        children: Identifiers of downstream package dependencies.
        sources: Source fetcher recipes feeding this package.
        source_ids: Identifiers of the recipes in ``sources``.
        patches: Identifiers of recipes producing the declared patches.
    """

    id: str
    main_recipe: Recipe
    metadata: PackageMetadata | None = None
    children: set[str] = field(default_factory=set)
    sources: list[Recipe] = field(default_factory=list)
    source_ids: set[str] = field(default_factory=set)
    patches: set[str] = field(default_factory=set)

    # -- Identity -----------------------------------------------------------

    def get_urls(self) -> list[str]:
        """Download URLs of the main recipe, then of each source fetcher."""
        urls = list(self.main_recipe.get_urls())
        for source in self.sources:
            urls.extend(url for url in source.get_urls() if url not in urls)
        return urls

    def get_name(self) -> str | None:
        return infer_name(self.main_recipe, self.metadata, self.get_urls())

    def get_version(self) -> str | None:
        return infer_version(self.main_recipe, self.metadata, self.get_urls())

    def get_purl(self) -> PackageURL:
        return infer_purl(self.main_recipe, self.metadata, self.get_urls())

    def get_display_name(self) -> str:
        """Inferred name, or the recipe identifier when inference fails."""
        return self.get_name() or self.id

    def is_inline_script(self) -> bool:
        """True if the recipe is an inline build script, not a package."""
        return self.main_recipe.is_inline_script()

    def get_out_path(self) -> str | None:
        return self.main_recipe.get_out_path()

    # -- Metadata-derived accessors -------------------------------------------

    def get_description(self) -> str | None:
        if self.metadata is None:
            return None
        return self.metadata.meta.description

    def get_homepages(self) -> list[str]:
        if self.metadata is None:
            return []
        return list(self.metadata.meta.homepages)

    def get_licenses(self) -> list[License]:
        if self.metadata is None:
            return []
        return list(self.metadata.meta.licenses)

    def get_maintainers(self) -> list[Maintainer]:
        if self.metadata is None:
            return []
        return list(self.metadata.meta.maintainers)

    def get_git_urls(self) -> list[str]:
        """Clone URLs derived from the download URLs and the homepages."""
        git_urls: list[str] = []
        for url in [*self.get_urls(), *self.get_homepages()]:
            git_url = get_git_url_from_generic_url(url)
            if git_url and git_url not in git_urls:
                git_urls.append(git_url)
        return git_urls


@dataclass
class PackageGraph:
    """The full package graph built from a recipe store.

    Attributes:
        nodes: Recipe identifier -> node, in identifier order.
        root_nodes: Identifiers never referenced by another node; the
            top-level build targets.
    """

    nodes: dict[str, PackageNode] = field(default_factory=dict)
    root_nodes: set[str] = field(default_factory=set)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def get_node(self, node_id: str) -> PackageNode | None:
        return self.nodes.get(node_id)

    def sorted_roots(self) -> list[str]:
        return sorted(self.root_nodes)

    def get_root_node(self) -> str | None:
        """Return the root identifier when there is exactly one root."""
        if len(self.root_nodes) != 1:
            return None
        return next(iter(self.root_nodes))

    def get_stats(self, mode: ReachableMode | None = None) -> PackageGraphStats:
        """Compute a fresh statistics snapshot (see ``analytics``)."""
        from nix2sbom.core.graph.analytics import ReachableMode, compute_stats

        return compute_stats(self, mode or ReachableMode.INDEPENDENT)

    def pretty_print(self, options: DisplayOptions | None = None) -> list[str]:
        """Render the graph as indented lines (see ``display``)."""
        from nix2sbom.core.graph.display import DisplayOptions, pretty_print

        return pretty_print(self, options or DisplayOptions())
