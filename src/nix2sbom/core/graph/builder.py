"""Build the package graph from a recipe store.

Construction runs in two passes:

1. **Edges.** Every recipe becomes one node. Each of its input recipes is
   classified by rules that only look at the node itself and at the
   referenced recipe, so the result does not depend on iteration order:

   - the referenced ``out`` path is listed in ``patches`` -> *patch*
     (patches take priority over any other classification);
   - the referenced ``out`` path is listed in ``src``/``srcs`` and the
     referenced recipe is a fixed-output fetch -> *source*;
   - anything else -> *child*, unconditionally.

2. **Roots.** Only once every edge exists can we tell which recipes are
   never referenced: those are the roots.

A reference to a recipe missing from the store means the loader produced
an inconsistent store. It is fatal, since skipping it would leave the
graph claiming a dependency it cannot describe.
"""

from __future__ import annotations

import logging
from collections import deque

from nix2sbom.core.graph.models import PackageGraph, PackageNode
from nix2sbom.core.nix.models import MetadataIndex, PackageMetadata, Recipe, RecipeStore
from nix2sbom.exceptions import GraphInconsistencyError

logger = logging.getLogger(__name__)


def _match_metadata(recipe: Recipe, metadata: MetadataIndex | None) -> PackageMetadata | None:
    if not metadata:
        return None
    name = recipe.get_name()
    if name is None:
        return None
    return metadata.get(name)


def build_node(recipe_id: str, recipes: RecipeStore, metadata: MetadataIndex | None = None) -> PackageNode:
    """Create the node for ``recipe_id`` and classify its input edges.

    Raises:
        GraphInconsistencyError: If an input references a recipe that is
            not in ``recipes``.
    """
    recipe = recipes[recipe_id]
    node = PackageNode(id=recipe_id, main_recipe=recipe, metadata=_match_metadata(recipe, metadata))

    patch_paths = set(recipe.get_patches())
    source_paths = set(recipe.get_source_paths())

    visited: set[str] = set()
    worklist: deque[str] = deque(sorted(recipe.input_recipes))
    while worklist:
        input_id = worklist.popleft()
        if input_id in visited:
            continue
        visited.add(input_id)

        input_recipe = recipes.get(input_id)
        if input_recipe is None:
            raise GraphInconsistencyError(
                f"Derivation {recipe_id} references {input_id}, which is not in the store"
            )

        out_path = input_recipe.get_out_path()
        if out_path and out_path in patch_paths:
            node.patches.add(input_id)
        elif out_path and out_path in source_paths and input_recipe.is_fixed_output():
            node.sources.append(input_recipe)
            node.source_ids.add(input_id)
        else:
            node.children.add(input_id)

    return node


def build_package_graph(
    recipes: RecipeStore,
    metadata: MetadataIndex | None = None,
) -> PackageGraph:
    """Build the :class:`PackageGraph` for a recipe store.

    Args:
        recipes: Recipe identifier -> recipe, as returned by the loader.
        metadata: Optional nixpkgs metadata index keyed by package name.

    Returns:
        The finished graph; nodes are ordered by identifier.

    Raises:
        GraphInconsistencyError: If an edge references a missing recipe.
    """
    graph = PackageGraph()
    referenced: set[str] = set()

    for recipe_id in sorted(recipes):
        node = build_node(recipe_id, recipes, metadata)
        referenced.update(node.children)
        referenced.update(node.patches)
        referenced.update(node.source_ids)
        graph.nodes[recipe_id] = node

    graph.root_nodes = set(recipes) - referenced

    matched = sum(1 for node in graph.nodes.values() if node.metadata is not None)
    logger.info(
        "Built package graph: %d nodes, %d roots, %d with metadata",
        len(graph.nodes),
        len(graph.root_nodes),
        matched,
    )
    return graph
