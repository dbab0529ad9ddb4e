"""Tests for package graph construction."""

from __future__ import annotations

import pytest

from nix2sbom.core.graph import build_node, build_package_graph, reachable_count
from nix2sbom.core.nix import RecipeStore, load_metadata, load_recipes_from_file
from nix2sbom.exceptions import GraphInconsistencyError
from tests.helpers import (
    BASH_ID,
    DERIVATIONS_FIXTURE,
    HELLO_ID,
    HELLO_SRC_ID,
    METADATA_FIXTURE,
    PATCH_ID,
    SCRIPT_ID,
    drv,
    make_metadata,
    make_recipe,
    make_store,
    out,
)


class TestEndToEnd:
    """A -> {B, C}, B -> D, C is patched by E."""

    def test_roots(self, e2e_store: RecipeStore) -> None:
        graph = build_package_graph(e2e_store)
        assert graph.root_nodes == {drv("a")}
        assert graph.get_root_node() == drv("a")

    def test_children_and_patches(self, e2e_store: RecipeStore) -> None:
        graph = build_package_graph(e2e_store)
        assert graph.nodes[drv("a")].children == {drv("b"), drv("c")}
        assert graph.nodes[drv("b")].children == {drv("d")}
        assert graph.nodes[drv("c")].patches == {drv("e")}
        assert graph.nodes[drv("c")].children == set()

    def test_reachable_count(self, e2e_store: RecipeStore) -> None:
        graph = build_package_graph(e2e_store)
        assert reachable_count(drv("a"), graph) == 5

    def test_nodes_are_ordered_by_identifier(self, e2e_store: RecipeStore) -> None:
        graph = build_package_graph(e2e_store)
        assert list(graph.nodes) == sorted(graph.nodes)

    def test_insertion_order_does_not_matter(self, e2e_store: RecipeStore) -> None:
        reversed_store = dict(reversed(list(e2e_store.items())))
        first = build_package_graph(e2e_store)
        second = build_package_graph(reversed_store)
        assert first.root_nodes == second.root_nodes
        for node_id, node in first.nodes.items():
            assert node.children == second.nodes[node_id].children
            assert node.patches == second.nodes[node_id].patches


class TestEdgeClassification:
    def test_patch_takes_priority_over_source(self) -> None:
        """An output listed in both ``patches`` and ``src`` is a patch."""
        store = make_store(
            pkg=make_recipe("pkg", inputs=("p",), env={"patches": out("p"), "src": out("p")}),
            p=make_recipe("p", fixed_output=True),
        )
        node = build_node(drv("pkg"), store)
        assert node.patches == {drv("p")}
        assert node.sources == []
        assert node.children == set()

    def test_fixed_output_src_is_a_source(self) -> None:
        store = make_store(
            pkg=make_recipe("pkg", inputs=("tarball",), env={"src": out("tarball")}),
            tarball=make_recipe("tarball", fixed_output=True, env={"url": "https://example.org/pkg-1.0.0.tar.gz"}),
        )
        graph = build_package_graph(store)
        node = graph.nodes[drv("pkg")]
        assert node.source_ids == {drv("tarball")}
        assert node.sources == [store[drv("tarball")]]
        assert node.children == set()
        assert graph.root_nodes == {drv("pkg")}

    def test_srcs_list_is_searched(self) -> None:
        store = make_store(
            pkg=make_recipe("pkg", inputs=("a", "b"), env={"srcs": f"{out('a')} {out('b')}"}),
            a=make_recipe("a", fixed_output=True),
            b=make_recipe("b", fixed_output=True),
        )
        assert build_node(drv("pkg"), store).source_ids == {drv("a"), drv("b")}

    def test_non_fixed_output_src_is_a_child(self) -> None:
        """A ``src`` built by a regular derivation is a real dependency."""
        store = make_store(
            pkg=make_recipe("pkg", inputs=("gen",), env={"src": out("gen")}),
            gen=make_recipe("gen"),
        )
        node = build_node(drv("pkg"), store)
        assert node.children == {drv("gen")}
        assert node.sources == []

    def test_node_urls_include_source_urls(self) -> None:
        store = make_store(
            pkg=make_recipe("pkg", inputs=("tarball",), env={"pname": "pkg", "src": out("tarball")}),
            tarball=make_recipe("tarball", fixed_output=True, env={"url": "mirror://gnu/pkg/pkg-1.0.0.tar.gz"}),
        )
        node = build_package_graph(store).nodes[drv("pkg")]
        assert node.get_urls() == ["https://ftp.gnu.org/pub/gnu/pkg/pkg-1.0.0.tar.gz"]
        assert node.get_version() == "1.0.0"
        assert node.get_git_urls() == ["https://git.savannah.gnu.org/git/pkg.git"]

    def test_everything_else_is_a_child(self) -> None:
        store = make_store(
            pkg=make_recipe("pkg", inputs=("tool",)),
            tool=make_recipe("tool", fixed_output=True),
        )
        assert build_node(drv("pkg"), store).children == {drv("tool")}


class TestMetadataMatching:
    def test_matched_by_full_name(self) -> None:
        store = make_store(z=make_recipe("z", env={"name": "zstd-1.5.5"}))
        index = {"zstd-1.5.5": make_metadata("zstd-1.5.5", pname="zstd")}
        node = build_package_graph(store, index).nodes[drv("z")]
        assert node.metadata is not None
        assert node.get_name() == "zstd"

    def test_unmatched_node_has_no_metadata(self) -> None:
        store = make_store(z=make_recipe("z", env={"name": "zstd-1.5.5"}))
        node = build_package_graph(store, {}).nodes[drv("z")]
        assert node.metadata is None
        assert node.get_homepages() == []
        assert node.get_licenses() == []


class TestInconsistentStore:
    def test_missing_input_is_fatal(self) -> None:
        store = make_store(a=make_recipe("a", inputs=("ghost",)))
        with pytest.raises(GraphInconsistencyError, match="ghost"):
            build_package_graph(store)

    def test_empty_store(self) -> None:
        graph = build_package_graph({})
        assert len(graph) == 0
        assert graph.root_nodes == set()
        assert graph.get_root_node() is None


class TestFixtureStore:
    """The hello fixture: a source tarball, a patch, bash and a script."""

    def test_classification(self) -> None:
        graph = build_package_graph(
            load_recipes_from_file(DERIVATIONS_FIXTURE), load_metadata(METADATA_FIXTURE)
        )
        hello = graph.nodes[HELLO_ID]
        assert graph.root_nodes == {HELLO_ID}
        assert hello.children == {BASH_ID, SCRIPT_ID}
        assert hello.source_ids == {HELLO_SRC_ID}
        assert hello.patches == {PATCH_ID}

    def test_inferred_identity(self) -> None:
        graph = build_package_graph(
            load_recipes_from_file(DERIVATIONS_FIXTURE), load_metadata(METADATA_FIXTURE)
        )
        hello = graph.nodes[HELLO_ID]
        assert hello.get_name() == "hello"
        assert hello.get_version() == "2.12.1"
        assert hello.get_description() == "Program that produces a familiar, friendly greeting"
        assert hello.get_git_urls() == ["https://git.savannah.gnu.org/git/hello.git"]
        assert [m.email for m in hello.get_maintainers()] == ["edolstra+nixpkgs@gmail.com"]
        assert HELLO_ID in graph
        assert graph.get_node("/nix/store/nope.drv") is None
