"""Tests for the indented graph pretty-printer."""

from __future__ import annotations

from nix2sbom.core.graph import DisplayOptions, build_package_graph, is_stdenv_package
from nix2sbom.core.graph.display import REPEATED_MARKER
from nix2sbom.core.nix import load_metadata, load_recipes_from_file
from tests.helpers import (
    DERIVATIONS_FIXTURE,
    METADATA_FIXTURE,
    drv,
    make_recipe,
    make_store,
    out,
)


def _graph():
    return build_package_graph(
        make_store(
            app=make_recipe("app", inputs=("lib", "util"), env={"pname": "app", "version": "1.0"}),
            lib=make_recipe("lib", inputs=("util",), env={"pname": "lib", "version": "2.0"}),
            util=make_recipe("util", env={"pname": "util", "version": "3.0"}),
        )
    )


class TestPrettyPrint:
    def test_indentation_follows_depth(self) -> None:
        lines = _graph().pretty_print(DisplayOptions(print_only_purl=True))
        assert lines == [
            "pkg:generic/app@1.0",
            "  pkg:generic/lib@2.0",
            "    pkg:generic/util@3.0",
            "  pkg:generic/util@3.0" + REPEATED_MARKER,
        ]

    def test_max_depth(self) -> None:
        lines = _graph().pretty_print(DisplayOptions(print_only_purl=True, max_depth=1))
        assert lines == [
            "pkg:generic/app@1.0",
            "  pkg:generic/lib@2.0",
            "  pkg:generic/util@3.0",
        ]

    def test_depth_zero_prints_roots_only(self) -> None:
        lines = _graph().pretty_print(DisplayOptions(print_only_purl=True, max_depth=0))
        assert lines == ["pkg:generic/app@1.0"]

    def test_out_paths(self) -> None:
        lines = _graph().pretty_print(DisplayOptions(print_out_paths=True, max_depth=1))
        assert lines == [out("app"), "  " + out("lib"), "  " + out("util")]

    def test_exclude_list_hides_subtree(self) -> None:
        lines = _graph().pretty_print(DisplayOptions(print_only_purl=True, print_exclude_list=["li"]))
        assert lines == ["pkg:generic/app@1.0", "  pkg:generic/util@3.0"]

    def test_inline_scripts_are_hidden(self) -> None:
        graph = build_package_graph(
            make_store(
                app=make_recipe("app", inputs=("script",), env={"pname": "app"}),
                script=make_recipe("script", env={"name": "builder.sh", "text": "echo"}),
            )
        )
        assert graph.pretty_print(DisplayOptions(print_only_purl=True)) == ["pkg:generic/app"]

    def test_stdenv_packages_hidden_by_default(self) -> None:
        graph = build_package_graph(
            make_store(
                app=make_recipe("app", inputs=("gcc",), env={"pname": "app"}),
                gcc=make_recipe("gcc", env={"pname": "gcc-wrapper", "version": "13.2.0"}),
            )
        )
        assert graph.pretty_print(DisplayOptions(print_only_purl=True)) == ["pkg:generic/app"]
        shown = graph.pretty_print(DisplayOptions(print_only_purl=True, print_stdenv=True))
        assert shown == ["pkg:generic/app", "  pkg:generic/gcc-wrapper@13.2.0"]

    def test_empty_graph(self) -> None:
        assert build_package_graph({}).pretty_print() == []


class TestDetails:
    def test_fixture_details(self) -> None:
        graph = build_package_graph(
            load_recipes_from_file(DERIVATIONS_FIXTURE), load_metadata(METADATA_FIXTURE)
        )
        lines = graph.pretty_print(DisplayOptions())
        assert lines[0].startswith("pkg:generic/hello@2.12.1?download_url=")
        assert lines[1:] == [
            "  - homepage: https://www.gnu.org/software/hello/manual/",
            "  - license: GPL-3.0-or-later",
            "  - patch: https://example.org/patches/fix-build.patch",
        ]

    def test_patch_without_url_shows_identifier(self) -> None:
        graph = build_package_graph(
            make_store(
                app=make_recipe("app", inputs=("fix",), env={"pname": "app", "patches": out("fix")}),
                fix=make_recipe("fix"),
            )
        )
        assert graph.pretty_print() == ["pkg:generic/app", f"  - patch: {drv('fix')}"]


class TestIsStdenvPackage:
    def test_known_prefixes(self) -> None:
        assert is_stdenv_package("autoconf")
        assert is_stdenv_package("libtool")
        assert is_stdenv_package("zlib")

    def test_other_packages(self) -> None:
        assert not is_stdenv_package("hello")
        assert not is_stdenv_package(None)
