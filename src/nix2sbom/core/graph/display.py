"""Indented, depth-bounded rendering of a package graph.

Each root is printed at indentation level zero, followed by its children
one level deeper, and so on. A line holds the node's purl (or its output
path when ``print_out_paths`` is set). Unless ``print_only_purl`` is set,
nested detail lines list homepages, licenses and patches.

Nix graphs are highly redundant, so a node's subtree is expanded the
first time it is met only; later occurrences are printed with a ``(*)``
marker. This keeps the output linear in the size of the graph.

Standard toolchain packages (compilers, autotools, coreutils...) appear
under almost every package. They are hidden, together with their
subtrees, unless ``print_stdenv`` is set.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from nix2sbom.core.graph.models import PackageGraph, PackageNode

INDENT = "  "
REPEATED_MARKER = " (*)"

STDENV_PACKAGE_PREFIXES: tuple[str, ...] = (
    "acl",
    "attr",
    "autoconf",
    "automake",
    "bash",
    "binutils",
    "bison",
    "bootstrap-tools",
    "bzip2",
    "coreutils",
    "diffutils",
    "ed",
    "expand-response-params",
    "file",
    "findutils",
    "flex",
    "gawk",
    "gcc",
    "gettext",
    "glibc",
    "gmp",
    "gnugrep",
    "gnum4",
    "gnumake",
    "gnused",
    "gnutar",
    "gzip",
    "isl",
    "libidn2",
    "libmpc",
    "libtool",
    "libunistring",
    "linux-headers",
    "m4",
    "mpfr",
    "patch",
    "patchelf",
    "perl",
    "pkg-config",
    "stdenv",
    "texinfo",
    "update-autotools-gnu-config-scripts",
    "which",
    "xz",
    "zlib",
)


@dataclass
class DisplayOptions:
    """Settings for :func:`pretty_print`.

    Attributes:
        print_stdenv: Also print standard toolchain packages.
        print_only_purl: Print one purl per line, without details.
        print_out_paths: Print output store paths instead of purls.
        print_exclude_list: Extra name prefixes to hide.
        max_depth: Deepest level printed; roots are level ``0``.
            ``None`` prints the whole graph.
    """

    print_stdenv: bool = False
    print_only_purl: bool = False
    print_out_paths: bool = False
    print_exclude_list: list[str] = field(default_factory=list)
    max_depth: int | None = None


def is_stdenv_package(name: str | None) -> bool:
    """Return True if ``name`` starts with a standard toolchain prefix."""
    if not name:
        return False
    return name.startswith(STDENV_PACKAGE_PREFIXES)


def _is_hidden(node: PackageNode, options: DisplayOptions) -> bool:
    if node.is_inline_script():
        return True
    name = node.get_name()
    if not options.print_stdenv and is_stdenv_package(name):
        return True
    return bool(name) and any(name.startswith(prefix) for prefix in options.print_exclude_list)


def _detail_lines(graph: PackageGraph, node: PackageNode) -> list[str]:
    details = [f"homepage: {homepage}" for homepage in node.get_homepages()]
    for license_ in node.get_licenses():
        details.append(f"license: {license_.spdx_id or license_.name or license_.full_name}")
    for patch_id in sorted(node.patches):
        patch = graph.nodes.get(patch_id)
        patch_url = patch.main_recipe.get_url() if patch else None
        details.append(f"patch: {patch_url or patch_id}")
    return details


def _node_label(node: PackageNode, options: DisplayOptions) -> str:
    if options.print_out_paths:
        return node.get_out_path() or node.id
    return node.get_purl().to_string()


def pretty_print(graph: PackageGraph, options: DisplayOptions) -> list[str]:
    """Render ``graph`` as a list of indented lines."""
    lines: list[str] = []
    expanded: set[str] = set()

    stack: list[tuple[str, int]] = [(root, 0) for root in reversed(graph.sorted_roots())]
    while stack:
        node_id, depth = stack.pop()
        node = graph.nodes[node_id]
        if _is_hidden(node, options):
            continue

        indent = INDENT * depth
        if node_id in expanded:
            lines.append(f"{indent}{_node_label(node, options)}{REPEATED_MARKER}")
            continue
        expanded.add(node_id)
        lines.append(f"{indent}{_node_label(node, options)}")

        if not (options.print_only_purl or options.print_out_paths):
            lines.extend(f"{indent}{INDENT}- {detail}" for detail in _detail_lines(graph, node))

        if options.max_depth is not None and depth >= options.max_depth:
            continue
        for child in sorted(node.children, reverse=True):
            stack.append((child, depth + 1))

    return lines
