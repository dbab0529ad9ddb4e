"""``nix2sbom tree`` — Print the package graph of a Nix target as a tree."""

from __future__ import annotations

from pathlib import Path

import click

from nix2sbom.cli.inputs import fail, input_options, load_graph
from nix2sbom.core.graph import DisplayOptions
from nix2sbom.exceptions import Nix2SbomError


@click.command("tree")
@input_options
@click.option(
    "--depth",
    type=click.IntRange(min=0),
    default=None,
    help="Deepest level to print; roots are level 0. Unlimited by default.",
)
@click.option("--stdenv", is_flag=True, default=False, help="Also print standard toolchain packages.")
@click.option("--purl-only", is_flag=True, default=False, help="Print only purls, without details.")
@click.option("--out-paths", is_flag=True, default=False, help="Print output store paths instead of purls.")
@click.option(
    "--exclude",
    multiple=True,
    metavar="PREFIX",
    help="Hide packages whose name starts with PREFIX. Repeatable.",
)
def tree_command(
    target: str | None,
    file: Path | None,
    current_system: bool,
    metadata: Path | None,
    no_meta: bool,
    depth: int | None,
    stdenv: bool,
    purl_only: bool,
    out_paths: bool,
    exclude: tuple[str, ...],
) -> None:
    """Print the dependency tree of TARGET.

    Subtrees already printed are shown once more with a (*) marker and
    not expanded again.
    """
    options = DisplayOptions(
        print_stdenv=stdenv,
        print_only_purl=purl_only,
        print_out_paths=out_paths,
        print_exclude_list=list(exclude),
        max_depth=depth,
    )
    try:
        graph = load_graph(target, file, current_system, metadata, no_meta)
        lines = graph.pretty_print(options)
    except Nix2SbomError as exc:
        fail(exc)

    for line in lines:
        click.echo(line)
