"""``nix2sbom stats`` — Summarize the package graph of a Nix target.

Prints node and root counts, per-root reachability and longest path
lengths, and the purl scheme histogram.
"""

from __future__ import annotations

from pathlib import Path

import click

from nix2sbom.cli.inputs import fail, input_options, load_graph
from nix2sbom.core.graph import ReachableMode
from nix2sbom.exceptions import Nix2SbomError


@click.command("stats")
@input_options
@click.option(
    "--reachable-mode",
    type=click.Choice([mode.value for mode in ReachableMode]),
    default=ReachableMode.INDEPENDENT.value,
    show_default=True,
    help="Count each root's subgraph on its own, or share visited nodes between roots.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON.")
def stats_command(
    target: str | None,
    file: Path | None,
    current_system: bool,
    metadata: Path | None,
    no_meta: bool,
    reachable_mode: str,
    as_json: bool,
) -> None:
    """Print statistics about the package graph of TARGET."""
    try:
        graph = load_graph(target, file, current_system, metadata, no_meta)
        stats = graph.get_stats(ReachableMode(reachable_mode))
    except Nix2SbomError as exc:
        fail(exc)

    from nix2sbom.cli.output import print_json, print_stats

    if as_json:
        print_json(stats.to_dict())
    else:
        print_stats(stats)
