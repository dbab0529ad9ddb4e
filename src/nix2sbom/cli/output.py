"""Rich output formatting helpers for the nix2sbom CLI."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from nix2sbom.core.graph import PackageGraphStats

console = Console()


def print_stats(stats: PackageGraphStats) -> None:
    """Print a graph statistics snapshot as panels and tables.

    Args:
        stats: Snapshot from ``PackageGraph.get_stats()``.
    """
    console.print(Panel("[bold]Package graph statistics[/bold]", title="nix2sbom"))
    console.print(f"  Nodes:             [bold]{stats.node_count}[/bold]")
    console.print(f"  Roots:             [bold]{stats.root_count}[/bold]")
    console.print(f"  Patches:           {stats.patch_count}")
    console.print(f"  Source fetchers:   {stats.source_count}")
    console.print(f"  Metadata matches:  {stats.metadata_match_count}")

    if stats.reachable_counts:
        roots_table = Table(
            title=f"Roots ({stats.reachable_mode.value} reachability)",
            show_header=True,
            header_style="bold",
        )
        roots_table.add_column("Root", style="bold")
        roots_table.add_column("Reachable", justify="right")
        roots_table.add_column("Longest path", justify="right")
        for root in sorted(stats.reachable_counts):
            roots_table.add_row(
                root,
                str(stats.reachable_counts[root]),
                str(stats.longest_path_lengths.get(root, 0)),
            )
        console.print(roots_table)

    if stats.longest_path:
        console.print("  Longest path: " + " -> ".join(stats.longest_path))

    if stats.purl_scheme_histogram:
        scheme_table = Table(title="Purl schemes", show_header=True)
        scheme_table.add_column("Scheme", style="bold")
        scheme_table.add_column("Count", justify="right")
        for scheme, count in sorted(stats.purl_scheme_histogram.items()):
            scheme_table.add_row(scheme, str(count))
        console.print(scheme_table)


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout.

    Args:
        data: Any JSON-serializable data structure.
    """
    console.print_json(json.dumps(data, default=str))
