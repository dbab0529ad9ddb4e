"""Recipe and metadata input options shared by every command.

Each command accepts exactly one recipe source:

- a ``TARGET`` argument passed to ``nix derivation show``;
- ``--file``: a pre-exported ``nix derivation show -r`` JSON dump;
- ``--current-system``: the running NixOS system.

Package metadata comes from ``nix-env`` unless ``--metadata`` points to a
snapshot or ``--no-meta`` disables it.
"""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, NoReturn

import click

from nix2sbom.core.graph import PackageGraph, build_package_graph
from nix2sbom.core.nix import (
    CURRENT_SYSTEM_TARGET,
    load_metadata,
    load_recipes,
    load_recipes_from_file,
)
from nix2sbom.exceptions import Nix2SbomError

logger = logging.getLogger(__name__)


def fail(error: Nix2SbomError) -> NoReturn:
    """Report a nix2sbom error on stderr and exit with status 1."""
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def input_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the recipe source and metadata options to a command."""
    decorators = [
        click.argument("target", required=False),
        click.option(
            "--file", "-f", "file",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            default=None,
            help="Read derivations from a JSON dump of `nix derivation show -r`.",
        ),
        click.option(
            "--current-system",
            is_flag=True,
            default=False,
            help=f"Use the current NixOS system ({CURRENT_SYSTEM_TARGET}).",
        ),
        click.option(
            "--metadata",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            envvar="NIX2SBOM_METADATA",
            default=None,
            help="Read package metadata from a JSON dump of `nix-env -qa --meta --json`.",
        ),
        click.option(
            "--no-meta",
            is_flag=True,
            default=False,
            help="Do not collect package metadata.",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        sources = [
            kwargs.get("target") is not None,
            kwargs.get("file") is not None,
            bool(kwargs.get("current_system")),
        ]
        if sum(sources) != 1:
            raise click.UsageError(
                "Exactly one of TARGET, --file or --current-system must be given."
            )
        return func(*args, **kwargs)

    return wrapper


def load_graph(
    target: str | None,
    file: Path | None,
    current_system: bool,
    metadata: Path | None,
    no_meta: bool,
) -> PackageGraph:
    """Load the recipe store and metadata, then build the package graph."""
    if file is not None:
        recipes = load_recipes_from_file(file)
    else:
        recipes = load_recipes(CURRENT_SYSTEM_TARGET if current_system else target)
    index = load_metadata(metadata, disabled=no_meta)
    graph = build_package_graph(recipes, index)
    logger.debug("Graph has %d nodes and %d roots", len(graph), len(graph.root_nodes))
    return graph
