"""nix2sbom CLI — Software Bill of Materials extraction for Nix.

Entry point for the ``nix2sbom`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    sbom   — Generate a CycloneDX, SPDX or native SBOM.
    stats  — Summarize the package graph.
    tree   — Print the package graph as an indented tree.

Usage::

    nix2sbom sbom /nix/store/...-hello-2.12.1.drv
    nix2sbom sbom --current-system --format spdx -o system.spdx.json
    nix2sbom sbom --file derivations.json --metadata packages.json
    nix2sbom stats --file derivations.json --no-meta
    nix2sbom tree --file derivations.json --depth 2 --purl-only
"""

from __future__ import annotations

import logging
import sys

import click

from nix2sbom import __version__
from nix2sbom.cli.sbom_cmd import sbom_command
from nix2sbom.cli.stats_cmd import stats_command
from nix2sbom.cli.tree_cmd import tree_command

LOG_FORMAT = "[%(levelname)s] %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@click.group()
@click.version_option(version=__version__, prog_name="nix2sbom")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    envvar="NIX2SBOM_LOG_LEVEL",
    default="INFO",
    show_default=True,
    help="Verbosity of the diagnostics written to stderr.",
)
def cli(log_level: str) -> None:
    """nix2sbom: Software Bill of Materials extraction for Nix.

    Reads the derivation graph of a Nix target, classifies every input
    as a package dependency, a source fetcher or a patch, infers names,
    versions and package URLs, and writes the result as an SBOM.
    """
    logging.basicConfig(
        stream=sys.stderr,
        level=log_level.upper(),
        format=LOG_FORMAT,
        force=True,
    )


# Register all subcommands
cli.add_command(sbom_command)
cli.add_command(stats_command)
cli.add_command(tree_command)
