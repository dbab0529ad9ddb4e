"""``nix2sbom sbom`` — Generate an SBOM for a Nix target.

Loads the recipe store and package metadata, builds the package graph
and writes it in the selected format to stdout or to ``--output``.

Exit Codes:
    0 — SBOM generated successfully.
    1 — Loading, graph construction or encoding failed.
    2 — Usage error (for example no recipe source, or two of them).
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from nix2sbom.cli.inputs import fail, input_options, load_graph
from nix2sbom.core.sbom import DumpOptions, Format, SerializationFormat, dump
from nix2sbom.exceptions import Nix2SbomError

logger = logging.getLogger(__name__)


def _parse_format(ctx: click.Context, param: click.Parameter, value: str | None) -> Format:
    if value is None:
        return Format.default()
    fmt = Format.from_string(value)
    if fmt is None:
        raise click.BadParameter(f"unknown format {value!r}")
    return fmt


def _parse_serialization(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> SerializationFormat | None:
    if value is None:
        return None
    serialization = SerializationFormat.from_string(value)
    if serialization is None:
        raise click.BadParameter(f"unknown serialization format {value!r}")
    return serialization


@click.command("sbom")
@input_options
@click.option(
    "--format",
    "fmt",
    callback=_parse_format,
    default=None,
    metavar="FORMAT",
    help="Output format: cdx (default), spdx, native, pretty or stats.",
)
@click.option(
    "--serialization-format",
    "serialization",
    callback=_parse_serialization,
    default=None,
    metavar="SERIALIZATION",
    help="Serialization: json or yaml. Defaults to the format's own default.",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the SBOM to this file instead of stdout.",
)
@click.option(
    "--compact",
    is_flag=True,
    default=False,
    help="Do not indent JSON output.",
)
def sbom_command(
    target: str | None,
    file: Path | None,
    current_system: bool,
    metadata: Path | None,
    no_meta: bool,
    fmt: Format,
    serialization: SerializationFormat | None,
    output: Path | None,
    compact: bool,
) -> None:
    """Generate a Software Bill of Materials for TARGET.

    TARGET is anything `nix derivation show` accepts: a .drv path, an
    output path, a flake reference or a .nix file.
    """
    try:
        graph = load_graph(target, file, current_system, metadata, no_meta)
        text = dump(fmt, serialization, graph, DumpOptions(pretty=not compact))
    except Nix2SbomError as exc:
        fail(exc)

    if output is None:
        click.echo(text)
        return

    try:
        output.write_text(text + "\n", encoding="utf-8")
    except OSError as exc:
        click.echo(f"Error: could not write {output}: {exc}", err=True)
        sys.exit(1)
    logger.info("%s SBOM written to %s", fmt.pretty_name, output)
