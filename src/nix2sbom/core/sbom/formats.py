"""Output format selection and the single ``dump`` entry point."""

from __future__ import annotations

import logging
from enum import Enum

from nix2sbom.core.graph.display import DisplayOptions
from nix2sbom.core.graph.models import PackageGraph
from nix2sbom.core.sbom.cyclonedx import CycloneDXEncoder
from nix2sbom.core.sbom.models import (
    DocumentMetadata,
    DumpOptions,
    SerializationFormat,
    serialize_document,
)
from nix2sbom.core.sbom.native import encode_packages
from nix2sbom.core.sbom.spdx import SPDXEncoder
from nix2sbom.exceptions import SBOMError

logger = logging.getLogger(__name__)

# The pretty format is a quick overview: direct dependencies only.
PRETTY_MAX_DEPTH = 1


class Format(Enum):
    CYCLONEDX = "cdx"
    SPDX = "spdx"
    PRETTY = "pretty"
    STATS = "stats"
    NATIVE = "native"

    @classmethod
    def from_string(cls, value: str) -> Format | None:
        """Match by suffix, so ``cdx``, ``sbom.cdx`` and ``SPDX`` all work."""
        value = value.lower()
        for fmt in cls:
            if value.endswith(fmt.value):
                return fmt
        if value.endswith("cyclonedx"):
            return cls.CYCLONEDX
        return None

    @classmethod
    def default(cls) -> Format:
        return cls.CYCLONEDX

    @property
    def pretty_name(self) -> str:
        return {
            Format.CYCLONEDX: "CycloneDX",
            Format.SPDX: "SPDX",
            Format.PRETTY: "pretty",
            Format.STATS: "stats",
            Format.NATIVE: "native",
        }[self]

    @property
    def default_serialization(self) -> SerializationFormat:
        if self is Format.NATIVE:
            return SerializationFormat.YAML
        return SerializationFormat.JSON


def dump(
    fmt: Format,
    serialization: SerializationFormat | None,
    graph: PackageGraph,
    options: DumpOptions | None = None,
    metadata: DocumentMetadata | None = None,
) -> str:
    """Render ``graph`` in ``fmt``.

    Args:
        fmt: The output format.
        serialization: Text serialization. ``None`` picks the format's
            default. Ignored by the ``pretty`` format.
        graph: The package graph to render.
        options: Encoder settings.
        metadata: Document metadata for the SBOM formats. Defaults to the
            installed version and the current time.

    Raises:
        SBOMError: If the format does not support ``serialization``.
    """
    options = options or DumpOptions()
    serialization = serialization or fmt.default_serialization
    logger.debug("Dumping %d nodes as %s (%s)", len(graph), fmt.pretty_name, serialization.value)

    if fmt is Format.PRETTY:
        display = DisplayOptions(max_depth=PRETTY_MAX_DEPTH, print_only_purl=True)
        return "\n".join(graph.pretty_print(display))

    if fmt is Format.CYCLONEDX:
        document = CycloneDXEncoder(graph, metadata).generate()
    elif fmt is Format.SPDX:
        document = SPDXEncoder(graph, metadata).generate()
    elif fmt is Format.NATIVE:
        document = encode_packages(graph)
    elif fmt is Format.STATS:
        document = graph.get_stats(options.reachable_mode).to_dict()
    else:
        raise SBOMError(f"Unsupported format {fmt!r}")

    return serialize_document(document, serialization, options, fmt.pretty_name)
