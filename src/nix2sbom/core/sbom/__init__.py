"""Software Bill of Materials encoders for package graphs.

Every encoder is a pure function of a finished :class:`PackageGraph`:

- **CycloneDX 1.6**: the default, one ``library`` component per package
  with purl, licenses, external references and patch commits.
- **SPDX 2.3**: packages plus ``DESCRIBES``/``DEPENDS_ON``/``PATCH_APPLIED``
  relationships.
- **native**: a flat package list keeping Nix-specific details such as
  source fetcher recipes.
- **pretty** and **stats**: human-oriented views of the same graph.
"""

from nix2sbom.core.sbom.cyclonedx import CycloneDXEncoder
from nix2sbom.core.sbom.formats import Format, dump
from nix2sbom.core.sbom.models import (
    DocumentMetadata,
    DumpOptions,
    SerializationFormat,
    serialize_document,
)
from nix2sbom.core.sbom.native import encode_packages
from nix2sbom.core.sbom.spdx import SPDXEncoder

__all__ = [
    "CycloneDXEncoder",
    "DocumentMetadata",
    "DumpOptions",
    "Format",
    "SPDXEncoder",
    "SerializationFormat",
    "dump",
    "encode_packages",
    "serialize_document",
]
