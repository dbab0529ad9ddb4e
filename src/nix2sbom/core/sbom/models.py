"""Shared settings and serialization helpers for the SBOM encoders.

Encoders build plain Python dicts; this module turns them into JSON or
YAML text. XML is recognised as a serialization name so that users get a
clear error instead of an "unknown format" one, but no encoder supports
it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import yaml

from nix2sbom.core.graph.analytics import ReachableMode
from nix2sbom.exceptions import SBOMError

TOOL_NAME = "nix2sbom"
TOOL_VENDOR = "nix2sbom"
_NIX2SBOM_VERSION_DEFAULT = "0.1.0"


def _resolve_nix2sbom_version() -> str:
    """Read the installed nix2sbom version from package metadata."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("nix2sbom")
    except PackageNotFoundError:
        return _NIX2SBOM_VERSION_DEFAULT


class SerializationFormat(Enum):
    JSON = "json"
    YAML = "yaml"
    XML = "xml"

    @classmethod
    def from_string(cls, value: str) -> SerializationFormat | None:
        """Match by suffix, so both ``yaml`` and ``sbom.yml`` are accepted."""
        value = value.lower()
        if value.endswith("json"):
            return cls.JSON
        if value.endswith("yaml") or value.endswith("yml"):
            return cls.YAML
        if value.endswith("xml"):
            return cls.XML
        return None


@dataclass
class DumpOptions:
    """Settings shared by every output format.

    Attributes:
        pretty: Indent JSON output.
        reachable_mode: Reachability mode of the ``stats`` format.
    """

    pretty: bool = True
    reachable_mode: ReachableMode = ReachableMode.INDEPENDENT


@dataclass
class DocumentMetadata:
    """Document-level metadata stamped into every generated SBOM.

    Attributes:
        tool_version: Version of nix2sbom producing the document.
        timestamp: Generation time (UTC). Defaults to *now*.
    """

    tool_version: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.tool_version:
            self.tool_version = _resolve_nix2sbom_version()


def serialize_document(
    document: Any,
    serialization: SerializationFormat,
    options: DumpOptions,
    format_name: str,
) -> str:
    """Serialize an encoder's dict (or list) to text.

    Raises:
        SBOMError: If ``serialization`` is not supported.
    """
    if serialization is SerializationFormat.JSON:
        return json.dumps(document, indent=2 if options.pretty else None)
    if serialization is SerializationFormat.YAML:
        return yaml.safe_dump(document, default_flow_style=False, sort_keys=False)
    raise SBOMError(f"{serialization.value.upper()} is not supported for {format_name}")
