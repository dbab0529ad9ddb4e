"""SPDX 2.3 encoder for package graphs.

One SPDX package per package node (inline build scripts excluded), with
relationships:

- ``SPDXRef-DOCUMENT DESCRIBES <root>`` for every root;
- ``<node> DEPENDS_ON <child>`` for every child edge;
- ``<patch> PATCH_APPLIED <node>`` for every patch edge.

Licenses without an SPDX id are written as ``LicenseRef-`` terms and
declared under ``hasExtractedLicensingInfos``.

References
----------
.. [SPDX23] SPDX Specification v2.3. https://spdx.github.io/spdx-spec/v2.3/
"""

from __future__ import annotations

import re
import uuid
from typing import Any

from nix2sbom.core.graph.models import PackageGraph, PackageNode
from nix2sbom.core.sbom.models import TOOL_NAME, DocumentMetadata

SPDX_VERSION = "SPDX-2.3"
# The only value accepted for dataLicense.
DATA_LICENSE = "CC0-1.0"
DOCUMENT_ID = "SPDXRef-DOCUMENT"
NOASSERTION = "NOASSERTION"
NAMESPACE_BASE = "https://spdx.org/spdxdocs/"

_STORE_PREFIX = "/nix/store/"
_INVALID_ID_CHARS_RE = re.compile(r"[^A-Za-z0-9.-]")


def spdx_id(node_id: str) -> str:
    """Return the SPDX element id for a recipe identifier.

    SPDX ids may only contain letters, digits, ``.`` and ``-``.
    """
    if node_id.startswith(_STORE_PREFIX):
        node_id = node_id[len(_STORE_PREFIX):]
    return "SPDXRef-" + _INVALID_ID_CHARS_RE.sub("-", node_id)


def license_ref(label: str) -> str:
    """Return the ``LicenseRef-`` id for a license without an SPDX id."""
    return "LicenseRef-" + _INVALID_ID_CHARS_RE.sub("-", label)


def _license_terms(node: PackageNode) -> list[tuple[str, str | None]]:
    """(expression term, extracted label) pairs for a node's licenses.

    The label is ``None`` for licenses with an SPDX id. Bare nixpkgs names
    such as ``"Public Domain"`` are not valid SPDX expressions and become
    ``LicenseRef-`` terms.
    """
    terms: list[tuple[str, str | None]] = []
    for license_ in node.get_licenses():
        if license_.spdx_id:
            term = (license_.spdx_id, None)
        else:
            label = license_.name or license_.full_name or license_.short_name
            if not label:
                continue
            term = (license_ref(label), label)
        if term[0] not in [existing for existing, _ in terms]:
            terms.append(term)
    return terms


def _license_expression(terms: list[tuple[str, str | None]]) -> str:
    ids = [term for term, _ in terms]
    if not ids:
        return NOASSERTION
    return ids[0] if len(ids) == 1 else "(" + " AND ".join(ids) + ")"


class SPDXEncoder:
    """Encode a :class:`PackageGraph` as an SPDX 2.3 document."""

    def __init__(self, graph: PackageGraph, metadata: DocumentMetadata | None = None) -> None:
        self._graph = graph
        self._metadata = metadata or DocumentMetadata()
        # LicenseRef id -> license label, for hasExtractedLicensingInfos.
        self._extracted: dict[str, str] = {}

    def package(self, node: PackageNode) -> dict[str, Any]:
        urls = node.get_urls()
        terms = _license_terms(node)
        for term, label in terms:
            if label is not None:
                self._extracted.setdefault(term, label)
        package: dict[str, Any] = {
            "SPDXID": spdx_id(node.id),
            "name": node.get_name() or node.id,
            "downloadLocation": urls[0] if urls else NOASSERTION,
            "filesAnalyzed": False,
            "licenseConcluded": NOASSERTION,
            "licenseDeclared": _license_expression(terms),
            "copyrightText": NOASSERTION,
            "externalRefs": [
                {
                    "referenceCategory": "PACKAGE-MANAGER",
                    "referenceType": "purl",
                    "referenceLocator": node.get_purl().to_string(),
                }
            ],
        }
        version = node.get_version()
        if version:
            package["versionInfo"] = version
        homepages = node.get_homepages()
        if homepages:
            package["homepage"] = homepages[0]
        description = node.get_description()
        if description:
            package["summary"] = description
        return package

    def generate(self) -> dict[str, Any]:
        """Generate the complete SPDX document as a dict.

        The document namespace embeds a fresh UUID-4 on each call.
        """
        self._extracted = {}
        included = {
            node_id for node_id, node in self._graph.nodes.items() if not node.is_inline_script()
        }
        packages = [self.package(self._graph.nodes[node_id]) for node_id in sorted(included)]

        relationships: list[dict[str, str]] = []
        for root in self._graph.sorted_roots():
            if root in included:
                relationships.append(
                    {
                        "spdxElementId": DOCUMENT_ID,
                        "relationshipType": "DESCRIBES",
                        "relatedSpdxElement": spdx_id(root),
                    }
                )
        for node_id in sorted(included):
            node = self._graph.nodes[node_id]
            for child in sorted(node.children & included):
                relationships.append(
                    {
                        "spdxElementId": spdx_id(node_id),
                        "relationshipType": "DEPENDS_ON",
                        "relatedSpdxElement": spdx_id(child),
                    }
                )
            for patch in sorted(node.patches & included):
                relationships.append(
                    {
                        "spdxElementId": spdx_id(patch),
                        "relationshipType": "PATCH_APPLIED",
                        "relatedSpdxElement": spdx_id(node_id),
                    }
                )

        root_id = self._graph.get_root_node()
        name = root_id if root_id is not None else TOOL_NAME
        document: dict[str, Any] = {
            "spdxVersion": SPDX_VERSION,
            "dataLicense": DATA_LICENSE,
            "SPDXID": DOCUMENT_ID,
            "name": name,
            "documentNamespace": f"{NAMESPACE_BASE}{spdx_id(name)[len('SPDXRef-'):]}-{uuid.uuid4()}",
            "creationInfo": {
                "created": self._metadata.timestamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
                "creators": [f"Tool: {TOOL_NAME}-{self._metadata.tool_version}"],
            },
            "packages": packages,
            "relationships": relationships,
        }
        if self._extracted:
            document["hasExtractedLicensingInfos"] = [
                {
                    "licenseId": license_id,
                    "name": label,
                    "extractedText": f"nixpkgs license: {label}",
                }
                for license_id, label in sorted(self._extracted.items())
            ]
        return document
