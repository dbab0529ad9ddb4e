"""CycloneDX 1.6 encoder for package graphs.

The document is built as a plain dict and serialized by
:func:`serialize_document`. Every package node becomes one ``library``
component, except inline build scripts and nodes whose name cannot be
inferred. The recipe identifier is used as ``bom-ref`` so that
``dependencies`` entries can point at components unambiguously.

References
----------
.. [CDX16] CycloneDX Specification v1.6 (2024). https://cyclonedx.org/specification/overview/
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from nix2sbom.core.graph.models import PackageGraph, PackageNode
from nix2sbom.core.nix.models import License
from nix2sbom.core.sbom.models import TOOL_NAME, TOOL_VENDOR, DocumentMetadata

logger = logging.getLogger(__name__)

BOM_FORMAT = "CycloneDX"
SPEC_VERSION = "1.6"


def _author(node: PackageNode) -> str | None:
    parts = []
    for maintainer in node.get_maintainers():
        if maintainer.email:
            parts.append(f"{maintainer.name} ({maintainer.email})")
        else:
            parts.append(maintainer.name)
    return ", ".join(parts) or None


def _license_choice(license_: License) -> dict[str, Any] | None:
    """One ``licenses`` entry. A license carries either an id or a name."""
    if license_.spdx_id:
        entry: dict[str, Any] = {"id": license_.spdx_id}
    else:
        name = license_.name or license_.full_name or license_.short_name
        if not name:
            return None
        entry = {"name": name}
    if license_.url:
        entry["url"] = license_.url
    return {"license": entry}


def _external_references(node: PackageNode) -> list[dict[str, str]]:
    refs = [{"type": "website", "url": homepage} for homepage in node.get_homepages()]
    refs.extend({"type": "vcs", "url": git_url} for git_url in node.get_git_urls())
    refs.extend({"type": "distribution", "url": url} for url in node.get_urls())
    return refs


def _commits(graph: PackageGraph, node: PackageNode) -> list[dict[str, str]]:
    commits = []
    for patch_id in sorted(node.patches):
        patch_url = graph.nodes[patch_id].main_recipe.get_url()
        if patch_url is None:
            logger.warning("No URL found for patch %s of %s", patch_id, node.id)
            continue
        commits.append({"url": patch_url})
    return commits


class CycloneDXEncoder:
    """Encode a :class:`PackageGraph` as a CycloneDX 1.6 document.

    Usage::

        encoder = CycloneDXEncoder(graph)
        document = encoder.generate()
    """

    def __init__(self, graph: PackageGraph, metadata: DocumentMetadata | None = None) -> None:
        self._graph = graph
        self._metadata = metadata or DocumentMetadata()

    def component(self, node: PackageNode) -> dict[str, Any] | None:
        """Encode one node, or return ``None`` if it is not a package."""
        if node.is_inline_script():
            return None
        name = node.get_name()
        if name is None:
            logger.debug("Skipping %s: no name could be inferred", node.id)
            return None

        component: dict[str, Any] = {
            "type": "library",
            "bom-ref": node.id,
            "name": name,
            "scope": "required",
            "purl": node.get_purl().to_string(),
        }
        version = node.get_version()
        if version:
            component["version"] = version
        description = node.get_description()
        if description:
            component["description"] = description
        author = _author(node)
        if author:
            component["author"] = author

        licenses = [choice for choice in map(_license_choice, node.get_licenses()) if choice]
        if licenses:
            component["licenses"] = licenses
        refs = _external_references(node)
        if refs:
            component["externalReferences"] = refs
        commits = _commits(self._graph, node)
        if commits:
            component["pedigree"] = {"commits": commits}

        out_path = node.get_out_path()
        if out_path:
            component["properties"] = [{"name": "nix:out_path", "value": out_path}]
        return component

    def generate(self) -> dict[str, Any]:
        """Generate the complete CycloneDX document as a dict.

        ``serialNumber`` is a fresh UUID-4 on each call.
        """
        components: list[dict[str, Any]] = []
        for node in self._graph.nodes.values():
            component = self.component(node)
            if component is not None:
                components.append(component)

        emitted = {component["bom-ref"] for component in components}
        dependencies = []
        for node_id, node in self._graph.nodes.items():
            if node_id not in emitted:
                continue
            depends_on = sorted(child for child in node.children if child in emitted)
            if depends_on:
                dependencies.append({"ref": node_id, "dependsOn": depends_on})

        document: dict[str, Any] = {
            "bomFormat": BOM_FORMAT,
            "specVersion": SPEC_VERSION,
            "serialNumber": f"urn:uuid:{uuid.uuid4()}",
            "version": 1,
            "metadata": {
                "timestamp": self._metadata.timestamp.isoformat(),
                "tools": {
                    "components": [
                        {
                            "type": "application",
                            "author": TOOL_VENDOR,
                            "name": TOOL_NAME,
                            "version": self._metadata.tool_version,
                        }
                    ]
                },
            },
            "components": components,
            "dependencies": dependencies,
        }

        root_id = self._graph.get_root_node()
        if root_id is not None and root_id in emitted:
            root = next(c for c in components if c["bom-ref"] == root_id)
            # The root component is also listed in components; no bom-ref.
            described = {"type": "application", "name": root["name"]}
            if "version" in root:
                described["version"] = root["version"]
            document["metadata"]["component"] = described
        return document
