"""Shared fixtures for SBOM encoder tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from nix2sbom.core.graph import PackageGraph, build_package_graph
from nix2sbom.core.nix import load_metadata, load_recipes_from_file
from nix2sbom.core.sbom import DocumentMetadata
from tests.helpers import DERIVATIONS_FIXTURE, METADATA_FIXTURE


@pytest.fixture
def hello_graph() -> PackageGraph:
    """The hello fixture store with its nixpkgs metadata."""
    return build_package_graph(
        load_recipes_from_file(DERIVATIONS_FIXTURE), load_metadata(METADATA_FIXTURE)
    )


@pytest.fixture
def bare_hello_graph() -> PackageGraph:
    """The hello fixture store without metadata."""
    return build_package_graph(load_recipes_from_file(DERIVATIONS_FIXTURE))


@pytest.fixture
def document_metadata() -> DocumentMetadata:
    return DocumentMetadata(
        tool_version="0.1.0",
        timestamp=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
    )
