"""Shared fixtures for nix2sbom tests."""

import pytest

from nix2sbom.core.nix import RecipeStore
from tests.helpers import end_to_end_store


@pytest.fixture
def e2e_store() -> RecipeStore:
    """The five-recipe store: A -> {B, C}, B -> D, E patches C."""
    return end_to_end_store()
