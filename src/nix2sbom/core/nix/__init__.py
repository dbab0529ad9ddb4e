"""Nix derivation and package metadata model, loaders and inference.

All public names are re-exported here so callers can write
``from nix2sbom.core.nix import Recipe, infer_name``.
"""

from nix2sbom.core.nix.inference import (
    PackageURL,
    infer_name,
    infer_purl,
    infer_version,
    scheme_for_url,
)
from nix2sbom.core.nix.loader import (
    CURRENT_SYSTEM_TARGET,
    load_metadata,
    load_recipes,
    load_recipes_from_file,
    parse_metadata,
    parse_recipes,
)
from nix2sbom.core.nix.mirrors import MIRRORS, translate_url
from nix2sbom.core.nix.models import (
    BuilderKind,
    License,
    Maintainer,
    MetadataIndex,
    Output,
    PackageMeta,
    PackageMetadata,
    Recipe,
    RecipeStore,
)

__all__ = [
    "BuilderKind",
    "CURRENT_SYSTEM_TARGET",
    "License",
    "MIRRORS",
    "Maintainer",
    "MetadataIndex",
    "Output",
    "PackageMeta",
    "PackageMetadata",
    "PackageURL",
    "Recipe",
    "RecipeStore",
    "infer_name",
    "infer_purl",
    "infer_version",
    "load_metadata",
    "load_recipes",
    "load_recipes_from_file",
    "parse_metadata",
    "parse_recipes",
    "scheme_for_url",
    "translate_url",
]
