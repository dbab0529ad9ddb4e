"""Errors that abort a nix2sbom run.

Loading, graph construction, mirror resolution and SBOM encoding each
raise their own subclass of Nix2SbomError. The CLI reports any of them as
``Error: <message>`` with exit status 1. Inference misses are not errors;
they only produce less precise package identities.
"""


class Nix2SbomError(Exception):
    """Base exception for all nix2sbom errors."""


class LoadError(Nix2SbomError):
    """Raised when the recipe or metadata loaders fail.

    Covers a missing or failing ``nix`` executable, unreadable snapshot
    files, and JSON that does not have the expected derivation shape.
    """


class GraphInconsistencyError(Nix2SbomError):
    """Raised when the recipe store does not describe a valid graph.

    Covers edges that reference a recipe absent from the store and
    dependency cycles found while traversing the package graph.
    """


class UnknownMirrorError(Nix2SbomError):
    """Raised when a ``mirror://`` URL uses an alias missing from the table."""


class SBOMError(Nix2SbomError):
    """Raised when SBOM generation fails.

    Covers unknown output formats, unsupported format/serialization
    pairs, and errors raised while encoding a document.
    """
