"""nix2sbom: Software Bill of Materials extraction for Nix derivations."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
