"""Core graph resolution, inference and SBOM encoding for nix2sbom."""
