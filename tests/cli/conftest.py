"""Shared fixtures for CLI tests.

Every command is run against the hello fixture store with ``--file`` so
that no test needs a ``nix`` installation.
"""

from __future__ import annotations

import subprocess
from typing import Any

import pytest
from click.testing import CliRunner

from nix2sbom.core.nix import loader
from tests.helpers import DERIVATIONS_FIXTURE, METADATA_FIXTURE


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def fixture_args() -> list[str]:
    """Recipe and metadata options pointing at the hello fixtures."""
    return ["--file", str(DERIVATIONS_FIXTURE), "--metadata", str(METADATA_FIXTURE)]


@pytest.fixture
def no_nix(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    """Make any attempt to run a Nix command fail, recording it."""
    commands: list[list[str]] = []

    def fake_run(command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        commands.append(command)
        return subprocess.CompletedProcess(command, 1, "", "error: nix is not available")

    monkeypatch.setattr(loader.subprocess, "run", fake_run)
    monkeypatch.delenv("NIX2SBOM_METADATA", raising=False)
    return commands
