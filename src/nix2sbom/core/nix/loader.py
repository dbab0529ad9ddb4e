"""Loaders for the recipe store and the nixpkgs metadata index.

Both loaders shell out to the Nix command line tools and parse their JSON
output. The parsing halves (``parse_recipes`` and ``parse_metadata``) are
separate so that pre-exported snapshots can be loaded without Nix being
installed.

Any failure is raised as :class:`LoadError`: there is no partial mode, a
graph built from half a store would silently drop dependencies.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

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
from nix2sbom.exceptions import LoadError

logger = logging.getLogger(__name__)

CURRENT_SYSTEM_TARGET = "/run/current-system"

SHOW_DERIVATION_COMMAND: tuple[str, ...] = (
    "nix",
    "--extra-experimental-features",
    "nix-command",
    "derivation",
    "show",
    "--recursive",
)

QUERY_METADATA_COMMAND: tuple[str, ...] = (
    "nix-env",
    "--query",
    "--available",
    "--meta",
    "--json",
    ".*",
)


def _run_json_command(command: list[str], what: str) -> Any:
    """Run a Nix command and decode its stdout as JSON."""
    logger.debug("Running %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise LoadError(f"Could not run {command[0]} to load {what}: {exc}") from exc

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise LoadError(
            f"{command[0]} exited with status {result.returncode} while loading "
            f"{what}: {stderr}"
        )
    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise LoadError(f"Invalid JSON returned for {what}: {exc}") from exc


def _read_json_file(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise LoadError(f"Could not read {what} from {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise LoadError(f"Invalid JSON in {what} file {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Recipes
# ---------------------------------------------------------------------------


def _parse_output(slot: str, raw: Any, recipe_id: str) -> Output:
    if not isinstance(raw, dict):
        raise LoadError(f"Output {slot!r} of {recipe_id} is not an object")
    path = raw.get("path")
    if not path:
        # Content-addressed outputs have no path until they are built.
        path = ""
    return Output(path=path, hash=raw.get("hash"), hash_algo=raw.get("hashAlgo"))


def _parse_input_outputs(raw: Any) -> list[str]:
    # Older nix emits a list of slots, newer nix an object with "outputs".
    if isinstance(raw, dict):
        raw = raw.get("outputs", [])
    return [str(slot) for slot in raw]


def parse_recipe(recipe_id: str, raw: dict[str, Any]) -> Recipe:
    """Build a :class:`Recipe` from one entry of ``nix derivation show``.

    Raises:
        LoadError: If the entry has no outputs or is not an object.
    """
    if not isinstance(raw, dict):
        raise LoadError(f"Derivation {recipe_id} is not an object")

    outputs = {
        slot: _parse_output(slot, value, recipe_id)
        for slot, value in (raw.get("outputs") or {}).items()
    }
    if not outputs:
        raise LoadError(f"Derivation {recipe_id} declares no outputs")

    builder = raw.get("builder", "")
    return Recipe(
        outputs=outputs,
        input_recipes={
            input_id: _parse_input_outputs(slots)
            for input_id, slots in (raw.get("inputDrvs") or {}).items()
        },
        input_sources=list(raw.get("inputSrcs") or []),
        environment={str(k): str(v) for k, v in (raw.get("env") or {}).items()},
        builder=builder,
        builder_kind=BuilderKind.from_builder(builder),
        system=raw.get("system", ""),
        args=list(raw.get("args") or []),
    )


def parse_recipes(data: Any) -> RecipeStore:
    """Convert the JSON map produced by ``nix derivation show -r``.

    Raises:
        LoadError: If ``data`` is not a map of derivations.
    """
    if not isinstance(data, dict):
        raise LoadError("Expected a JSON object mapping derivation paths to derivations")
    if isinstance(data.get("derivations"), dict):
        # Versioned output format of recent nix releases.
        data = data["derivations"]
    recipes = {recipe_id: parse_recipe(recipe_id, raw) for recipe_id, raw in data.items()}
    logger.debug("Parsed %d derivations", len(recipes))
    return recipes


def load_recipes(target: str) -> RecipeStore:
    """Materialize the full recursive recipe store for ``target``.

    ``target`` is anything ``nix derivation show`` accepts: a ``.drv``
    path, an output path, a flake reference or a ``.nix`` file.
    """
    logger.info("Getting the derivations for %s", target)
    data = _run_json_command([*SHOW_DERIVATION_COMMAND, target], f"derivations for {target}")
    return parse_recipes(data)


def load_recipes_from_file(path: Path) -> RecipeStore:
    """Load a recipe store from a pre-exported JSON dump."""
    logger.info("Reading derivations from %s", path)
    return parse_recipes(_read_json_file(path, "derivations"))


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _parse_license(raw: Any) -> License | None:
    if isinstance(raw, str):
        return License(name=raw)
    if not isinstance(raw, dict):
        return None
    return License(
        spdx_id=raw.get("spdxId"),
        full_name=raw.get("fullName"),
        short_name=raw.get("shortName"),
        url=raw.get("url"),
        free=raw.get("free"),
        redistributable=raw.get("redistributable"),
        deprecated=raw.get("deprecated"),
    )


def _flatten_maintainers(raw: Any) -> list[dict[str, Any]]:
    # Some nixpkgs entries wrap the maintainer list in an extra list.
    flat: list[dict[str, Any]] = []
    for item in _as_list(raw):
        if isinstance(item, list):
            flat.extend(entry for entry in item if isinstance(entry, dict))
        elif isinstance(item, dict):
            flat.append(item)
    return flat


def _parse_maintainer(raw: dict[str, Any]) -> Maintainer | None:
    name = raw.get("name") or raw.get("github")
    if not name:
        return None
    return Maintainer(
        name=name,
        email=raw.get("email"),
        github=raw.get("github"),
        github_id=raw.get("githubId"),
    )


def _parse_meta(raw: Any) -> PackageMeta:
    if not isinstance(raw, dict):
        return PackageMeta()
    licenses = [lic for lic in map(_parse_license, _as_list(raw.get("license"))) if lic]
    maintainers = [
        m for m in map(_parse_maintainer, _flatten_maintainers(raw.get("maintainers"))) if m
    ]
    return PackageMeta(
        description=raw.get("description"),
        homepages=[str(h) for h in _as_list(raw.get("homepage"))],
        licenses=licenses,
        maintainers=maintainers,
        broken=bool(raw.get("broken", False)),
        insecure=bool(raw.get("insecure", False)),
        unfree=bool(raw.get("unfree", False)),
        unsupported=bool(raw.get("unsupported", False)),
    )


def parse_metadata(data: Any) -> MetadataIndex:
    """Build the metadata index from ``nix-env -qa --meta --json`` output.

    The index is keyed by each package's full ``name`` (``zstd-1.5.5``),
    the same value derivations carry in their ``name`` environment key.
    When two attribute paths share a name, the first one wins.
    """
    if not isinstance(data, dict):
        raise LoadError("Expected a JSON object mapping attribute paths to packages")

    index: MetadataIndex = {}
    for attr_path, raw in data.items():
        if not isinstance(raw, dict) or not raw.get("name"):
            logger.debug("Skipping metadata entry without a name: %s", attr_path)
            continue
        name = raw["name"]
        if name in index:
            continue
        index[name] = PackageMetadata(
            name=name,
            pname=raw.get("pname"),
            version=raw.get("version"),
            system=raw.get("system"),
            output_name=raw.get("outputName"),
            meta=_parse_meta(raw.get("meta")),
        )
    return index


def load_metadata(path: Path | None = None, disabled: bool = False) -> MetadataIndex:
    """Load the package metadata index.

    Args:
        path: A pre-exported metadata snapshot. When ``None``, the
            metadata is queried from ``nix-env``.
        disabled: Skip metadata collection entirely and return ``{}``.
    """
    if disabled:
        logger.info("Metadata collection disabled")
        return {}
    if path is not None:
        logger.info("Reading package metadata from %s", path)
        data = _read_json_file(path, "package metadata")
    else:
        logger.info("Getting the metadata for packages in the Nix store")
        data = _run_json_command(list(QUERY_METADATA_COMMAND), "package metadata")
    index = parse_metadata(data)
    logger.debug("Found metadata for %d packages", len(index))
    return index
