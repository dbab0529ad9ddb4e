"""Shared test helpers for building recipe stores in memory.

Identifiers follow the ``/nix/store/<hash>-<name>.drv`` shape with short
fake hashes so that assertions stay readable.
"""

from __future__ import annotations

from pathlib import Path

from nix2sbom.core.nix import Output, PackageMeta, PackageMetadata, Recipe, RecipeStore

FIXTURES = Path(__file__).parent / "fixtures" / "nix"
DERIVATIONS_FIXTURE = FIXTURES / "derivations.json"
METADATA_FIXTURE = FIXTURES / "metadata.json"

HELLO_ID = "/nix/store/aaaa-hello-2.12.1.drv"
BASH_ID = "/nix/store/bbbb-bash-5.2p26.drv"
HELLO_SRC_ID = "/nix/store/cccc-hello-2.12.1.tar.gz.drv"
PATCH_ID = "/nix/store/dddd-fix-build.patch.drv"
SCRIPT_ID = "/nix/store/eeee-builder.sh.drv"


def drv(name: str) -> str:
    """Recipe identifier for a short name."""
    return f"/nix/store/{name}.drv"


def out(name: str) -> str:
    """``out`` path of the recipe named ``name``."""
    return f"/nix/store/{name}"


def make_recipe(
    name: str,
    inputs: tuple[str, ...] | list[str] = (),
    env: dict[str, str] | None = None,
    fixed_output: bool = False,
) -> Recipe:
    """Create a Recipe whose ``out`` path is ``out(name)``.

    ``inputs`` are short names; they are turned into identifiers with
    :func:`drv`.
    """
    output = Output(
        path=out(name),
        hash="0" * 64 if fixed_output else None,
        hash_algo="sha256" if fixed_output else None,
    )
    return Recipe(
        outputs={"out": output},
        input_recipes={drv(input_name): ["out"] for input_name in inputs},
        environment=dict(env or {}),
    )


def make_store(**recipes: Recipe) -> RecipeStore:
    """Key recipes by ``drv(<keyword>)``."""
    return {drv(name): recipe for name, recipe in recipes.items()}


def make_metadata(name: str, pname: str | None = None, **meta: object) -> PackageMetadata:
    return PackageMetadata(name=name, pname=pname, meta=PackageMeta(**meta))  # type: ignore[arg-type]


def end_to_end_store() -> RecipeStore:
    """Five recipes: A -> {B, C}, B -> D, and E is a patch of C."""
    return make_store(
        a=make_recipe("a", inputs=("b", "c"), env={"name": "a-1.0", "pname": "a", "version": "1.0"}),
        b=make_recipe("b", inputs=("d",), env={"name": "b-2.0", "pname": "b", "version": "2.0"}),
        c=make_recipe("c", inputs=("e",), env={"name": "c-3.0", "patches": out("e")}),
        d=make_recipe("d", env={"name": "d-4.0", "pname": "d", "version": "4.0"}),
        e=make_recipe("e", env={"name": "e.patch", "url": "https://example.org/e.patch"}),
    )
