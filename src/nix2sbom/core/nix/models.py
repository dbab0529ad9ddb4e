"""Data models for Nix derivations and nixpkgs package metadata.

``Recipe`` is one low-level build unit as reported by
``nix derivation show``. ``PackageMetadata`` is the authoritative record
nixpkgs publishes for a package (``nix-env -qa --meta --json``). Both are
loaded once per run and treated as read-only afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from nix2sbom.core.nix.mirrors import translate_url

# Environment keys with a conventional meaning in nixpkgs derivations.
ENV_NAME = "name"
ENV_PNAME = "pname"
ENV_VERSION = "version"
ENV_REV = "rev"
ENV_URL = "url"
ENV_URLS = "urls"
ENV_SRC = "src"
ENV_SRCS = "srcs"
ENV_PATCHES = "patches"
ENV_TEXT = "text"

DEFAULT_OUTPUT = "out"


class BuilderKind(Enum):
    """Classification of the executable that performs a build."""

    FETCH_URL = "fetch-url"
    SHELL = "shell"
    MINIMAL_SHELL = "minimal-shell"
    UNKNOWN = "unknown"

    @classmethod
    def from_builder(cls, builder: str) -> BuilderKind:
        """Classify a derivation ``builder`` string."""
        if builder == "builtin:fetchurl":
            return cls.FETCH_URL
        basename = builder.rsplit("/", 1)[-1]
        if basename == "bash":
            return cls.SHELL
        if basename in ("sh", "busybox"):
            return cls.MINIMAL_SHELL
        return cls.UNKNOWN


@dataclass(frozen=True)
class Output:
    """One output slot of a derivation.

    Attributes:
        path: Store path the output is materialized at.
        hash: Expected content hash; only set for fixed-output
            derivations (fetchers).
        hash_algo: Algorithm of ``hash`` (e.g. ``"sha256"`` or ``"r:sha256"``).
    """

    path: str
    hash: str | None = None
    hash_algo: str | None = None


@dataclass
class Recipe:
    """A single Nix derivation.

    Attributes:
        outputs: Output slot name -> :class:`Output`. Never empty.
        input_recipes: Referenced derivation path -> required output slots.
        input_sources: Raw store paths required verbatim (builder scripts).
        environment: The derivation's declared ``env``.
        builder: The builder executable as declared.
        builder_kind: Classification of ``builder``. Informational only.
        system: Target platform, e.g. ``"x86_64-linux"``.
        args: Arguments passed to the builder.
    """

    outputs: dict[str, Output]
    input_recipes: dict[str, list[str]] = field(default_factory=dict)
    input_sources: list[str] = field(default_factory=list)
    environment: dict[str, str] = field(default_factory=dict)
    builder: str = ""
    builder_kind: BuilderKind = BuilderKind.UNKNOWN
    system: str = ""
    args: list[str] = field(default_factory=list)

    def get_out_path(self) -> str | None:
        """Return the store path of the ``out`` output, if any."""
        output = self.outputs.get(DEFAULT_OUTPUT)
        if output is not None:
            return output.path
        return self.environment.get(DEFAULT_OUTPUT)

    def is_fixed_output(self) -> bool:
        """Return True when the ``out`` output carries a content hash."""
        output = self.outputs.get(DEFAULT_OUTPUT)
        return output is not None and bool(output.hash)

    def get_env_paths(self, key: str) -> list[str]:
        """Return a whitespace-separated environment value as a list."""
        return self.environment.get(key, "").split()

    def get_patches(self) -> list[str]:
        return self.get_env_paths(ENV_PATCHES)

    def get_source_paths(self) -> list[str]:
        return self.get_env_paths(ENV_SRC) + self.get_env_paths(ENV_SRCS)

    def get_urls(self) -> list[str]:
        """Return the declared download URLs with mirrors resolved.

        Raises:
            UnknownMirrorError: If a URL uses an unknown mirror alias.
        """
        raw = self.environment.get(ENV_URLS, "").split()
        if not raw and self.environment.get(ENV_URL):
            raw = [self.environment[ENV_URL]]
        return [translate_url(url) for url in raw]

    def get_url(self) -> str | None:
        urls = self.get_urls()
        return urls[0] if urls else None

    def get_name(self) -> str | None:
        return self.environment.get(ENV_NAME) or None

    def get_pname(self) -> str | None:
        return self.environment.get(ENV_PNAME) or None

    def is_inline_script(self) -> bool:
        """An inline script (``writeText`` and friends) carries its body in env."""
        return ENV_TEXT in self.environment


# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class License:
    """A license as declared in ``meta.license``.

    Plain string licenses only populate ``name``; structured ones carry the
    SPDX identifier and the nixpkgs flags.
    """

    name: str | None = None
    spdx_id: str | None = None
    full_name: str | None = None
    short_name: str | None = None
    url: str | None = None
    free: bool | None = None
    redistributable: bool | None = None
    deprecated: bool | None = None

    @property
    def is_structured(self) -> bool:
        return self.name is None


@dataclass(frozen=True)
class Maintainer:
    name: str
    email: str | None = None
    github: str | None = None
    github_id: int | None = None


@dataclass
class PackageMeta:
    """The ``meta`` attribute set of a nixpkgs package."""

    description: str | None = None
    homepages: list[str] = field(default_factory=list)
    licenses: list[License] = field(default_factory=list)
    maintainers: list[Maintainer] = field(default_factory=list)
    broken: bool = False
    insecure: bool = False
    unfree: bool = False
    unsupported: bool = False

    @property
    def available(self) -> bool:
        return not (self.broken or self.insecure or self.unsupported)


@dataclass
class PackageMetadata:
    """Authoritative nixpkgs record for one package."""

    name: str
    pname: str | None = None
    version: str | None = None
    system: str | None = None
    output_name: str | None = None
    meta: PackageMeta = field(default_factory=PackageMeta)


RecipeStore = dict[str, Recipe]
MetadataIndex = dict[str, PackageMetadata]
