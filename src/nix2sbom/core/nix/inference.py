"""Name, version and package-url inference for package nodes.

Nix derivations carry no authoritative package identity. The best signal
is the nixpkgs metadata record, when one was matched; after that come the
derivation's own environment keys and, as a last resort, the download URL.

Each cascade is an ordered tuple of extractor functions. An extractor
tries exactly one signal and returns ``None`` when it does not apply; the
cascade returns the first non-empty result. Every extractor has the same
signature ``(recipe, metadata, urls)`` so it can be tested on its own
without building a graph. ``urls`` are the download URLs of the package,
which for a package node include the URLs of its source fetchers.

Inference misses are not errors: they are logged at DEBUG level and the
caller receives ``None`` (or ``"unknown"`` in a purl).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable
from urllib.parse import quote

from nix2sbom.core.nix.models import ENV_REV, ENV_VERSION, PackageMetadata, Recipe
from nix2sbom.core.nix.urls import (
    get_commit_sha_from_url,
    get_project_name_from_url,
    get_semver_from_archive_url,
)

logger = logging.getLogger(__name__)

# Name nixpkgs fetchers give to their output; never a package name.
PLACEHOLDER_NAME = "source"
UNKNOWN_NAME = "unknown"
GENERIC_SCHEME = "generic"
DOWNLOAD_URL_QUALIFIER = "download_url"

# Ordered (URL prefix, purl type) table. First match wins.
PURL_SCHEMES: tuple[tuple[str, str], ...] = (
    ("https://crates.io/", "cargo"),
    ("https://static.crates.io/", "cargo"),
    ("https://cpan.metacpan.org/", "cpan"),
    ("https://www.cpan.org/", "cpan"),
    ("https://rubygems.org/", "gem"),
    ("https://hackage.haskell.org/", "hackage"),
    ("https://repo1.maven.org/", "maven"),
    ("https://repo.maven.apache.org/", "maven"),
    ("https://registry.npmjs.org/", "npm"),
    ("https://registry.yarnpkg.com/", "npm"),
    ("https://www.nuget.org/", "nuget"),
    ("https://api.nuget.org/", "nuget"),
    ("https://bitbucket.org/", "bitbucket"),
    ("https://registry-1.docker.io/", "docker"),
    ("https://hub.docker.com/", "docker"),
    ("https://pypi.io/", "pypi"),
    ("https://pypi.org/", "pypi"),
    ("https://files.pythonhosted.org/", "pypi"),
    ("https://proxy.golang.org/", "golang"),
    ("https://hex.pm/", "hex"),
    ("https://repo.hex.pm/", "hex"),
    ("https://pub.dev/", "pub"),
    ("https://cran.r-project.org/", "cran"),
    ("https://github.com/", "github"),
)

Extractor = Callable[[Recipe, PackageMetadata | None, list[str]], str | None]


def _first(
    extractors: tuple[Extractor, ...],
    recipe: Recipe,
    metadata: PackageMetadata | None,
    urls: list[str],
) -> str | None:
    for extractor in extractors:
        value = extractor(recipe, metadata, urls)
        if value:
            return value
    return None


def _resolve_urls(recipe: Recipe, urls: list[str] | None) -> list[str]:
    return recipe.get_urls() if urls is None else urls


# ---------------------------------------------------------------------------
# Version extractors
# ---------------------------------------------------------------------------


def version_from_rev(recipe: Recipe, metadata: PackageMetadata | None, urls: list[str]) -> str | None:
    rev = recipe.environment.get(ENV_REV, "")
    if rev.startswith("v"):
        rev = rev[1:]
    return rev or None


def version_from_env(recipe: Recipe, metadata: PackageMetadata | None, urls: list[str]) -> str | None:
    return recipe.environment.get(ENV_VERSION) or None


def version_from_url(recipe: Recipe, metadata: PackageMetadata | None, urls: list[str]) -> str | None:
    if not urls:
        return None
    return get_commit_sha_from_url(urls[0]) or get_semver_from_archive_url(urls[0])


def version_from_name_suffix(
    recipe: Recipe, metadata: PackageMetadata | None, urls: list[str]
) -> str | None:
    name = recipe.get_name()
    pname = recipe.get_pname() or (metadata.pname if metadata else None)
    if not name or not pname:
        return None
    prefix = f"{pname}-"
    if not name.startswith(prefix):
        return None
    return name[len(prefix):] or None


# Versions from these extractors are trusted enough to strip from a name.
HIGH_CONFIDENCE_VERSION_EXTRACTORS: tuple[Extractor, ...] = (
    version_from_rev,
    version_from_env,
)

VERSION_EXTRACTORS: tuple[Extractor, ...] = (
    *HIGH_CONFIDENCE_VERSION_EXTRACTORS,
    version_from_url,
    version_from_name_suffix,
)


def infer_version(
    recipe: Recipe,
    metadata: PackageMetadata | None = None,
    urls: list[str] | None = None,
) -> str | None:
    """Infer the version of the package built by ``recipe``.

    Signals, strongest first: ``rev`` (leading ``v`` stripped), ``version``,
    a commit id or ``X.Y.Z`` in the first download URL, and the part of
    ``name`` that follows the ``pname-`` prefix.
    """
    version = _first(VERSION_EXTRACTORS, recipe, metadata, _resolve_urls(recipe, urls))
    if version is None:
        logger.debug("Could not infer a version for %s", recipe.get_name() or recipe.get_out_path())
    return version


# ---------------------------------------------------------------------------
# Name extractors
# ---------------------------------------------------------------------------


def name_from_metadata_pname(
    recipe: Recipe, metadata: PackageMetadata | None, urls: list[str]
) -> str | None:
    if metadata is None or metadata.pname == PLACEHOLDER_NAME:
        return None
    return metadata.pname or None


def name_from_metadata_name(
    recipe: Recipe, metadata: PackageMetadata | None, urls: list[str]
) -> str | None:
    if metadata is None:
        return None
    return metadata.name or None


def name_from_env_pname(recipe: Recipe, metadata: PackageMetadata | None, urls: list[str]) -> str | None:
    return recipe.get_pname()


def name_from_env_name(recipe: Recipe, metadata: PackageMetadata | None, urls: list[str]) -> str | None:
    name = recipe.get_name()
    if not name or name == PLACEHOLDER_NAME:
        return None
    # URL-derived versions are too loose to strip from a name.
    version = _first(HIGH_CONFIDENCE_VERSION_EXTRACTORS, recipe, metadata, urls)
    if version:
        suffix = f"-{version}"
        if name.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


def name_from_url(recipe: Recipe, metadata: PackageMetadata | None, urls: list[str]) -> str | None:
    if not urls:
        return None
    return get_project_name_from_url(urls[0])


NAME_EXTRACTORS: tuple[Extractor, ...] = (
    name_from_metadata_pname,
    name_from_metadata_name,
    name_from_env_pname,
    name_from_env_name,
    name_from_url,
)


def infer_name(
    recipe: Recipe,
    metadata: PackageMetadata | None = None,
    urls: list[str] | None = None,
) -> str | None:
    """Infer the human package name for ``recipe``."""
    name = _first(NAME_EXTRACTORS, recipe, metadata, _resolve_urls(recipe, urls))
    if name is None:
        logger.debug("Could not infer a name for %s", recipe.get_out_path())
    return name


# ---------------------------------------------------------------------------
# Package URLs
# ---------------------------------------------------------------------------


def scheme_for_url(url: str | None) -> str:
    """Return the purl type for a download URL, ``"generic"`` if none matches."""
    if not url:
        return GENERIC_SCHEME
    for prefix, scheme in PURL_SCHEMES:
        if url.startswith(prefix):
            return scheme
    return GENERIC_SCHEME


@dataclass(frozen=True)
class PackageURL:
    """A package-url (``pkg:<type>/<name>@<version>?<qualifiers>``).

    Only the subset of the purl specification nix2sbom produces is
    modelled: no namespace and no subpath.
    """

    scheme: str
    name: str
    version: str | None = None
    qualifiers: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def to_string(self) -> str:
        purl = f"pkg:{self.scheme}/{quote(self.name, safe='')}"
        if self.version:
            purl += f"@{quote(self.version, safe='')}"
        if self.qualifiers:
            purl += "?" + "&".join(
                f"{key}={quote(value, safe='')}" for key, value in sorted(self.qualifiers)
            )
        return purl

    def __str__(self) -> str:
        return self.to_string()


def infer_purl(
    recipe: Recipe,
    metadata: PackageMetadata | None = None,
    urls: list[str] | None = None,
) -> PackageURL:
    """Build the package-url for a recipe.

    The scheme comes from the first download URL, which is also kept as
    the ``download_url`` qualifier whatever the scheme.
    """
    urls = _resolve_urls(recipe, urls)
    url = urls[0] if urls else None
    qualifiers: tuple[tuple[str, str], ...] = ()
    if url:
        qualifiers = ((DOWNLOAD_URL_QUALIFIER, url),)
    return PackageURL(
        scheme=scheme_for_url(url),
        name=infer_name(recipe, metadata, urls) or UNKNOWN_NAME,
        version=infer_version(recipe, metadata, urls),
        qualifiers=qualifiers,
    )
