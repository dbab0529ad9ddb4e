"""Pattern catalogs for extracting project identity from download URLs.

Fetcher derivations only tell us where an archive was downloaded from. The
helpers in this module mine that URL for the signals the inference cascade
needs: a clone URL for the upstream repository, a project name, and a
version or commit id embedded in the archive file name.

Every helper is a pure function returning ``None`` when its pattern does
not apply, so callers can chain them in priority order.
"""

from __future__ import annotations

import re
from typing import Callable

# ---------------------------------------------------------------------------
# Version patterns
# ---------------------------------------------------------------------------

_SEMVER_RE = re.compile(r"([0-9]+\.[0-9]+\.[0-9]+)(-[0-9a-zA-Z_]+)?")
_COMMIT_SHA_RE = re.compile(r"(?<![0-9a-fA-F])([0-9a-f]{40})(?![0-9a-fA-F])")

# ---------------------------------------------------------------------------
# Forge patterns: (regex, clone URL template)
# ---------------------------------------------------------------------------

_GITHUB_RE = re.compile(r"https?://github\.com/([0-9a-zA-Z_.-]+)/([0-9a-zA-Z_-]+)")
_GITLAB_RE = re.compile(r"https?://gitlab\.com/([0-9a-zA-Z_.-]+)/([0-9a-zA-Z_-]+)")
_GNOME_GITLAB_RE = re.compile(
    r"https?://gitlab\.gnome\.org/([0-9a-zA-Z_.-]+)/([0-9a-zA-Z_-]+)"
)
_BITBUCKET_RE = re.compile(r"https?://bitbucket\.org/([0-9a-zA-Z_.-]+)/([0-9a-zA-Z_-]+)")
_PAGURE_RE = re.compile(r"https?://pagure\.io/([0-9a-zA-Z_-]+)")
_GNU_RE = re.compile(r"https?://ftp\.gnu\.org/(?:pub/)?gnu/([0-9a-zA-Z_-]+)")
_NONGNU_RELEASE_RE = re.compile(
    r"https?://download\.savannah\.nongnu\.org/releases/([0-9a-zA-Z_-]+)"
)
_NONGNU_PROJECT_RE = re.compile(
    r"https?://savannah\.nongnu\.org/(?:download|projects)/([0-9a-zA-Z_-]+)"
)

_OWNER_PROJECT_FORGES: tuple[tuple[re.Pattern[str], str], ...] = (
    (_GITHUB_RE, "https://github.com/{0}/{1}.git"),
    (_GITLAB_RE, "https://gitlab.com/{0}/{1}.git"),
    (_GNOME_GITLAB_RE, "https://gitlab.gnome.org/{0}/{1}.git"),
)

_PROJECT_FORGES: tuple[tuple[re.Pattern[str], str], ...] = (
    (_PAGURE_RE, "https://pagure.io/{0}.git"),
    (_GNU_RE, "https://git.savannah.gnu.org/git/{0}.git"),
    (_NONGNU_RELEASE_RE, "https://git.savannah.nongnu.org/git/{0}.git"),
    (_NONGNU_PROJECT_RE, "https://git.savannah.nongnu.org/git/{0}.git"),
)

# Generic "<name>-<version>.<ext>" archive file names.
_ARCHIVE_NAME_RE = re.compile(
    r"^([a-zA-Z][0-9a-zA-Z_+.-]*?)-v?[0-9][0-9a-zA-Z_.+-]*"
    r"\.(?:tar\.gz|tar\.xz|tar\.bz2|tar\.zst|tar\.lz|tgz|tbz2|txz|zip|tar|gem|crate|jar|whl)$"
)


def _last_path_segment(url: str) -> str:
    path = url.split("?", 1)[0].split("#", 1)[0]
    return path.rstrip("/").rsplit("/", 1)[-1]


# ---------------------------------------------------------------------------
# Git URLs
# ---------------------------------------------------------------------------


def get_git_url_from_generic_url(generic_url: str) -> str | None:
    """Derive an anonymous clone URL from any URL pointing into a forge.

    Forges are tried in a fixed order: GitHub, GitLab, GNOME GitLab,
    Pagure, GNU, Savannah non-GNU (releases, then projects) and finally
    Bitbucket. Bitbucket does not allow anonymous git access by default,
    so its clone URL may not work. SourceForge is not covered.

    Examples::

        >>> get_git_url_from_generic_url("https://github.com/sass/libsass/archive/3.6.4.tar.gz")
        'https://github.com/sass/libsass.git'
    """
    for pattern, template in _OWNER_PROJECT_FORGES:
        match = pattern.match(generic_url)
        if match:
            return template.format(match.group(1), match.group(2))

    for pattern, template in _PROJECT_FORGES:
        match = pattern.match(generic_url)
        if match:
            return template.format(match.group(1))

    match = _BITBUCKET_RE.match(generic_url)
    if match:
        return f"https://bitbucket.org/{match.group(1)}/{match.group(2)}.git"
    return None


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------


def get_semver_from_archive_url(archive_url: str) -> str | None:
    """Return the first ``X.Y.Z`` triple found in the archive file name."""
    match = _SEMVER_RE.search(_last_path_segment(archive_url))
    if match is None:
        return None
    return match.group(1)


def get_commit_sha_from_url(url: str) -> str | None:
    """Return a full 40-character commit id embedded in the URL path."""
    path = url.split("?", 1)[0]
    match = _COMMIT_SHA_RE.search(path)
    if match is None:
        return None
    return match.group(1)


# ---------------------------------------------------------------------------
# Project names
# ---------------------------------------------------------------------------


def _project_from_owner_forge(url: str) -> str | None:
    for pattern in (_GITHUB_RE, _GITLAB_RE, _GNOME_GITLAB_RE, _BITBUCKET_RE):
        match = pattern.match(url)
        if match:
            return match.group(2)
    return None


def _project_from_single_forge(url: str) -> str | None:
    for pattern, _template in _PROJECT_FORGES:
        match = pattern.match(url)
        if match:
            return match.group(1)
    return None


def _project_from_archive_name(url: str) -> str | None:
    match = _ARCHIVE_NAME_RE.match(_last_path_segment(url))
    if match is None:
        return None
    return match.group(1)


_PROJECT_NAME_EXTRACTORS: tuple[Callable[[str], str | None], ...] = (
    _project_from_owner_forge,
    _project_from_single_forge,
    _project_from_archive_name,
)


def get_project_name_from_url(url: str) -> str | None:
    """Guess the upstream project name from a download URL.

    Host-specific patterns win over the generic archive file name
    pattern, which only matches ``<name>-<version>.<archive extension>``.
    """
    for extractor in _PROJECT_NAME_EXTRACTORS:
        name = extractor(url)
        if name:
            return name
    return None
