"""Translation of nixpkgs ``mirror://`` pseudo-URLs to canonical hosts.

Fetchers in nixpkgs may declare their download location as
``mirror://<alias>/<rest>``. The alias is resolved by the fetcher at build
time, so the derivation itself never carries a real URL. The table below
picks, for every alias, the mirror that best describes the authoritative
origin of the archive rather than the fastest one.

The alias list follows ``pkgs/build-support/fetchurl/mirrors.nix`` in
nixpkgs and must be kept in sync with it: an unknown alias is an error
because a wrong download location is worse than none.
"""

from __future__ import annotations

import re

from nix2sbom.exceptions import UnknownMirrorError

MIRROR_PREFIX = "mirror://"

MIRRORS: dict[str, str] = {
    "hashedMirrors": "https://tarballs.nixos.org/",
    "alsa": "https://www.alsa-project.org/files/pub/",
    "apache": "https://dlcdn.apache.org/",
    "bioc": "http://bioc.ism.ac.jp/",
    "cran": "https://cran.r-project.org/src/contrib/",
    "bitlbee": "https://get.bitlbee.org/",
    "gcc": "https://mirror.koddos.net/gcc/",
    "gnome": "https://download.gnome.org/",
    "gnu": "https://ftp.gnu.org/pub/gnu/",
    "gnupg": "https://gnupg.org/ftp/gcrypt/",
    "ibiblioPubLinux": "https://www.ibiblio.org/pub/Linux/",
    "imagemagick": "https://www.imagemagick.org/download/",
    "kde": "https://cdn.download.kde.org/",
    "kernel": "https://cdn.kernel.org/pub/",
    "mysql": "https://cdn.mysql.com/Downloads/",
    "maven": "https://repo1.maven.org/maven2/",
    "mozilla": "https://download.cdn.mozilla.net/pub/mozilla.org/",
    "osdn": "https://osdn.dl.osdn.jp/",
    "postgresql": "https://ftp.postgresql.org/pub/",
    "qt": "https://download.qt.io/",
    "sageupstream": "https://mirrors.mit.edu/sage/spkg/upstream/",
    "samba": "https://www.samba.org/ftp/",
    "savannah": "https://ftp.gnu.org/gnu/",
    "sourceforge": "https://downloads.sourceforge.net/",
    "steamrt": "https://repo.steampowered.com/steamrt/",
    "tcsh": "https://astron.com/pub/tcsh/",
    "xfce": "https://archive.xfce.org/",
    "xorg": "https://xorg.freedesktop.org/releases/",
    "cpan": "https://cpan.metacpan.org/",
    "hackage": "https://hackage.haskell.org/package/",
    "luarocks": "https://luarocks.org/",
    "pypi": "https://pypi.io/packages/source/",
    "testpypi": "https://test.pypi.io/packages/source/",
    "centos": "https://vault.centos.org/",
    "debian": "https://httpredir.debian.org/debian/",
    "fedora": "https://archives.fedoraproject.org/pub/fedora/",
    "gentoo": "https://distfiles.gentoo.org/",
    "opensuse": "https://opensuse.hro.nl/opensuse/distribution/",
    "ubuntu": "https://nl.archive.ubuntu.com/ubuntu/",
    "openbsd": "https://ftp.openbsd.org/pub/OpenBSD/",
}

_MIRROR_URL_RE = re.compile(r"^mirror://([0-9a-zA-Z_-]+)/(.*)$")


def is_mirror_url(url: str) -> bool:
    """Return True if ``url`` uses the ``mirror://`` redirector form."""
    return url.startswith(MIRROR_PREFIX)


def translate_url(url: str) -> str:
    """Resolve a ``mirror://`` URL to its canonical download location.

    Any other URL is returned unchanged, which makes the function
    idempotent on its own output.

    Args:
        url: A download URL as declared by a fetcher derivation.

    Returns:
        The canonical URL.

    Raises:
        UnknownMirrorError: If the alias is not in :data:`MIRRORS`, or the
            URL does not have the ``mirror://<alias>/<path>`` shape.
    """
    if not is_mirror_url(url):
        return url

    match = _MIRROR_URL_RE.match(url)
    if match is None:
        raise UnknownMirrorError(f"Malformed mirror URL: {url}")

    alias, rest = match.group(1), match.group(2)
    base = MIRRORS.get(alias)
    if base is None:
        raise UnknownMirrorError(f"Unknown mirror name: {alias} (in {url})")
    return base + rest
