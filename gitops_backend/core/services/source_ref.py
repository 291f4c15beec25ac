"""
Source reference resolver — turns a declared ``source_url`` into a
(url, host-type) pair.

The URL is kept verbatim; only its host is extracted. Suffixes such
as ``.git`` matter to the git adapters, not here.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from gitops_backend.core.errors import SourceResolutionError
from gitops_backend.core.models.resource import SourceReference

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def resolve_source(url: str) -> SourceReference:
    """Derive a SourceReference from a service's source URL.

    Args:
        url: The declared source URL. Empty means no known source.

    Returns:
        ``SourceReference(url=url, type=<host>)``, or the zero value
        for an empty input.

    Raises:
        SourceResolutionError: If the URL is structurally invalid.
    """
    if not url:
        return SourceReference()

    reason = _structural_problem(url)
    if reason:
        raise SourceResolutionError(url, reason)

    try:
        parsed = urlsplit(url)
        parsed.port  # raises on a non-numeric or out-of-range port
    except ValueError as e:
        raise SourceResolutionError(url, str(e)) from e

    if not parsed.scheme and ":" in parsed.path.split("/", 1)[0]:
        raise SourceResolutionError(url, "first path segment in URL cannot contain colon")

    host = parsed.netloc.rpartition("@")[2]
    if any(ch.isspace() for ch in host):
        raise SourceResolutionError(url, f"invalid character in host name {host!r}")
    return SourceReference(url=url, type=host)


def _structural_problem(url: str) -> str:
    """Checks ``urlsplit`` is too lenient to make. Empty string if fine."""
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url):
        return "contains control characters"
    if _BAD_ESCAPE_RE.search(url):
        return "invalid percent-escape"
    if "://" in url:
        scheme = url.split("://", 1)[0]
        if not _SCHEME_RE.match(scheme):
            return "missing protocol scheme" if not scheme else f"invalid scheme {scheme!r}"
    return ""
