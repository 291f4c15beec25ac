"""
SCM client base — the contract between the fetch service and git hosts.

The only operation the backend needs is "give me the bytes of this
file at this ref". Unlike receipt-style adapters, clients raise: a
failed fetch aborts the request before the core is invoked.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

USER_AGENT = "gitops-backend/1.0"


class GitError(Exception):
    """A repository URL could not be used or a fetch failed."""


class NotFoundError(GitError):
    """The repository, file, or ref does not exist."""


class AuthError(GitError):
    """The host rejected the credentials."""


def repo_from_url(url: str) -> str:
    """Extract the ``org/repo`` path from a repository URL.

    >>> repo_from_url("https://github.com/org/repo.git")
    'org/repo'

    Raises:
        GitError: If the URL cannot be parsed or has no path.
    """
    try:
        parsed = urlsplit(url)
    except ValueError as e:
        raise GitError(f"failed to parse {url!r}: {e}") from e

    path = parsed.path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    if not parsed.netloc or not path:
        raise GitError(f"failed to parse {url!r}: no repository path")
    return path


def host_of(url: str) -> str:
    """Lower-cased hostname of a repository URL ("" if none)."""
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


class ScmClient(ABC):
    """A client bound to one git host and one credential."""

    def __init__(self, api_url: str, token: str = "", timeout: float = 30):
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    @property
    @abstractmethod
    def driver(self) -> str:
        """The host type this client speaks to (``github``, ``gitlab``)."""

    @abstractmethod
    def file_contents(self, repo: str, path: str, ref: str) -> bytes:
        """Raw bytes of ``path`` in ``repo`` at ``ref``.

        Raises:
            NotFoundError: If the repo, file, or ref is missing.
            AuthError: If the token is rejected.
            GitError: On any other failure.
        """

    def _get(self, url: str, headers: dict[str, str]) -> bytes:
        """GET ``url`` and map HTTP failures onto the GitError family."""
        req = urllib.request.Request(
            url,
            headers={"User-Agent": USER_AGENT, **headers},
        )
        logger.debug("GET %s", url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return resp.read()
        except urllib.error.HTTPError as e:
            if e.code == 404:
                raise NotFoundError(f"not found: {url}") from e
            if e.code in (401, 403):
                raise AuthError(f"access denied ({e.code}): {url}") from e
            raise GitError(f"{self.driver} returned HTTP {e.code} for {url}") from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            raise GitError(f"failed to reach {self.driver}: {e}") from e

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} api_url={self.api_url!r}>"
