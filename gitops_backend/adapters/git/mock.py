"""
Mock SCM client — in-memory files for tests and ``--mock`` mode.

Files are keyed by ``(repo, path, ref)``. Every call is logged so
tests can assert what was fetched and with which token.
"""

from __future__ import annotations

from gitops_backend.adapters.git.base import (
    AuthError,
    GitError,
    NotFoundError,
    ScmClient,
    repo_from_url,
)


class MockClient(ScmClient):
    """Serves files from a dict instead of a git host."""

    def __init__(self, files: dict[tuple[str, str, str], bytes], token: str = ""):
        super().__init__("mock://", token)
        self._files = files
        self._call_log: list[tuple[str, str, str]] = []

    @property
    def driver(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[tuple[str, str, str]]:
        """Every (repo, path, ref) requested from this client."""
        return self._call_log

    def file_contents(self, repo: str, path: str, ref: str) -> bytes:
        self._call_log.append((repo, path, ref))
        try:
            return self._files[(repo, path, ref)]
        except KeyError:
            raise NotFoundError(f"not found: {repo}/{path}@{ref}") from None


class MockClientFactory:
    """Drop-in for ``ClientFactory`` that hands out ``MockClient``s."""

    def __init__(self, files: dict[tuple[str, str, str], bytes] | None = None):
        self._files: dict[tuple[str, str, str], bytes] = dict(files or {})
        self._denied_tokens: set[str] = set()
        self.clients: list[MockClient] = []

    def add_file(self, url: str, path: str, ref: str, body: bytes | str) -> None:
        """Serve ``body`` for ``path`` at ``ref`` in the repo at ``url``."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._files[(repo_from_url(url), path, ref)] = body

    def deny_token(self, token: str) -> None:
        """Make ``create`` reject this token as if the host refused it."""
        self._denied_tokens.add(token)

    def create(self, url: str, token: str = "") -> MockClient:
        if token in self._denied_tokens:
            raise AuthError("access denied (401): mock")
        if not url:
            raise GitError("empty repository URL")
        client = MockClient(self._files, token=token)
        self.clients.append(client)
        return client
