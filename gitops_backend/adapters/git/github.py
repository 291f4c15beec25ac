"""
GitHub client — file contents via the REST contents API.
"""

from __future__ import annotations

from urllib.parse import quote, urlencode

from gitops_backend.adapters.git.base import ScmClient

DEFAULT_API_URL = "https://api.github.com"


class GitHubClient(ScmClient):
    """Reads files through ``/repos/{repo}/contents/{path}``."""

    def __init__(self, api_url: str = DEFAULT_API_URL, token: str = "", timeout: float = 30):
        super().__init__(api_url, token, timeout)

    @property
    def driver(self) -> str:
        return "github"

    def file_contents(self, repo: str, path: str, ref: str) -> bytes:
        url = (
            f"{self.api_url}/repos/{quote(repo)}/contents/{quote(path)}"
            f"?{urlencode({'ref': ref})}"
        )
        headers = {"Accept": "application/vnd.github.raw"}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return self._get(url, headers)
