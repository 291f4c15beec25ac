"""
GitLab client — file contents via the repository files API.
"""

from __future__ import annotations

from urllib.parse import quote, urlencode

from gitops_backend.adapters.git.base import ScmClient

DEFAULT_API_URL = "https://gitlab.com/api/v4"


class GitLabClient(ScmClient):
    """Reads files through ``/projects/{id}/repository/files/{path}/raw``.

    GitLab wants the project path and the file path fully URL-encoded,
    slashes included.
    """

    def __init__(self, api_url: str = DEFAULT_API_URL, token: str = "", timeout: float = 30):
        super().__init__(api_url, token, timeout)

    @property
    def driver(self) -> str:
        return "gitlab"

    def file_contents(self, repo: str, path: str, ref: str) -> bytes:
        url = (
            f"{self.api_url}/projects/{quote(repo, safe='')}"
            f"/repository/files/{quote(path, safe='')}/raw"
            f"?{urlencode({'ref': ref})}"
        )
        headers = {}
        if self.token:
            headers["PRIVATE-TOKEN"] = self.token
        return self._get(url, headers)
