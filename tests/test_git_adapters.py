"""
Tests for git host clients — URL handling, driver selection, fetches.

urlopen is mocked throughout. No network.
"""

import io
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from gitops_backend.adapters.git import (
    AuthError,
    ClientFactory,
    GitError,
    GitHubClient,
    GitLabClient,
    MockClientFactory,
    NotFoundError,
    repo_from_url,
)


def _response(body: bytes) -> MagicMock:
    resp = MagicMock()
    resp.read.return_value = body
    resp.__enter__.return_value = resp
    return resp


def _http_error(code: int) -> urllib.error.HTTPError:
    return urllib.error.HTTPError("https://x", code, "err", {}, io.BytesIO(b""))


# ── URL handling ─────────────────────────────────────────────────


class TestRepoFromUrl:
    @pytest.mark.parametrize("url, expected", [
        ("https://github.com/org/repo.git", "org/repo"),
        ("https://github.com/org/repo", "org/repo"),
        ("https://github.com/org/testing.git/", "org/testing"),
        ("https://gitlab.com/group/sub/project.git", "group/sub/project"),
    ])
    def test_paths(self, url, expected):
        assert repo_from_url(url) == expected

    @pytest.mark.parametrize("url", ["", "https://github.com/", "org/repo", "https://[::1/x"])
    def test_invalid(self, url):
        with pytest.raises(GitError):
            repo_from_url(url)


# ── Factory ──────────────────────────────────────────────────────


class TestClientFactory:
    def test_github(self):
        client = ClientFactory().create("https://github.com/org/repo.git", "tok")
        assert isinstance(client, GitHubClient)
        assert client.api_url == "https://api.github.com"
        assert client.token == "tok"

    def test_gitlab(self):
        client = ClientFactory().create("https://gitlab.com/org/repo.git")
        assert isinstance(client, GitLabClient)
        assert client.api_url == "https://gitlab.com/api/v4"

    def test_self_hosted_gitlab(self):
        factory = ClientFactory(gitlab_hosts=["GitLab.Example.com"])
        client = factory.create("https://gitlab.example.com/org/repo.git")
        assert isinstance(client, GitLabClient)
        assert client.api_url == "https://gitlab.example.com/api/v4"

    def test_github_enterprise(self):
        factory = ClientFactory(github_hosts=["ghe.example.com"])
        client = factory.create("https://ghe.example.com/org/repo")
        assert client.api_url == "https://ghe.example.com/api/v3"

    def test_unknown_host(self):
        with pytest.raises(GitError, match="unable to identify driver"):
            ClientFactory().create("https://bitbucket.org/org/repo")

    def test_timeout_passed(self):
        assert ClientFactory(timeout=5).create("https://github.com/o/r").timeout == 5


# ── Clients ──────────────────────────────────────────────────────


class TestGitHubClient:
    @patch("gitops_backend.adapters.git.base.urllib.request.urlopen")
    def test_file_contents(self, mock_open):
        mock_open.return_value = _response(b"environments: []\n")

        body = GitHubClient(token="abc").file_contents("org/repo", "pipelines.yaml", "master")

        assert body == b"environments: []\n"
        req = mock_open.call_args[0][0]
        assert req.full_url == "https://api.github.com/repos/org/repo/contents/pipelines.yaml?ref=master"
        assert req.get_header("Authorization") == "token abc"
        assert req.get_header("Accept") == "application/vnd.github.raw"

    @patch("gitops_backend.adapters.git.base.urllib.request.urlopen")
    def test_no_token_no_auth_header(self, mock_open):
        mock_open.return_value = _response(b"")
        GitHubClient().file_contents("org/repo", "pipelines.yaml", "master")
        assert mock_open.call_args[0][0].get_header("Authorization") is None

    @patch("gitops_backend.adapters.git.base.urllib.request.urlopen")
    def test_not_found(self, mock_open):
        mock_open.side_effect = _http_error(404)
        with pytest.raises(NotFoundError):
            GitHubClient().file_contents("org/repo", "pipelines.yaml", "master")

    @pytest.mark.parametrize("code", [401, 403])
    @patch("gitops_backend.adapters.git.base.urllib.request.urlopen")
    def test_auth_failure(self, mock_open, code):
        mock_open.side_effect = _http_error(code)
        with pytest.raises(AuthError):
            GitHubClient().file_contents("org/repo", "pipelines.yaml", "master")

    @patch("gitops_backend.adapters.git.base.urllib.request.urlopen")
    def test_server_error(self, mock_open):
        mock_open.side_effect = _http_error(502)
        with pytest.raises(GitError, match="HTTP 502"):
            GitHubClient().file_contents("org/repo", "pipelines.yaml", "master")

    @patch("gitops_backend.adapters.git.base.urllib.request.urlopen")
    def test_network_error(self, mock_open):
        mock_open.side_effect = urllib.error.URLError("connection refused")
        with pytest.raises(GitError, match="failed to reach github"):
            GitHubClient().file_contents("org/repo", "pipelines.yaml", "master")


class TestGitLabClient:
    @patch("gitops_backend.adapters.git.base.urllib.request.urlopen")
    def test_file_contents(self, mock_open):
        mock_open.return_value = _response(b"ok")

        GitLabClient(token="glpat").file_contents("group/sub/project", "env/pipelines.yaml", "main")

        req = mock_open.call_args[0][0]
        assert req.full_url == (
            "https://gitlab.com/api/v4/projects/group%2Fsub%2Fproject"
            "/repository/files/env%2Fpipelines.yaml/raw?ref=main"
        )
        assert req.get_header("Private-token") == "glpat"


# ── Mock ─────────────────────────────────────────────────────────


class TestMockClientFactory:
    def test_serves_added_files(self):
        factory = MockClientFactory()
        factory.add_file("https://github.com/org/repo.git", "pipelines.yaml", "master", "x: 1")
        client = factory.create("https://github.com/org/repo.git", "tok")

        assert client.file_contents("org/repo", "pipelines.yaml", "master") == b"x: 1"
        assert client.call_log == [("org/repo", "pipelines.yaml", "master")]
        assert factory.clients[0].token == "tok"

    def test_missing_file(self):
        client = MockClientFactory().create("https://github.com/org/repo.git")
        with pytest.raises(NotFoundError):
            client.file_contents("org/repo", "pipelines.yaml", "master")

    def test_denied_token(self):
        factory = MockClientFactory()
        factory.deny_token("bad")
        with pytest.raises(AuthError):
            factory.create("https://github.com/org/repo.git", "bad")
