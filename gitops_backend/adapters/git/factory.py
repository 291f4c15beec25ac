"""
Client factory — picks the SCM driver for a repository URL.

The driver is chosen from the URL's host. ``github.com`` and
``gitlab.com`` are always known; self-hosted instances are added
through ``github_hosts`` / ``gitlab_hosts`` and get their API base
derived from the host.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from gitops_backend.adapters.git import github, gitlab
from gitops_backend.adapters.git.base import GitError, ScmClient, host_of

logger = logging.getLogger(__name__)


class ClientFactory:
    """Creates authenticated clients for repository URLs."""

    def __init__(
        self,
        github_api_url: str = github.DEFAULT_API_URL,
        gitlab_api_url: str = gitlab.DEFAULT_API_URL,
        github_hosts: Iterable[str] = (),
        gitlab_hosts: Iterable[str] = (),
        timeout: float = 30,
    ):
        self.github_api_url = github_api_url
        self.gitlab_api_url = gitlab_api_url
        self.github_hosts = {"github.com", *(h.lower() for h in github_hosts)}
        self.gitlab_hosts = {"gitlab.com", *(h.lower() for h in gitlab_hosts)}
        self.timeout = timeout

    def driver_for(self, url: str) -> str:
        """``github`` or ``gitlab`` for a URL.

        Raises:
            GitError: If the host is not a known git host.
        """
        host = host_of(url)
        if host in self.github_hosts:
            return "github"
        if host in self.gitlab_hosts:
            return "gitlab"
        raise GitError(f"unable to identify driver from URL {url!r}")

    def create(self, url: str, token: str = "") -> ScmClient:
        """An authenticated client for the host ``url`` lives on."""
        driver = self.driver_for(url)
        host = host_of(url)
        logger.debug("Creating %s client for host %s", driver, host)

        if driver == "github":
            api_url = self.github_api_url
            if host != "github.com" and api_url == github.DEFAULT_API_URL:
                api_url = f"https://{host}/api/v3"
            return github.GitHubClient(api_url=api_url, token=token, timeout=self.timeout)

        api_url = self.gitlab_api_url
        if host != "gitlab.com" and api_url == gitlab.DEFAULT_API_URL:
            api_url = f"https://{host}/api/v4"
        return gitlab.GitLabClient(api_url=api_url, token=token, timeout=self.timeout)
