"""Git host clients — fetch files from GitHub and GitLab repositories."""

from gitops_backend.adapters.git.base import (
    AuthError,
    GitError,
    NotFoundError,
    ScmClient,
    repo_from_url,
)
from gitops_backend.adapters.git.factory import ClientFactory
from gitops_backend.adapters.git.github import GitHubClient
from gitops_backend.adapters.git.gitlab import GitLabClient
from gitops_backend.adapters.git.mock import MockClient, MockClientFactory

__all__ = [
    "AuthError",
    "ClientFactory",
    "GitError",
    "GitHubClient",
    "GitLabClient",
    "MockClient",
    "MockClientFactory",
    "NotFoundError",
    "ScmClient",
    "repo_from_url",
]
