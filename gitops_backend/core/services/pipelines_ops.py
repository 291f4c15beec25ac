"""
Pipelines operations — channel-independent orchestration.

Fetches ``pipelines.yaml`` from a repository and runs it through the
decoder and correlation engine. No Flask dependency: the HTTP routes
and the CLI both call in here.

Steps run in a fixed order and the first failure aborts:
    parse URL → resolve token → fetch → decode → correlate
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from gitops_backend.adapters.git.base import ScmClient, repo_from_url
from gitops_backend.core.models.apps import AppsResponse
from gitops_backend.core.models.manifest import Manifest
from gitops_backend.core.models.resource import AggregatedServiceView, ResourceDescriptor
from gitops_backend.core.services.correlation import correlate, correlate_environment
from gitops_backend.core.services.manifest_decode import decode_manifest
from gitops_backend.core.services.secrets import SecretGetter, SecretRef

logger = logging.getLogger(__name__)


class ClientFactoryLike(Protocol):
    def create(self, url: str, token: str = "") -> ScmClient: ...


@dataclass
class FetchRequest:
    """Where to find the manifest and how to authenticate."""

    url: str
    secret_ref: SecretRef
    auth_token: str = ""
    path: str = "pipelines.yaml"
    ref: str = "master"


def fetch_manifest(
    request: FetchRequest,
    client_factory: ClientFactoryLike,
    secret_getter: SecretGetter,
) -> Manifest:
    """Fetch and decode the manifest for ``request.url``.

    Raises:
        GitError: Bad URL, unknown host, or failed fetch.
        SecretError: The git token could not be resolved.
        DecodeError: The manifest is not valid.
    """
    repo = repo_from_url(request.url)
    token = secret_getter.secret_token(request.auth_token, request.secret_ref)
    client = client_factory.create(request.url, token)

    logger.info("Fetching %s from %s@%s", request.path, repo, request.ref)
    body = client.file_contents(repo, request.path, request.ref)
    return decode_manifest(body)


def get_pipelines(
    request: FetchRequest,
    client_factory: ClientFactoryLike,
    secret_getter: SecretGetter,
) -> AppsResponse:
    """The apps summary of the manifest in a repository."""
    manifest = fetch_manifest(request, client_factory, secret_getter)
    return AppsResponse.from_manifest(manifest)


def get_services(
    request: FetchRequest,
    resources: Sequence[ResourceDescriptor],
    client_factory: ClientFactoryLike,
    secret_getter: SecretGetter,
    environment: str | None = None,
) -> list[AggregatedServiceView]:
    """Correlate a repository's manifest with observed resources."""
    manifest = fetch_manifest(request, client_factory, secret_getter)
    return services_for_manifest(manifest, resources, environment)


def services_for_manifest(
    manifest: Manifest,
    resources: Sequence[ResourceDescriptor],
    environment: str | None = None,
) -> list[AggregatedServiceView]:
    """Correlate and sort the views by service name."""
    if environment:
        views = correlate_environment(manifest, environment, resources)
    else:
        views = correlate(manifest, resources)
    return sorted(views, key=lambda v: v.name)
