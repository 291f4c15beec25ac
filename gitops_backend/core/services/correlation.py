"""
Correlation engine — joins declared services to observed resources.

A resource belongs to a service when its ``app.kubernetes.io/name``
label equals the service name. Nothing else is compared: the
``part-of`` label is carried through but never filters.

Pure and synchronous. No I/O, no shared state, so concurrent calls
are safe as long as each gets its own inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from gitops_backend.core.errors import EnvironmentNotFoundError, SourceResolutionError
from gitops_backend.core.models.manifest import Manifest
from gitops_backend.core.models.resource import (
    AggregatedServiceView,
    ResourceDescriptor,
)
from gitops_backend.core.services.source_ref import resolve_source

logger = logging.getLogger(__name__)


def correlate(
    manifest: Manifest,
    resources: Sequence[ResourceDescriptor],
) -> list[AggregatedServiceView]:
    """Build one view per declared service that has matching resources.

    Services with no matches are dropped; resources matching no
    service are ignored. Views come back in declaration order, which
    callers should not rely on for identity.

    Raises:
        SourceResolutionError: If a matched service's source URL is
            malformed. No partial result is returned.
    """
    if manifest is None:
        raise TypeError("correlate() requires a Manifest, got None")

    index = index_by_name(resources)
    views: list[AggregatedServiceView] = []

    for svc in manifest.services():
        selected = index.get(svc.name)
        if not selected:
            continue

        try:
            source = resolve_source(svc.source_url)
        except SourceResolutionError as e:
            raise SourceResolutionError(e.url, e.reason, service=svc.name) from e

        views.append(AggregatedServiceView(
            name=svc.name,
            source=source,
            images=collect_images(selected),
            resources=list(selected),
        ))

    logger.debug(
        "Correlated %d resources into %d service views",
        len(resources), len(views),
    )
    return views


def correlate_environment(
    manifest: Manifest,
    environment: str,
    resources: Sequence[ResourceDescriptor],
) -> list[AggregatedServiceView]:
    """Like ``correlate`` but only for services of one environment."""
    scoped = manifest.for_environment(environment)
    if scoped is None:
        raise EnvironmentNotFoundError(environment)
    return correlate(scoped, resources)


def index_by_name(
    resources: Iterable[ResourceDescriptor],
) -> dict[str, list[ResourceDescriptor]]:
    """Group resources by name-label value, keeping input order.

    Resources without a name-label are left out: they can never match.
    """
    index: dict[str, list[ResourceDescriptor]] = {}
    for res in resources:
        name = res.app_name
        if name:
            index.setdefault(name, []).append(res)
    return index


def collect_images(resources: Iterable[ResourceDescriptor]) -> list[str]:
    """Sorted, de-duplicated union of every resource's images."""
    return sorted({image for res in resources for image in res.images})
