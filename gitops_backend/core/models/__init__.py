"""
Domain models — Pydantic types for the gitops backend.

All models are re-exported here for convenient access:

    from gitops_backend.core.models import Manifest, ResourceDescriptor
"""

from gitops_backend.core.models.apps import AppSummary, AppsResponse
from gitops_backend.core.models.manifest import (
    Application,
    Environment,
    Manifest,
    Service,
)
from gitops_backend.core.models.resource import (
    NAME_LABEL,
    PART_OF_LABEL,
    AggregatedServiceView,
    ResourceDescriptor,
    SourceReference,
)

__all__ = [
    "NAME_LABEL",
    "PART_OF_LABEL",
    # resource.py
    "AggregatedServiceView",
    # apps.py
    "AppSummary",
    # manifest.py
    "Application",
    "AppsResponse",
    "Environment",
    "Manifest",
    "ResourceDescriptor",
    "Service",
    "SourceReference",
]
