"""
Core error taxonomy.

Everything the correlation core can fail with derives from
``GitopsError`` so the HTTP layer can translate it into a single
client-error response. None of these are retryable: the inputs are
already in memory when they are raised.
"""

from __future__ import annotations


class GitopsError(Exception):
    """Base class for request-level failures raised by the core."""


class DecodeError(GitopsError):
    """Manifest or resource bytes are not valid structured data."""


class SourceResolutionError(GitopsError):
    """A declared service's source URL is not a structurally valid URL."""

    def __init__(self, url: str, reason: str, service: str = ""):
        self.url = url
        self.reason = reason
        self.service = service
        prefix = f"service {service!r}: " if service else ""
        super().__init__(f"{prefix}failed to parse source URL {url!r}: {reason}")


class EnvironmentNotFoundError(GitopsError):
    """A named environment is not declared in the manifest."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"environment {name!r} not found in manifest")
