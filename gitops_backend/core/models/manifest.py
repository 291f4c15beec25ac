"""
Manifest model — the declared Environment → Application → Service tree.

Decoded once per request from ``pipelines.yaml``. Unknown keys are
ignored: the real file carries pipeline and Argo CD sections that
this service never reads.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


class ManifestNode(BaseModel):
    """Shared config: immutable, tolerant of keys we don't model."""

    model_config = ConfigDict(extra="ignore", frozen=True)


def empty_if_null(value: Any) -> Any:
    # `services:` with no entries decodes to None in YAML
    return [] if value is None else value


def blank_if_null(value: Any) -> Any:
    # `source_url:` with no value decodes to None
    return "" if value is None else value


class Service(ManifestNode):
    """A service expected to exist, joined to resources by name."""

    name: StrictStr
    source_url: StrictStr = ""

    @field_validator("source_url", mode="before")
    @classmethod
    def null_source_url(cls, value: Any) -> Any:
        return blank_if_null(value)


class Application(ManifestNode):
    """A named group of services within an environment."""

    name: StrictStr
    services: list[Service] = Field(default_factory=list)

    @field_validator("services", mode="before")
    @classmethod
    def null_services(cls, value: Any) -> Any:
        return empty_if_null(value)


class Environment(ManifestNode):
    """A deployment target: a cluster and the apps deployed to it."""

    name: StrictStr
    cluster: StrictStr = ""
    apps: list[Application] = Field(default_factory=list)

    @field_validator("cluster", mode="before")
    @classmethod
    def null_cluster(cls, value: Any) -> Any:
        return blank_if_null(value)

    @field_validator("apps", mode="before")
    @classmethod
    def null_apps(cls, value: Any) -> Any:
        return empty_if_null(value)


class Manifest(ManifestNode):
    """Root of ``pipelines.yaml``."""

    gitops_url: StrictStr = ""
    environments: list[Environment] = Field(default_factory=list)

    @field_validator("gitops_url", mode="before")
    @classmethod
    def null_gitops_url(cls, value: Any) -> Any:
        return blank_if_null(value)

    @field_validator("environments", mode="before")
    @classmethod
    def null_environments(cls, value: Any) -> Any:
        return empty_if_null(value)

    def services(self) -> list[Service]:
        """Every declared service, environments then apps, in declaration order."""
        return [
            svc
            for env in self.environments
            for app in env.apps
            for svc in app.services
        ]

    def get_environment(self, name: str) -> Environment | None:
        """Look up an environment by name."""
        for env in self.environments:
            if env.name == name:
                return env
        return None

    def for_environment(self, name: str) -> Manifest | None:
        """A copy of this manifest holding only the named environment."""
        env = self.get_environment(name)
        if env is None:
            return None
        return self.model_copy(update={"environments": [env]})
