"""
Apps summary — the ``GET /pipelines`` response shape.

Applications are keyed by name across environments: an app deployed
to dev and staging shows up once, listing both.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from gitops_backend.core.models.manifest import Manifest


class AppSummary(BaseModel):
    name: str
    repo_url: str = ""
    environments: list[str] = Field(default_factory=list)


class AppsResponse(BaseModel):
    apps: list[AppSummary] = Field(default_factory=list)

    @classmethod
    def from_manifest(cls, manifest: Manifest) -> AppsResponse:
        """Group apps by name, in order of first declaration."""
        by_name: dict[str, AppSummary] = {}
        for env in manifest.environments:
            for app in env.apps:
                summary = by_name.get(app.name)
                if summary is None:
                    summary = AppSummary(name=app.name, repo_url=manifest.gitops_url)
                    by_name[app.name] = summary
                if env.name not in summary.environments:
                    summary.environments.append(env.name)
        return cls(apps=list(by_name.values()))
