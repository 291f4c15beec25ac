"""
Tests for domain models — defaults, helpers, serialization.
"""

import json

import pytest
from pydantic import ValidationError

from gitops_backend.core.models import (
    NAME_LABEL,
    PART_OF_LABEL,
    AggregatedServiceView,
    Application,
    AppsResponse,
    AppSummary,
    Environment,
    Manifest,
    ResourceDescriptor,
    Service,
    SourceReference,
)


class TestResourceDescriptor:
    def test_defaults(self):
        r = ResourceDescriptor()
        assert r.group == ""
        assert r.labels == {}
        assert r.images == []

    def test_label_helpers(self):
        r = ResourceDescriptor(labels={NAME_LABEL: "go-demo", PART_OF_LABEL: "shop"})
        assert r.app_name == "go-demo"
        assert r.part_of == "shop"
        assert r.label("missing") == ""

    def test_frozen(self):
        r = ResourceDescriptor(name="a")
        with pytest.raises(ValidationError):
            r.name = "b"

    def test_json_shape(self):
        r = ResourceDescriptor(version="v1", kind="Service", name="redis")
        assert set(json.loads(r.model_dump_json())) == {
            "group", "version", "kind", "name", "labels", "images",
        }


class TestSourceReference:
    def test_zero_value(self):
        assert SourceReference() == SourceReference(url="", type="")
        assert not SourceReference().known

    def test_view_serializes_source(self):
        view = AggregatedServiceView(
            name="go-demo",
            source=SourceReference(url="https://github.com/o/r", type="github.com"),
        )
        data = view.model_dump()
        assert data["source"] == {"url": "https://github.com/o/r", "type": "github.com"}
        assert data["images"] == []
        assert data["resources"] == []


class TestManifest:
    def test_empty(self):
        assert Manifest().services() == []

    def test_service_requires_name(self):
        with pytest.raises(ValidationError):
            Service()  # type: ignore[call-arg]

    def test_environment_cluster_optional(self):
        assert Environment(name="dev").cluster == ""


class TestAppsResponse:
    def test_groups_apps_across_environments(self):
        manifest = Manifest(
            gitops_url="https://github.com/example/gitops.git",
            environments=[
                Environment(name="dev", apps=[Application(name="shop"), Application(name="auth")]),
                Environment(name="staging", apps=[Application(name="shop")]),
            ],
        )
        response = AppsResponse.from_manifest(manifest)
        assert response.apps == [
            AppSummary(
                name="shop",
                repo_url="https://github.com/example/gitops.git",
                environments=["dev", "staging"],
            ),
            AppSummary(
                name="auth",
                repo_url="https://github.com/example/gitops.git",
                environments=["dev"],
            ),
        ]

    def test_app_repeated_in_one_environment_listed_once(self):
        manifest = Manifest(environments=[
            Environment(name="dev", apps=[Application(name="shop"), Application(name="shop")]),
        ])
        assert AppsResponse.from_manifest(manifest).apps[0].environments == ["dev"]

    def test_empty(self):
        assert AppsResponse.from_manifest(Manifest()).model_dump() == {"apps": []}
