"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import textwrap

import pytest

from gitops_backend.core.models import (
    NAME_LABEL,
    PART_OF_LABEL,
    Application,
    Environment,
    Manifest,
    ResourceDescriptor,
    Service,
)

TEST_SOURCE_URL = "https://github.com/rhd-example-gitops/gitops-demo.git"
TEST_REPO_URL = "https://github.com/example/gitops.git"


def labelled(name: str, part_of: str = "go-demo") -> dict[str, str]:
    return {NAME_LABEL: name, PART_OF_LABEL: part_of}


@pytest.fixture
def go_demo_resources() -> list[ResourceDescriptor]:
    return [
        ResourceDescriptor(
            group="apps", version="v1", kind="Deployment", name="go-demo-http",
            labels=labelled("go-demo"),
            images=["bigkevmcd/go-demo:876ecb3"],
        ),
        ResourceDescriptor(
            version="v1", kind="Service", name="go-demo-http",
            labels=labelled("go-demo"),
        ),
        ResourceDescriptor(
            version="v1", kind="ConfigMap", name="go-demo-config",
            labels=labelled("go-demo"),
        ),
    ]


@pytest.fixture
def redis_resources() -> list[ResourceDescriptor]:
    return [
        ResourceDescriptor(
            version="v1", kind="Service", name="redis",
            labels=labelled("redis"),
        ),
        ResourceDescriptor(
            group="apps", version="v1", kind="Deployment", name="redis",
            labels=labelled("redis"),
            images=["redis:6-alpine"],
        ),
    ]


@pytest.fixture
def manifest() -> Manifest:
    """One environment, one app, go-demo (with source) and redis (without)."""
    return Manifest(environments=[
        Environment(
            name="test-env",
            cluster="https://cluster.local",
            apps=[
                Application(
                    name="my-app",
                    services=[
                        Service(name="go-demo", source_url=TEST_SOURCE_URL),
                        Service(name="redis"),
                    ],
                ),
            ],
        ),
    ])


@pytest.fixture
def pipelines_yaml() -> str:
    return textwrap.dedent(f"""\
        gitops_url: {TEST_REPO_URL}
        environments:
          - name: dev
            cluster: https://dev.cluster.local
            pipelines:
              integration:
                template: app-ci-template
            apps:
              - name: my-app
                services:
                  - name: go-demo
                    source_url: {TEST_SOURCE_URL}
                  - name: redis
          - name: staging
            cluster: https://staging.cluster.local
            apps:
              - name: my-app
                services:
                  - name: go-demo
                    source_url: {TEST_SOURCE_URL}
              - name: other-app
                services:
                  - name: worker
    """)
