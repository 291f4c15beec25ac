"""
Resource parser — raw Kubernetes objects into ``ResourceDescriptor``s.

Accepts either parsed resource dicts (``kubectl get -o json`` items,
multi-document YAML) or descriptor dicts already in the wire shape.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import yaml
from pydantic import ValidationError

from gitops_backend.core.errors import DecodeError
from gitops_backend.core.models.resource import ResourceDescriptor

logger = logging.getLogger(__name__)

# Kinds whose pod spec sits at spec.template.spec
_TEMPLATED_KINDS = frozenset({
    "Deployment", "StatefulSet", "DaemonSet", "ReplicaSet", "Job",
    "ReplicationController",
})


def parse_manifests(text: str | bytes) -> list[ResourceDescriptor]:
    """Parse multi-document Kubernetes YAML.

    Empty documents and documents without ``kind``/``apiVersion`` are
    skipped. ``List`` documents are expanded.

    Raises:
        DecodeError: If the YAML is malformed.
    """
    try:
        docs = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise DecodeError(f"invalid resource YAML: {e}") from e

    resources: list[ResourceDescriptor] = []
    for doc in docs:
        resources.extend(parse_objects([doc]))
    return resources


def parse_objects(docs: Iterable[Any]) -> list[ResourceDescriptor]:
    """Parse already-loaded Kubernetes objects, expanding ``List`` kinds."""
    resources: list[ResourceDescriptor] = []
    for doc in docs:
        if not isinstance(doc, dict):
            continue
        if str(doc.get("kind", "")).endswith("List") and isinstance(doc.get("items"), list):
            resources.extend(parse_objects(doc["items"]))
            continue
        if "kind" not in doc or "apiVersion" not in doc:
            logger.debug("Skipping document without kind/apiVersion")
            continue
        resources.append(parse_resource(doc))
    return resources


def parse_resource(doc: dict) -> ResourceDescriptor:
    """Summarise a single Kubernetes object.

    Raises:
        DecodeError: If ``metadata``, ``labels`` or the pod spec path
            holds something other than a mapping.
    """
    kind = str(doc.get("kind", ""))
    group, version = split_api_version(str(doc.get("apiVersion", "")))
    metadata = _mapping(doc.get("metadata"), "metadata", kind, "")
    name = str(metadata.get("name") or "")
    labels = _mapping(metadata.get("labels"), "metadata.labels", kind, name)

    return ResourceDescriptor(
        group=group,
        version=version,
        kind=kind,
        name=name,
        labels={str(k): str(v) for k, v in labels.items()},
        images=extract_images(doc),
    )


def descriptors_from_json(items: Any) -> list[ResourceDescriptor]:
    """Validate a list of descriptor dicts in the wire shape.

    Raises:
        DecodeError: If ``items`` is not a list or an entry is invalid.
    """
    if not isinstance(items, list):
        raise DecodeError(f"expected a list of resources, got {type(items).__name__}")
    resources = []
    for i, item in enumerate(items):
        try:
            resources.append(ResourceDescriptor.model_validate(item))
        except ValidationError as e:
            raise DecodeError(f"invalid resource at index {i}: {e.errors()[0]['msg']}") from e
    return resources


def split_api_version(api_version: str) -> tuple[str, str]:
    """``apps/v1`` → ``("apps", "v1")``; core ``v1`` → ``("", "v1")``."""
    if "/" in api_version:
        group, _, version = api_version.partition("/")
        return group, version
    return "", api_version


def extract_images(doc: dict) -> list[str]:
    """Container images from the object's pod spec, init containers first."""
    pod_spec = _get_pod_spec(doc)
    if not pod_spec:
        return []
    images: list[str] = []
    for key in ("initContainers", "containers"):
        containers = pod_spec.get(key) or []
        if not isinstance(containers, list):
            kind = str(doc.get("kind", ""))
            raise DecodeError(f"invalid {_label(kind, _name_of(doc))}: {key} is not a list")
        for container in containers:
            image = container.get("image") if isinstance(container, dict) else None
            if image:
                images.append(str(image))
    return images


def _get_pod_spec(doc: dict) -> dict | None:
    kind = str(doc.get("kind", ""))
    if kind == "Pod":
        path = ("spec",)
    elif kind == "CronJob":
        path = ("spec", "jobTemplate", "spec", "template", "spec")
    elif kind in _TEMPLATED_KINDS:
        path = ("spec", "template", "spec")
    else:
        return None

    node: dict = doc
    for i, key in enumerate(path):
        node = _mapping(node.get(key), ".".join(path[: i + 1]), kind, _name_of(doc))
    return node


def _mapping(value: Any, field: str, kind: str, name: str) -> dict:
    """``value`` as a dict; null means empty, anything else is invalid."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(
            f"invalid {_label(kind, name)}: {field} must be a mapping, "
            f"got {type(value).__name__}"
        )
    return value


def _name_of(doc: dict) -> str:
    metadata = doc.get("metadata")
    return str(metadata.get("name") or "") if isinstance(metadata, dict) else ""


def _label(kind: str, name: str) -> str:
    return f"{kind} {name}" if name else kind
