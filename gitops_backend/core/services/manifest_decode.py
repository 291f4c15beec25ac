"""
Manifest decoder — ``pipelines.yaml`` bytes into a ``Manifest``.

JSON is a subset of YAML, so both go through ``yaml.safe_load``.
"""

from __future__ import annotations

import logging

import yaml
from pydantic import ValidationError

from gitops_backend.core.errors import DecodeError
from gitops_backend.core.models.manifest import Manifest

logger = logging.getLogger(__name__)


def decode_manifest(data: bytes | str) -> Manifest:
    """Decode a manifest document.

    An empty document decodes to an empty Manifest.

    Raises:
        DecodeError: On invalid YAML, a non-mapping root, missing
            required names, or mistyped fields.
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"manifest is not valid UTF-8: {e}") from e

    try:
        raw = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise DecodeError(f"invalid YAML: {e}") from e

    if raw is None:
        return Manifest()

    if not isinstance(raw, dict):
        raise DecodeError(f"expected a mapping at the top level, got {type(raw).__name__}")

    try:
        manifest = Manifest.model_validate(raw)
    except ValidationError as e:
        raise DecodeError(_describe(e)) from e

    logger.debug(
        "Decoded manifest: %d environments, %d services",
        len(manifest.environments), len(manifest.services()),
    )
    return manifest


def _describe(error: ValidationError) -> str:
    """One line per problem, with a dotted path to the offending field."""
    problems = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        problems.append(f"{loc}: {err['msg']}")
    return "invalid manifest: " + "; ".join(problems)
