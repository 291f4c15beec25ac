"""
Pipelines routes — manifest summary and service correlation.

Blueprint: pipelines_bp

Endpoints:
    GET  /pipelines           — apps declared in a repository's pipelines.yaml
    POST /pipelines/services  — correlate the manifest with posted resources

Both take ``url`` (the repository) and optionally ``secretNS`` +
``secretName`` naming the Secret that holds the git token.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from gitops_backend.adapters.git.base import AuthError, GitError
from gitops_backend.core.config.loader import Settings
from gitops_backend.core.errors import DecodeError, GitopsError
from gitops_backend.core.services import pipelines_ops
from gitops_backend.core.services.resource_parser import (
    descriptors_from_json,
    parse_manifests,
    parse_objects,
)
from gitops_backend.core.services.secrets import (
    SecretError,
    auth_token_from_header,
    secret_ref_from_query,
)

logger = logging.getLogger(__name__)

pipelines_bp = Blueprint("pipelines", __name__)

_YAML_TYPES = ("application/yaml", "application/x-yaml", "text/yaml", "text/x-yaml")


def _settings() -> Settings:
    return current_app.config["SETTINGS"]


def _error(message: str, status: int = 400):  # type: ignore[no-untyped-def]
    return jsonify({"error": message}), status


def _fetch_request() -> pipelines_ops.FetchRequest | None:
    """Build the fetch request from query args; None if ``url`` is missing."""
    url = request.args.get("url", "")
    if not url:
        return None
    settings = _settings()
    return pipelines_ops.FetchRequest(
        url=url,
        secret_ref=secret_ref_from_query(request.args) or settings.secret_ref,
        auth_token=auth_token_from_header(request.headers.get("Authorization")),
        path=settings.manifest_path,
        ref=settings.manifest_ref,
    )


def _failure(e: Exception):  # type: ignore[no-untyped-def]
    """Translate a fetch/decode/correlate failure into a 400."""
    if isinstance(e, (SecretError, AuthError)):
        logger.warning("Failed to authenticate request: %s", e)
        return _error("unable to authenticate request")
    if isinstance(e, DecodeError):
        logger.warning("Failed to decode %s: %s", _settings().manifest_path, e)
        return _error(f"failed to decode {_settings().manifest_path}: {e}")
    logger.warning("Request failed: %s", e)
    return _error(str(e))


@pipelines_bp.route("/pipelines")
def get_pipelines():  # type: ignore[no-untyped-def]
    """Apps declared in the repository's manifest, with their environments."""
    fetch = _fetch_request()
    if fetch is None:
        logger.warning("Request without 'url' parameter")
        return _error("missing parameter 'url'")

    logger.info("Fetching pipelines for %s", fetch.url)
    try:
        apps = pipelines_ops.get_pipelines(
            fetch,
            current_app.config["CLIENT_FACTORY"],
            current_app.config["SECRET_GETTER"],
        )
    except (GitError, SecretError, GitopsError) as e:
        return _failure(e)
    except Exception:
        logger.exception("Unexpected failure fetching pipelines")
        return _error("internal error", 500)

    return jsonify(apps.model_dump())


@pipelines_bp.route("/pipelines/services", methods=["POST"])
def post_services():  # type: ignore[no-untyped-def]
    """Correlate the manifest with resources in the request body.

    Body: JSON ``{"resources": [descriptor, ...]}``, a ``kubectl get -o
    json`` List, or raw Kubernetes YAML with a YAML content type.
    Optional ``env`` restricts matching to one environment.
    """
    fetch = _fetch_request()
    if fetch is None:
        logger.warning("Request without 'url' parameter")
        return _error("missing parameter 'url'")

    try:
        resources = _resources_from_body()
    except DecodeError as e:
        logger.warning("Bad resources body: %s", e)
        return _error(str(e))

    try:
        views = pipelines_ops.get_services(
            fetch,
            resources,
            current_app.config["CLIENT_FACTORY"],
            current_app.config["SECRET_GETTER"],
            environment=request.args.get("env") or None,
        )
    except (GitError, SecretError, GitopsError) as e:
        return _failure(e)
    except Exception:
        logger.exception("Unexpected failure correlating services")
        return _error("internal error", 500)

    return jsonify({"services": [v.model_dump() for v in views]})


def _resources_from_body():  # type: ignore[no-untyped-def]
    if request.mimetype in _YAML_TYPES:
        return parse_manifests(request.get_data(as_text=True))

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise DecodeError("request body must be a JSON object")
    if "resources" in body:
        return descriptors_from_json(body["resources"])
    if isinstance(body.get("items"), list):
        return parse_objects(body["items"])
    raise DecodeError("request body has no 'resources' or 'items'")
