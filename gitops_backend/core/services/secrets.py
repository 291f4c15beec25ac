"""
Credential resolution — which git token to use for a request.

The token lives in a Kubernetes Secret (key ``token``). By default
the backend reads ``pipelines-app-delivery/pipelines-app-gitops``;
callers may name a different one with ``secretNS`` + ``secretName``.
When the request carries a bearer token it is passed to kubectl so
the Secret is read with the caller's own RBAC.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import subprocess
from collections.abc import Mapping
from typing import NamedTuple, Protocol

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"


class SecretError(Exception):
    """The git token could not be resolved."""


class SecretRef(NamedTuple):
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


DEFAULT_SECRET_REF = SecretRef(namespace="pipelines-app-delivery", name="pipelines-app-gitops")


class SecretGetter(Protocol):
    def secret_token(self, auth_token: str, ref: SecretRef) -> str: ...


def secret_ref_from_query(args: Mapping[str, str]) -> SecretRef | None:
    """A SecretRef from ``secretNS``/``secretName``, only if both are set."""
    ns = args.get("secretNS", "")
    name = args.get("secretName", "")
    if ns and name:
        return SecretRef(namespace=ns, name=name)
    return None


def auth_token_from_header(value: str | None) -> str:
    """The token from an ``Authorization: Bearer <token>`` header, or ``""``."""
    if not value:
        return ""
    scheme, _, token = value.strip().partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def _run_kubectl(*args: str, timeout: int = 15) -> subprocess.CompletedProcess[str]:
    """Run a kubectl command and return the result."""
    return subprocess.run(
        ["kubectl", *args],
        capture_output=True,
        text=True,
        timeout=timeout,
    )


class KubeSecretGetter:
    """Reads the token from a cluster Secret through kubectl."""

    def __init__(self, key: str = TOKEN_KEY, timeout: int = 15):
        self.key = key
        self.timeout = timeout

    def secret_token(self, auth_token: str, ref: SecretRef) -> str:
        args = ["get", "secret", ref.name, "-n", ref.namespace, "-o", "json"]
        if auth_token:
            args.append(f"--token={auth_token}")

        try:
            result = _run_kubectl(*args, timeout=self.timeout)
        except FileNotFoundError as e:
            raise SecretError("kubectl not available") from e
        except subprocess.TimeoutExpired as e:
            raise SecretError(f"timed out reading secret {ref}") from e

        if result.returncode != 0:
            logger.warning("kubectl failed reading secret %s: %s", ref, result.stderr.strip())
            raise SecretError(f"failed to get secret {ref}: {result.stderr.strip()}")

        try:
            data = json.loads(result.stdout).get("data") or {}
        except ValueError as e:
            raise SecretError(f"unreadable secret {ref}: {e}") from e

        encoded = data.get(self.key)
        if not encoded:
            raise SecretError(f"secret {ref} has no {self.key!r} key")
        try:
            return base64.b64decode(encoded, validate=True).decode("utf-8").strip()
        except (binascii.Error, UnicodeDecodeError) as e:
            raise SecretError(f"secret {ref} key {self.key!r} is not valid base64: {e}") from e


class StaticSecretGetter:
    """Serves tokens from a fixed mapping. For tests and local runs."""

    def __init__(self, tokens: Mapping[SecretRef, str] | None = None):
        self._tokens = dict(tokens or {})
        self.requests: list[tuple[str, SecretRef]] = []

    def secret_token(self, auth_token: str, ref: SecretRef) -> str:
        self.requests.append((auth_token, ref))
        try:
            return self._tokens[ref]
        except KeyError:
            raise SecretError(f"secret {ref} not found") from None
