"""
Configuration loader — server settings from YAML and the environment.

Settings are resolved in precedence order:
    GITOPS_* env vars  >  gitops-backend.yml  >  built-in defaults

The config file is optional; a bare ``gitops-backend serve`` works
with defaults alone.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from gitops_backend.adapters.git import github, gitlab
from gitops_backend.core.services.secrets import DEFAULT_SECRET_REF, SecretRef

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "gitops-backend.yml"

ENV_PREFIX = "GITOPS_"


class ConfigError(Exception):
    """Raised when the server configuration is invalid."""


class Settings(BaseModel):
    """Everything the server needs to know at startup."""

    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)

    # Where pipelines.yaml lives inside the fetched repository
    manifest_path: str = "pipelines.yaml"
    manifest_ref: str = "master"

    secret_namespace: str = DEFAULT_SECRET_REF.namespace
    secret_name: str = DEFAULT_SECRET_REF.name

    fetch_timeout: float = Field(default=30, gt=0)
    github_api_url: str = github.DEFAULT_API_URL
    gitlab_api_url: str = gitlab.DEFAULT_API_URL
    github_hosts: list[str] = Field(default_factory=list)
    gitlab_hosts: list[str] = Field(default_factory=list)

    @field_validator("github_hosts", "gitlab_hosts", mode="before")
    @classmethod
    def split_hosts(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [h.strip() for h in value.split(",") if h.strip()]
        return value

    @property
    def secret_ref(self) -> SecretRef:
        return SecretRef(namespace=self.secret_namespace, name=self.secret_name)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for gitops-backend.yml starting from a directory, walking up."""
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load and validate server settings.

    Args:
        path: Explicit config file. If None, searches upward; a missing
            file is fine and means defaults.
        environ: Environment to read overrides from (default: os.environ).

    Raises:
        ConfigError: If the file is unreadable or a value is invalid.
    """
    data: dict[str, Any] = {}

    if path is not None and not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    path = path or find_config_file()

    if path is not None:
        data = _read_yaml(path)

    env = os.environ if environ is None else environ
    for field_name in Settings.model_fields:
        key = ENV_PREFIX + field_name.upper()
        if env.get(key):
            data[field_name] = env[key]

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.debug("Loaded settings (file=%s)", path)
    return settings


def _read_yaml(path: Path) -> dict[str, Any]:
    logger.debug("Loading config from %s", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data
