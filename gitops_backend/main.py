"""
GitOps backend — CLI entrypoint.

Usage:
    gitops-backend --help
    gitops-backend serve --port 8080
    gitops-backend correlate pipelines.yaml resources.yaml
    gitops-backend apps pipelines.yaml
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from gitops_backend import __version__
from gitops_backend.core.observability.logging_config import configure_from_env


@click.group()
@click.version_option(version=__version__, prog_name="gitops-backend")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to gitops-backend.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """GitOps backend — correlate pipelines manifests with cluster resources."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    if debug:
        flag_level = "DEBUG"
    elif verbose:
        flag_level = "INFO"
    elif quiet:
        flag_level = "ERROR"
    else:
        flag_level = None

    configure_from_env(flag_level, quiet_third_party=not debug)


@cli.command()
@click.option("--host", default=None, help="Bind address (default: from config).")
@click.option("--port", type=int, default=None, help="Port (default: from config).")
@click.option("--mock", is_flag=True, help="Serve files from an empty in-memory git host.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, mock: bool) -> None:
    """Run the HTTP API server."""
    from gitops_backend.core.config.loader import ConfigError, load_settings
    from gitops_backend.ui.web.server import create_app, run_server

    try:
        settings = load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    client_factory = secret_getter = None
    if mock:
        from gitops_backend.adapters.git import MockClientFactory
        from gitops_backend.core.services.secrets import StaticSecretGetter

        client_factory = MockClientFactory()
        secret_getter = StaticSecretGetter({settings.secret_ref: "mock-token"})

    app = create_app(settings, client_factory=client_factory, secret_getter=secret_getter)
    run_server(app, host=host or settings.host, port=port or settings.port)


@cli.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("resources", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--env", "environment", default=None, help="Only services of this environment.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def correlate(manifest: Path, resources: Path, environment: str | None, as_json: bool) -> None:
    """Match MANIFEST services against RESOURCES.

    RESOURCES is Kubernetes YAML (one or more documents) or a JSON file
    holding a list of resource descriptors.
    """
    from gitops_backend.core.errors import GitopsError
    from gitops_backend.core.services.manifest_decode import decode_manifest
    from gitops_backend.core.services.pipelines_ops import services_for_manifest

    try:
        decoded = decode_manifest(manifest.read_bytes())
        observed = _load_resources(resources)
        views = services_for_manifest(decoded, observed, environment)
    except GitopsError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"services": [v.model_dump() for v in views]}, indent=2))
        return

    if not views:
        click.echo("No services matched any resources.")
        return

    for view in views:
        click.secho(f"\n📦 {view.name}", fg="cyan", bold=True)
        if view.source.known:
            click.echo(f"   source: {view.source.url} ({view.source.type})")
        for image in view.images:
            click.echo(f"   🐳 {image}")
        for res in view.resources:
            api = f"{res.group}/{res.version}" if res.group else res.version
            click.echo(f"     • {res.kind}/{res.name}  [{api}]")


@cli.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def apps(manifest: Path, as_json: bool) -> None:
    """List the applications declared in MANIFEST."""
    from gitops_backend.core.errors import DecodeError
    from gitops_backend.core.models.apps import AppsResponse
    from gitops_backend.core.services.manifest_decode import decode_manifest

    try:
        summary = AppsResponse.from_manifest(decode_manifest(manifest.read_bytes()))
    except DecodeError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(summary.model_dump(), indent=2))
        return

    for app in summary.apps:
        click.echo(f"{app.name}  → {', '.join(app.environments)}")


def _load_resources(path: Path):  # type: ignore[no-untyped-def]
    """Descriptors from a JSON descriptor list, or parsed Kubernetes YAML."""
    from gitops_backend.core.errors import DecodeError
    from gitops_backend.core.services.resource_parser import (
        descriptors_from_json,
        parse_manifests,
    )

    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        try:
            data = json.loads(text)
        except ValueError as e:
            raise DecodeError(f"invalid JSON in {path}: {e}") from e
        if isinstance(data, list):
            return descriptors_from_json(data)
    return parse_manifests(text)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
