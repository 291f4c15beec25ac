"""
Web server — Flask app factory.

Creates the Flask application serving the pipelines API. The git
client factory and secret getter are injected so tests and
``--mock`` mode can swap them out.
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify

from gitops_backend import __version__
from gitops_backend.adapters.git import ClientFactory
from gitops_backend.core.config.loader import Settings
from gitops_backend.core.services.pipelines_ops import ClientFactoryLike
from gitops_backend.core.services.secrets import KubeSecretGetter, SecretGetter

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    client_factory: ClientFactoryLike | None = None,
    secret_getter: SecretGetter | None = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        settings: Server settings (default: built-in defaults).
        client_factory: Git client factory (default: real GitHub/GitLab).
        secret_getter: Token source (default: Kubernetes Secrets via kubectl).

    Returns:
        Configured Flask application.
    """
    settings = settings or Settings()
    app = Flask(__name__)

    app.config["SETTINGS"] = settings
    app.config["CLIENT_FACTORY"] = client_factory or ClientFactory(
        github_api_url=settings.github_api_url,
        gitlab_api_url=settings.gitlab_api_url,
        github_hosts=settings.github_hosts,
        gitlab_hosts=settings.gitlab_hosts,
        timeout=settings.fetch_timeout,
    )
    app.config["SECRET_GETTER"] = secret_getter or KubeSecretGetter()

    from gitops_backend.ui.web.routes_pipelines import pipelines_bp

    app.register_blueprint(pipelines_bp)

    @app.route("/health")
    def health():  # type: ignore[no-untyped-def]
        return jsonify({"status": "ok", "version": __version__})

    logger.info("Web app created (manifest=%s@%s)", settings.manifest_path, settings.manifest_ref)
    return app


def run_server(
    app: Flask,
    host: str = "127.0.0.1",
    port: int = 8080,
    debug: bool = False,
) -> None:
    """Run the Flask development server."""
    logger.info("Starting gitops backend on %s:%d", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False)
