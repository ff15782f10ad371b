from __future__ import annotations

import logging
from flask import Flask, g, jsonify
from werkzeug.exceptions import HTTPException

from storefront.app.config import Config
from storefront.app.extensions import db, migrate, cors
from storefront.app.common.auth import Authenticator, ConfiguredAuthenticator
from storefront.app.common.errors import ApiError, StoreError
from storefront.app.common.request_context import echo_request_id, init_request_id
from storefront.app.api.register import register_blueprints
from storefront.app.cli import cli_bp
from storefront.modules.cart.state import ViewStateRegistry
from storefront.modules.catalog.rest_store import RestCatalogStore
from storefront.modules.catalog.service import Catalog
from storefront.modules.catalog.store import CatalogStore, SqlCatalogStore


def build_store(app: Flask) -> CatalogStore:
    backend = (app.config.get("CATALOG_BACKEND") or "sql").lower()
    if backend == "rest":
        return RestCatalogStore(
            app.config["CATALOG_REST_URL"],
            api_key=app.config.get("CATALOG_REST_KEY") or None,
            timeout=app.config.get("CATALOG_REST_TIMEOUT", 10),
        )
    if backend != "sql":
        raise ValueError(f"unknown CATALOG_BACKEND {backend!r}")
    return SqlCatalogStore()


def create_app(
    config_object: type[Config] = Config,
    store: CatalogStore | None = None,
    authenticator: Authenticator | None = None,
) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    # Basic logging
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS") or "*"}})

    # Storefront collaborators
    app.extensions["storefront.catalog"] = Catalog(store or build_store(app))
    app.extensions["storefront.authenticator"] = authenticator or ConfiguredAuthenticator(
        app.config["ADMIN_USERNAME"], app.config["ADMIN_PASSWORD"]
    )
    app.extensions["storefront.view_states"] = ViewStateRegistry(
        max_sessions=app.config["VIEW_STATE_MAX_SESSIONS"],
        idle_seconds=app.config["VIEW_STATE_IDLE_SECONDS"],
    )

    # Request id
    @app.before_request
    def _before_request():
        init_request_id()

    @app.after_request
    def _after_request(response):
        return echo_request_id(response)

    # Health endpoint
    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    register_blueprints(app)

    # CLI (flask init-db, flask seed)
    app.register_blueprint(cli_bp)

    # Error handlers
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return jsonify(err.to_dict(getattr(g, "request_id", None))), err.status_code

    @app.errorhandler(StoreError)
    def handle_store_error(err: StoreError):
        payload = {
            "error": {
                "code": "store_error",
                "message": "The catalog store did not complete the operation",
                "details": {"operation": err.operation},
                "request_id": getattr(g, "request_id", None),
            }
        }
        return jsonify(payload), 502

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        # Normalize Werkzeug errors into our JSON shape
        payload = {
            "error": {
                "code": "http_error",
                "message": err.description,
                "details": {"name": err.name},
                "request_id": getattr(g, "request_id", None),
            }
        }
        return jsonify(payload), err.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        app.logger.exception("Unhandled exception")
        payload = {
            "error": {
                "code": "internal_error",
                "message": "Internal server error",
                "details": {},
                "request_id": getattr(g, "request_id", None),
            }
        }
        return jsonify(payload), 500

    return app
