from flask import Flask

from storefront.modules.pages.routes import bp as pages_bp
from storefront.modules.auth.routes import bp as auth_bp
from storefront.modules.catalog.routes import bp as catalog_bp
from storefront.modules.admin.routes import bp as admin_bp


def register_blueprints(app: Flask) -> None:
    app.register_blueprint(pages_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(catalog_bp, url_prefix="/api")
    app.register_blueprint(admin_bp)

    # Root API document
    @app.get("/api")
    def api_index():
        return {
            "name": "Storefront API",
            "version": "0.1.0",
            "endpoints": {
                "catalog": ["/products", "/products/<id>", "/site-config"],
                "auth": ["/auth/login", "/auth/logout"],
                "admin": [
                    "/admin/products",
                    "/admin/products/<id>",
                    "/admin/site-config/<key>",
                    "/admin/reload",
                ],
            },
        }, 200
