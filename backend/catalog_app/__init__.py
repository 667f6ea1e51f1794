# backend/catalog_app/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import catalog


def create_app(config_overrides: dict | None = None, gateway=None) -> Flask:
    """
    Application factory.

    config_overrides are applied on top of Config; gateway replaces the
    Google gateway (tests pass an in-memory fake).
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    catalog.init_app(app, gateway=gateway)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.catalog import catalog_bp
    from .routes.images import images_bp
    from .routes.pending import pending_bp
    from .routes.admin import admin_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(images_bp)
    app.register_blueprint(pending_bp)
    app.register_blueprint(admin_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type, x-admin-password"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    if app.config["LOAD_ON_STARTUP"]:
        from .services.refresh_service import initialize
        with app.app_context():
            # a catalog load failure propagates and aborts startup
            initialize()

    return app
