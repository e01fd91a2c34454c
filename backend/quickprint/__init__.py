# backend/quickprint/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate



def create_app(config_class=Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Document storage collaborator
    from .services.storage_service import init_file_store
    init_file_store(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.orders import orders_bp  # Customer: upload, recipe, payment
    from .routes.dashboard import dashboard_bp  # Shopkeeper: queue, status, EOD
    from .routes.files import files_bp  # Signed document downloads

    app.register_blueprint(system_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(files_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
            "http://127.0.0.1:8080",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
