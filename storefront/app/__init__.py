"""Application factory for the Sagas Health storefront."""
from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from storefront.config import get_config
from storefront.app.middleware import register_audit_middleware
from storefront.app.services.payments import StripePaymentGateway
from storefront.app.services.session_store import DatabaseSessionStorage
from storefront.extensions import bcrypt, db, jwt, migrate


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application."""

    app = Flask(__name__)
    config_cls = get_config(config_name or app.config.get("ENV"))
    app.config.from_object(config_cls)

    register_extensions(app)
    register_blueprints(app)
    register_services(app)

    if app.config.get("DEBUG"):
        _prepare_dev_database(app)

    register_audit_middleware(app)

    CORS(app, resources={r"/api/*": {"origins": "*"}})
    return app


def register_extensions(app: Flask) -> None:
    """Initialize Flask extensions."""

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    bcrypt.init_app(app)


def register_blueprints(app: Flask) -> None:
    """Register application blueprints."""

    from storefront.app.api import api_bp
    from storefront.app.frontend import frontend_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(frontend_bp)


def register_services(app: Flask) -> None:
    """Attach the replaceable collaborators used by the booking flow."""

    app.extensions["payment_gateway"] = StripePaymentGateway.from_config(app.config)
    app.extensions["session_storage"] = DatabaseSessionStorage


def _prepare_dev_database(app: Flask) -> None:
    """Create tables for local development without running migrations."""
    with app.app_context():
        db.create_all()
