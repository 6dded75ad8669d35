"""API blueprint registration."""
from flask import Blueprint

api_bp = Blueprint("api", __name__)

# Import endpoints to ensure they are registered with the blueprint.
from . import auth  # noqa: E402,F401
from . import certification  # noqa: E402,F401
from . import payments  # noqa: E402,F401
from .catalog import catalog_bp  # noqa: E402,F401

api_bp.register_blueprint(catalog_bp, url_prefix="/services")
