"""Mortgage Calculators Flask Application Factory."""

import logging
from typing import Optional

from flask import Flask

from mortgage_calculators.config import get_global_settings


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_name: Configuration name (development, testing, production)

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)

    # Configuration from Pydantic Settings
    settings = get_global_settings()
    app_env = config_name or settings.app_env
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["ENV"] = app_env
    app.config["DEBUG"] = app_env == "development"
    app.config["TESTING"] = app_env == "testing"

    # Logging
    app.logger.setLevel(settings.log_level)
    logging.getLogger("mortgage_calculators").setLevel(settings.log_level)

    from mortgage_calculators.services.calculation_service import CalculationService

    app.extensions["calculation_service"] = CalculationService(settings)

    # Register blueprints
    from mortgage_calculators.blueprints.calculators import calculators_bp
    from mortgage_calculators.blueprints.health import health_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(calculators_bp)

    return app
