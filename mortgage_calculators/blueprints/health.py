"""Liveness check for the calculators service."""

from flask import Blueprint, Response, jsonify

health_bp = Blueprint("health", __name__)


@health_bp.route("/healthz")
def health_check() -> Response:
    """Report that the service is up.

    The calculators hold no state and no connections, so a response at all
    means the service is healthy.
    """
    return jsonify({"status": "ok"})
