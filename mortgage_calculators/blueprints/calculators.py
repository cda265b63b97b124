"""
Calculators blueprint.

Exposes every mortgage calculator as a JSON endpoint. Requests are
stateless: the body carries all inputs and the response carries the result.
"""

import json
from typing import Any

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from mortgage_calculators.models import InvalidInputError, UnknownCalculatorError
from mortgage_calculators.services.calculation_service import CalculationService

calculators_bp = Blueprint("calculators", __name__, url_prefix="/api/calculators")


def _service() -> CalculationService:
    return current_app.extensions["calculation_service"]


@calculators_bp.route("", methods=["GET"])
def list_calculators() -> Any:
    """List the available calculators.

    Returns:
        JSON response with the calculator names
    """
    return jsonify({"calculators": _service().available_calculators()}), 200


@calculators_bp.route("/<name>", methods=["POST"])
def run_calculator(name: str) -> Any:
    """Run a calculator on the JSON request body.

    Args:
        name: Calculator name

    Returns:
        JSON response with the calculation result
    """
    try:
        payload = request.get_json(silent=True)
        if payload is None:
            payload = {}

        result = _service().run(name, payload)
        return jsonify(result), 200

    except UnknownCalculatorError:
        return jsonify({"error": "Calculator not found", "calculator": name}), 404

    except ValidationError as e:
        details = json.loads(e.json(include_url=False))
        return jsonify({"error": "Invalid input", "details": details}), 400

    except InvalidInputError as e:
        return jsonify({"error": "Invalid input", "details": str(e)}), 400

    except Exception as e:
        current_app.logger.error(f"Error running calculator {name}: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500
