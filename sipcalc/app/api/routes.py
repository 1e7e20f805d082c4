"""HTTP routes for the Flask API."""

import json
import logging
import math
from http import HTTPStatus
from typing import Any, Dict

from flask import Blueprint, abort, current_app, jsonify, request
from pydantic import BaseModel, ValidationError
from werkzeug.exceptions import HTTPException

from sipcalc import __version__
from sipcalc.core import currency
from sipcalc.core.projection import (
    accumulation_schedule,
    decumulation_schedule,
    is_finite_result,
    project_accumulation,
    project_decumulation,
)
from sipcalc.core.storage import new_saved_calculation
from sipcalc.schemas.accumulation import AccumulationInput, AccumulationResponse
from sipcalc.schemas.decumulation import DecumulationInput, DecumulationResponse
from sipcalc.schemas.ping import PingResponse
from sipcalc.schemas.saved import (
    CalculationKind,
    CurrencyInfo,
    CurrencyPreference,
    save_payload_adapter,
)

EXTENSION_KEY = "sipcalc"

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _services():
    return current_app.extensions[EXTENSION_KEY]


def _payload() -> Dict[str, Any]:
    return request.get_json(force=True, silent=False)


def _dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


def _currency_info(code: str) -> CurrencyInfo:
    return CurrencyInfo(code=code, symbol=currency.symbol_for(code), name=currency.name_for(code))


def _require_finite(*models: BaseModel) -> None:
    if not all(is_finite_result(model) for model in models):
        abort(HTTPStatus.UNPROCESSABLE_ENTITY, description="projection result is not a finite number")


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    logger.info("Rejected %s %s: %d validation error(s)", request.method, request.path, exc.error_count())
    return jsonify({"detail": json.loads(exc.json(include_url=False))}), HTTPStatus.UNPROCESSABLE_ENTITY


@api_bp.errorhandler(HTTPException)
def _handle_http_error(exc: HTTPException):
    return jsonify({"detail": exc.description}), exc.code


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    response = PingResponse(message="pong", version=__version__)
    return jsonify(response.model_dump())


@api_bp.post("/calc/accumulation")
def accumulation() -> Any:
    """Project a SIP / step-up SIP / lumpsum plan."""
    payload = AccumulationInput.model_validate(_payload())
    result = project_accumulation(payload)
    schedule = accumulation_schedule(payload)
    _require_finite(result, *schedule)
    response = AccumulationResponse(**result.model_dump(), schedule=schedule)
    return jsonify(_dump(response))


@api_bp.post("/calc/decumulation")
def decumulation() -> Any:
    """Simulate a systematic withdrawal plan."""
    payload = DecumulationInput.model_validate(_payload())
    result = project_decumulation(payload)
    schedule = decumulation_schedule(payload)
    _require_finite(result, *schedule)
    response = DecumulationResponse(**result.model_dump(), schedule=schedule)
    return jsonify(_dump(response))


@api_bp.get("/calculations")
def list_calculations() -> Any:
    calculations = _services().history.list(query=request.args.get("q"))
    return jsonify([_dump(calc) for calc in calculations])


@api_bp.post("/calculations")
def save_calculation() -> Any:
    """Run the projection server-side and store it in the history."""
    services = _services()
    payload = save_payload_adapter.validate_python(_payload())

    if payload.kind == CalculationKind.ACCUMULATION:
        result = project_accumulation(payload.request)
    else:
        result = project_decumulation(payload.request)
    _require_finite(result)

    code = payload.currency or services.preferences.get_currency()
    saved = services.history.save(new_saved_calculation(payload.request, result, code))
    return jsonify(_dump(saved)), HTTPStatus.CREATED


@api_bp.get("/calculations/<calculation_id>")
def get_calculation(calculation_id: str) -> Any:
    saved = _services().history.get(calculation_id)
    if saved is None:
        abort(HTTPStatus.NOT_FOUND, description=f"calculation {calculation_id} not found")
    return jsonify(_dump(saved))


@api_bp.delete("/calculations/<calculation_id>")
def delete_calculation(calculation_id: str) -> Any:
    if not _services().history.delete(calculation_id):
        abort(HTTPStatus.NOT_FOUND, description=f"calculation {calculation_id} not found")
    return "", HTTPStatus.NO_CONTENT


@api_bp.delete("/calculations")
def clear_calculations() -> Any:
    _services().history.clear()
    return "", HTTPStatus.NO_CONTENT


@api_bp.get("/settings/currency")
def get_currency() -> Any:
    code = _services().preferences.get_currency()
    return jsonify(_dump(_currency_info(code)))


@api_bp.put("/settings/currency")
def update_currency() -> Any:
    preference = CurrencyPreference.model_validate(_payload())
    code = preference.currency.upper()
    if not currency.is_supported(code):
        return (
            jsonify({"detail": f"unsupported currency {preference.currency}"}),
            HTTPStatus.UNPROCESSABLE_ENTITY,
        )
    _services().preferences.set_currency(code)
    return jsonify(_dump(_currency_info(code)))


@api_bp.get("/currencies")
def list_currencies() -> Any:
    return jsonify([_dump(_currency_info(c.code)) for c in currency.supported_currencies()])


@api_bp.get("/format")
def format_amount() -> Any:
    """Display helpers: grouped amount, amount in words, and symbol."""
    amount = request.args.get("amount", type=float)
    if amount is None or not math.isfinite(amount):
        abort(HTTPStatus.BAD_REQUEST, description="amount must be a number")
    code = (request.args.get("currency") or _services().preferences.get_currency()).upper()
    return jsonify(
        {
            "amount": amount,
            "currency": code,
            "symbol": currency.symbol_for(code),
            "formatted": currency.format_amount(amount, code),
            "words": currency.to_words(amount, code),
        }
    )
