"""Payment intent endpoint used by the checkout page."""
from __future__ import annotations

from http import HTTPStatus

from flask import current_app, jsonify, request
from flask.typing import ResponseReturnValue

from storefront.app.services.payments import (
    PaymentConfigurationError,
    PaymentGatewayError,
    current_gateway,
)

from . import api_bp


@api_bp.post("/create-payment-intent")
def create_payment_intent() -> ResponseReturnValue:
    """Create a payment intent and hand its client secret to the browser."""

    payload = request.get_json(silent=True) or {}
    amount = payload.get("amount")
    currency = payload.get("currency") or current_app.config.get("PAYMENT_CURRENCY", "usd")

    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        return (
            jsonify(error="Amount must be a positive whole number of cents."),
            HTTPStatus.BAD_REQUEST,
        )
    if not isinstance(currency, str) or not currency.strip():
        return jsonify(error="Currency must be a currency code."), HTTPStatus.BAD_REQUEST

    try:
        intent = current_gateway().create_payment_intent(amount, currency.strip().lower())
    except PaymentConfigurationError as exc:
        current_app.logger.error("Payment gateway is not configured: %s", exc)
        return jsonify(error="Payments are unavailable."), HTTPStatus.SERVICE_UNAVAILABLE
    except PaymentGatewayError as exc:
        current_app.logger.error("Error creating payment intent: %s", exc)
        return jsonify(error=str(exc)), HTTPStatus.BAD_GATEWAY

    return jsonify(clientSecret=intent.client_secret), HTTPStatus.OK
