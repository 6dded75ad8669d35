"""Client helpers for the Stripe payment intents API."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping
import urllib.error
import urllib.parse
import urllib.request

from flask import current_app

LOGGER = logging.getLogger(__name__)

SUCCEEDED = "succeeded"
REQUIRES_ACTION = "requires_action"

AMOUNT_MISMATCH_MESSAGE = "Payment amount does not match booking"


class PaymentGatewayError(RuntimeError):
    """Raised when the payment processor rejects a request or cannot be reached."""


class PaymentConfigurationError(PaymentGatewayError):
    """Raised when no processor credentials are configured."""


@dataclass(slots=True)
class PaymentIntent:
    """The subset of a processor payment intent the storefront relies on."""

    id: str
    status: str
    client_secret: str | None = None
    amount: int | None = None
    currency: str | None = None
    error_message: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PaymentIntent":
        intent_id = payload.get("id")
        status = payload.get("status")
        if not isinstance(intent_id, str) or not isinstance(status, str):
            raise PaymentGatewayError("Processor response did not describe a payment intent.")
        last_error = payload.get("last_payment_error") or {}
        return cls(
            id=intent_id,
            status=status,
            client_secret=payload.get("client_secret"),
            amount=payload.get("amount"),
            currency=payload.get("currency"),
            error_message=last_error.get("message") if isinstance(last_error, dict) else None,
        )


class PaymentOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class PaymentResult:
    outcome: PaymentOutcome
    intent_id: str
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is PaymentOutcome.SUCCEEDED


class StripePaymentGateway:
    """Thin form-encoded client for ``/v1/payment_intents``."""

    def __init__(
        self,
        secret_key: str,
        *,
        api_base: str = "https://api.stripe.com/v1",
        timeout: int = 30,
    ) -> None:
        self._secret_key = secret_key
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "StripePaymentGateway":
        return cls(
            config.get("STRIPE_SECRET_KEY", ""),
            api_base=config.get("STRIPE_API_BASE", "https://api.stripe.com/v1"),
            timeout=int(config.get("STRIPE_TIMEOUT_SECONDS", 30)),
        )

    def create_payment_intent(self, amount: int, currency: str) -> PaymentIntent:
        """Create an intent for ``amount`` minor units and return it."""

        params = {
            "amount": str(amount),
            "currency": currency,
            "automatic_payment_methods[enabled]": "true",
        }
        return PaymentIntent.from_payload(self._request("POST", "/payment_intents", params))

    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        return PaymentIntent.from_payload(
            self._request("GET", f"/payment_intents/{_quote(intent_id)}")
        )

    def confirm_payment_intent(self, intent_id: str) -> PaymentIntent:
        return PaymentIntent.from_payload(
            self._request("POST", f"/payment_intents/{_quote(intent_id)}/confirm", {})
        )

    def _request(
        self, method: str, path: str, params: Mapping[str, str] | None = None
    ) -> dict[str, Any]:
        if not self._secret_key:
            raise PaymentConfigurationError("Payment processing is not configured.")

        data = None
        if params is not None:
            data = urllib.parse.urlencode(params).encode("utf-8")

        request = urllib.request.Request(
            self._api_base + path,
            data=data,
            headers={
                "Authorization": f"Bearer {self._secret_key}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            method=method,
        )
        LOGGER.debug("Sending %s %s to payment processor", method, path)

        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                body = response.read()
        except urllib.error.HTTPError as exc:
            raise PaymentGatewayError(_error_message(exc.read())) from exc
        except urllib.error.URLError as exc:
            raise PaymentGatewayError("Unable to contact payment processor.") from exc

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:  # pragma: no cover - defensive
            raise PaymentGatewayError("Payment processor response was not valid JSON.") from exc

        if not isinstance(payload, dict):
            raise PaymentGatewayError("Payment processor response must be an object.")
        return payload


def _quote(intent_id: str) -> str:
    return urllib.parse.quote(intent_id, safe="")


def _error_message(body: bytes) -> str:
    try:
        payload = json.loads(body or b"{}")
    except json.JSONDecodeError:
        return "Payment processor rejected the request."
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return "Payment processor rejected the request."


def _charges(intent: PaymentIntent, amount: int, currency: str) -> bool:
    return intent.amount == amount and (intent.currency or "").lower() == currency.lower()


def current_gateway() -> StripePaymentGateway:
    """Return the gateway registered on the running application."""

    return current_app.extensions["payment_gateway"]


def settle_card_payment(
    gateway: StripePaymentGateway,
    intent_id: str,
    *,
    expected_amount: int,
    expected_currency: str,
) -> PaymentResult:
    """Resolve a client-confirmed intent into a success or failure.

    The intent must charge exactly ``expected_amount`` minor units in
    ``expected_currency``; any other intent is refused without confirming it.
    An intent still waiting on customer authentication is confirmed once more;
    whatever status comes back from that attempt is final.
    """

    intent = gateway.retrieve_payment_intent(intent_id)
    if not _charges(intent, expected_amount, expected_currency):
        LOGGER.warning(
            "Payment %s charges %s %s; booking expects %s %s",
            intent.id,
            intent.amount,
            intent.currency,
            expected_amount,
            expected_currency,
        )
        return PaymentResult(
            outcome=PaymentOutcome.FAILED,
            intent_id=intent.id,
            message=AMOUNT_MISMATCH_MESSAGE,
        )

    if intent.status == REQUIRES_ACTION:
        LOGGER.info("Payment %s requires action; confirming again", intent_id)
        intent = gateway.confirm_payment_intent(intent_id)

    if intent.status == SUCCEEDED:
        return PaymentResult(outcome=PaymentOutcome.SUCCEEDED, intent_id=intent.id)

    if intent.status == REQUIRES_ACTION:
        message = intent.error_message or "Payment authentication failed"
    else:
        message = intent.error_message or "Payment was not successful"
    return PaymentResult(outcome=PaymentOutcome.FAILED, intent_id=intent.id, message=message)
