"""Booking and payment records threaded through the checkout flow."""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from wellness.models.questionnaire import QuestionnaireResponse

CARD = "card"
HSA = "hsa"
PAYMENT_METHODS = (CARD, HSA)

HSA_SIMULATED_INTENT_ID = "HSA_PAYMENT_SIMULATED"


class AlreadyPaidError(RuntimeError):
    """Raised when payment details are appended to a booking a second time."""


def amount_in_minor_units(price: float | int) -> int:
    """Convert a dollar price into integer cents, rounding half up."""

    cents = Decimal(str(price)) * 100
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_appointment_date(value: str, today: date) -> date:
    """Parse an ISO ``YYYY-MM-DD`` appointment date that is not in the past."""

    try:
        parsed = date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError("Please enter a valid appointment date.") from exc
    if parsed < today:
        raise ValueError("Appointment date cannot be in the past.")
    return parsed


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string.")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{key} must be a string.")
    return value


@dataclass(frozen=True)
class BookingRecord:
    """The single in-flight booking for a browser session."""

    service_id: str
    service_name: str
    service_price: float
    appointment_date: str
    appointment_time: str
    questionnaire: QuestionnaireResponse
    payment_intent_id: str | None = None
    payment_method: str | None = None
    hsa_provider: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.payment_intent_id is not None

    @property
    def amount_cents(self) -> int:
        return amount_in_minor_units(self.service_price)

    def with_payment(
        self,
        *,
        payment_intent_id: str,
        payment_method: str,
        hsa_provider: str | None = None,
    ) -> "BookingRecord":
        """Return a copy with payment fields appended; allowed exactly once."""

        if self.is_paid:
            raise AlreadyPaidError("Payment details have already been recorded for this booking.")
        if not payment_intent_id:
            raise ValueError("payment_intent_id is required.")
        if payment_method not in PAYMENT_METHODS:
            raise ValueError(f"payment_method must be one of {', '.join(PAYMENT_METHODS)}.")
        if payment_method == HSA and not hsa_provider:
            raise ValueError("hsa_provider is required for HSA payments.")

        return replace(
            self,
            payment_intent_id=payment_intent_id,
            payment_method=payment_method,
            hsa_provider=hsa_provider if payment_method == HSA else None,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "serviceId": self.service_id,
            "serviceName": self.service_name,
            "servicePrice": self.service_price,
            "appointmentDate": self.appointment_date,
            "appointmentTime": self.appointment_time,
            "healthQuestionnaireData": self.questionnaire.to_dict(),
        }
        if self.payment_intent_id is not None:
            payload["paymentIntentId"] = self.payment_intent_id
            payload["paymentMethod"] = self.payment_method
            if self.hsa_provider is not None:
                payload["hsaProvider"] = self.hsa_provider
        return payload

    @classmethod
    def from_dict(cls, data: Any) -> "BookingRecord":
        if not isinstance(data, dict):
            raise ValueError("Booking data must be an object.")

        price = data.get("servicePrice")
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise ValueError("servicePrice must be a number.")

        return cls(
            service_id=_require_str(data, "serviceId"),
            service_name=_require_str(data, "serviceName"),
            service_price=price,
            appointment_date=_require_str(data, "appointmentDate"),
            appointment_time=_require_str(data, "appointmentTime"),
            questionnaire=QuestionnaireResponse.from_dict(data.get("healthQuestionnaireData")),
            payment_intent_id=_optional_str(data, "paymentIntentId"),
            payment_method=_optional_str(data, "paymentMethod"),
            hsa_provider=_optional_str(data, "hsaProvider"),
        )


@dataclass(frozen=True)
class PaymentRecord:
    """Processor metadata kept alongside a paid booking."""

    payment_intent_id: str
    payment_method: str
    timestamp: str

    @classmethod
    def create(cls, payment_intent_id: str, payment_method: str) -> "PaymentRecord":
        return cls(
            payment_intent_id=payment_intent_id,
            payment_method=payment_method,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "paymentIntentId": self.payment_intent_id,
            "paymentMethod": self.payment_method,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "PaymentRecord":
        if not isinstance(data, dict):
            raise ValueError("Payment data must be an object.")
        return cls(
            payment_intent_id=_require_str(data, "paymentIntentId"),
            payment_method=_require_str(data, "paymentMethod"),
            timestamp=_require_str(data, "timestamp"),
        )
