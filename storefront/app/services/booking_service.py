"""Service functions threading a booking from questionnaire to certification."""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Sequence

from storefront.app.services.session_store import (
    SessionStorage,
    booking_slot,
    payment_slot,
)
from wellness.models.booking import BookingRecord, PaymentRecord
from wellness.models.catalog import ServiceListing
from wellness.models.lmn import LMNDocument, generate_lmn
from wellness.models.questionnaire import (
    QuestionnaireResponse,
    WizardStep,
    start,
    state_from_dict,
    state_to_dict,
)

LOGGER = logging.getLogger(__name__)

WIZARD_KEY = "questionnaireWizard"


@dataclass(slots=True)
class WizardSession:
    """An open questionnaire together with the slot the visitor picked."""

    service_id: str
    appointment_date: str
    appointment_time: str
    state: WizardStep

    def to_dict(self) -> dict[str, Any]:
        return {
            "serviceId": self.service_id,
            "appointmentDate": self.appointment_date,
            "appointmentTime": self.appointment_time,
            "wizard": state_to_dict(self.state),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "WizardSession":
        if not isinstance(data, dict):
            raise ValueError("Wizard session must be an object.")
        values = [data.get(key) for key in ("serviceId", "appointmentDate", "appointmentTime")]
        if not all(isinstance(value, str) for value in values):
            raise ValueError("Wizard session is missing its appointment details.")
        return cls(*values, state=state_from_dict(data.get("wizard")))


def open_wizard(
    storage: SessionStorage, service: ServiceListing, appointment_date: str, appointment_time: str
) -> WizardSession:
    """Start a fresh questionnaire for ``service`` and remember it."""

    wizard = WizardSession(
        service_id=service.id,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        state=start(),
    )
    save_wizard(storage, wizard)
    return wizard


def load_wizard(storage: SessionStorage, service_id: str) -> WizardSession | None:
    """Return the open wizard for ``service_id``; unreadable state counts as none."""

    raw = storage.get_item(WIZARD_KEY)
    if raw is None:
        return None
    try:
        wizard = WizardSession.from_dict(json.loads(raw))
    except (ValueError, TypeError) as exc:
        LOGGER.warning("Discarding unreadable questionnaire state: %s", exc)
        storage.remove_item(WIZARD_KEY)
        return None
    if wizard.service_id != service_id:
        return None
    return wizard


def save_wizard(storage: SessionStorage, wizard: WizardSession) -> None:
    storage.set_item(WIZARD_KEY, json.dumps(wizard.to_dict()))


def discard_wizard(storage: SessionStorage) -> None:
    storage.remove_item(WIZARD_KEY)


def submit_booking(
    storage: SessionStorage,
    service: ServiceListing,
    appointment_date: str,
    appointment_time: str,
    response: QuestionnaireResponse,
) -> BookingRecord:
    """Write the booking slot from a completed questionnaire.

    Any earlier booking or payment in the session is replaced.
    """

    booking = BookingRecord(
        service_id=service.id,
        service_name=service.name,
        service_price=service.price,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        questionnaire=response,
    )
    booking_slot(storage).set(booking)
    payment_slot(storage).clear()
    discard_wizard(storage)
    return booking


def record_payment(
    storage: SessionStorage,
    booking: BookingRecord,
    *,
    payment_intent_id: str,
    payment_method: str,
    hsa_provider: str | None = None,
) -> BookingRecord:
    """Append payment details to the stored booking and keep a payment record."""

    paid = booking.with_payment(
        payment_intent_id=payment_intent_id,
        payment_method=payment_method,
        hsa_provider=hsa_provider,
    )
    booking_slot(storage).set(paid)
    payment_slot(storage).set(PaymentRecord.create(payment_intent_id, payment_method))
    LOGGER.info("Payment %s recorded for service %s", payment_intent_id, booking.service_id)
    return paid


def clear_booking(storage: SessionStorage) -> None:
    """Tear down the session's booking and payment slots."""

    booking_slot(storage).clear()
    payment_slot(storage).clear()


def draft_letter(
    *,
    provider_code: str,
    patient_name: str,
    service_name: str,
    conditions: Sequence[str],
    delay_seconds: float = 0,
) -> LMNDocument:
    """Generate an LMN after the configured processing delay."""

    if delay_seconds > 0:
        time.sleep(delay_seconds)
    document = generate_lmn(
        provider_code=provider_code,
        patient_name=patient_name,
        service_name=service_name,
        conditions=conditions,
    )
    LOGGER.info("Generated %s for %s", document.lmn_id, provider_code)
    return document


def prepare_lmn(
    booking: BookingRecord,
    *,
    provider_code: str,
    patient_name: str,
    delay_seconds: float = 0,
) -> LMNDocument:
    """Generate the LMN citing the conditions diagnosed in ``booking``."""

    return draft_letter(
        provider_code=provider_code,
        patient_name=patient_name,
        service_name=booking.service_name,
        conditions=booking.questionnaire.diagnosed_conditions,
        delay_seconds=delay_seconds,
    )
