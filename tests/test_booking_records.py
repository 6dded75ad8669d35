from __future__ import annotations

from datetime import date, datetime, timedelta
import json
import unittest

from flask import session

from storefront.app import create_app
from storefront.app.models import SessionItem
from storefront.app.services.booking_service import clear_booking, record_payment, submit_booking
from storefront.app.services.session_store import (
    BOOKING_KEY,
    PAYMENT_KEY,
    SESSION_TOKEN_KEY,
    DatabaseSessionStorage,
    InMemoryStorage,
    booking_slot,
    payment_slot,
    purge_idle_items,
)
from storefront.extensions import db
from wellness.models.booking import (
    CARD,
    HSA,
    HSA_SIMULATED_INTENT_ID,
    AlreadyPaidError,
    BookingRecord,
    amount_in_minor_units,
    parse_appointment_date,
)
from wellness.models.catalog import get_service
from wellness.models.questionnaire import QuestionnaireResponse


def make_response() -> QuestionnaireResponse:
    return QuestionnaireResponse(
        age="34",
        hsa_provider="HealthEquity",
        state_of_residence="New York",
        diagnosed_conditions=("Back Pain",),
        conditions_preventing=("Back Pain",),
        attestation=True,
    )


def make_booking(**overrides) -> BookingRecord:
    values = dict(
        service_id="1",
        service_name="Tension-Intervention",
        service_price=225.0,
        appointment_date="2026-11-02",
        appointment_time="10:00 AM",
        questionnaire=make_response(),
    )
    values.update(overrides)
    return BookingRecord(**values)


class BookingRecordTests(unittest.TestCase):
    """Serialization and payment augmentation of the session booking."""

    def test_round_trip_through_storage(self) -> None:
        storage = InMemoryStorage()
        booking = make_booking()
        booking_slot(storage).set(booking)

        self.assertEqual(booking_slot(storage).get(), booking)
        stored = json.loads(storage.items[BOOKING_KEY])
        self.assertEqual(stored["serviceId"], "1")
        self.assertEqual(stored["healthQuestionnaireData"]["diagnosedConditions"], ["Back Pain"])
        self.assertNotIn("paymentIntentId", stored)

    def test_augmentation_only_adds_payment_fields(self) -> None:
        booking = make_booking()
        before = booking.to_dict()
        paid = booking.with_payment(
            payment_intent_id=HSA_SIMULATED_INTENT_ID,
            payment_method=HSA,
            hsa_provider="HealthEquity",
        )
        after = paid.to_dict()

        for key, value in before.items():
            self.assertEqual(after[key], value)
        self.assertEqual(
            set(after) - set(before), {"paymentIntentId", "paymentMethod", "hsaProvider"}
        )

    def test_card_payment_omits_hsa_provider(self) -> None:
        paid = make_booking().with_payment(payment_intent_id="pi_123", payment_method=CARD)
        self.assertNotIn("hsaProvider", paid.to_dict())

    def test_payment_recorded_only_once(self) -> None:
        paid = make_booking().with_payment(payment_intent_id="pi_123", payment_method=CARD)
        with self.assertRaises(AlreadyPaidError):
            paid.with_payment(payment_intent_id="pi_456", payment_method=CARD)

    def test_hsa_payment_requires_provider(self) -> None:
        with self.assertRaises(ValueError):
            make_booking().with_payment(payment_intent_id=HSA_SIMULATED_INTENT_ID, payment_method=HSA)

    def test_amount_in_minor_units_rounds_half_up(self) -> None:
        self.assertEqual(amount_in_minor_units(225.0), 22500)
        self.assertEqual(amount_in_minor_units(0.01), 1)
        self.assertEqual(amount_in_minor_units(19.995), 2000)

    def test_from_dict_rejects_boolean_price(self) -> None:
        payload = make_booking().to_dict()
        payload["servicePrice"] = True
        with self.assertRaises(ValueError):
            BookingRecord.from_dict(payload)


class SessionSlotTests(unittest.TestCase):
    """Behaviour of the JSON slots kept in session storage."""

    def test_malformed_json_reads_as_absent(self) -> None:
        storage = InMemoryStorage({BOOKING_KEY: "{not json"})
        with self.assertLogs("storefront.app.services.session_store", level="ERROR"):
            self.assertIsNone(booking_slot(storage).get())

    def test_invalid_record_reads_as_absent(self) -> None:
        storage = InMemoryStorage({BOOKING_KEY: json.dumps({"serviceId": "1"})})
        with self.assertLogs("storefront.app.services.session_store", level="ERROR"):
            self.assertIsNone(booking_slot(storage).get())

    def test_submit_replaces_previous_booking_and_payment(self) -> None:
        storage = InMemoryStorage()
        service = get_service("3")
        assert service is not None
        first = submit_booking(storage, service, "2026-11-02", "9:00 AM", make_response())
        record_payment(storage, first, payment_intent_id="pi_1", payment_method=CARD)
        self.assertIn(PAYMENT_KEY, storage.items)

        second = submit_booking(storage, service, "2026-11-03", "1:00 PM", make_response())

        self.assertEqual(booking_slot(storage).get(), second)
        self.assertIsNone(payment_slot(storage).get())

    def test_record_payment_writes_both_slots(self) -> None:
        storage = InMemoryStorage()
        booking = make_booking()
        booking_slot(storage).set(booking)

        record_payment(
            storage,
            booking,
            payment_intent_id=HSA_SIMULATED_INTENT_ID,
            payment_method=HSA,
            hsa_provider="WEX",
        )

        stored = booking_slot(storage).get()
        assert stored is not None
        self.assertEqual(stored.payment_intent_id, HSA_SIMULATED_INTENT_ID)
        self.assertEqual(stored.hsa_provider, "WEX")
        payment = payment_slot(storage).get()
        assert payment is not None
        self.assertEqual(payment.payment_method, HSA)

    def test_clear_booking_removes_both_slots(self) -> None:
        storage = InMemoryStorage()
        booking = make_booking()
        booking_slot(storage).set(booking)
        record_payment(storage, booking, payment_intent_id="pi_1", payment_method=CARD)

        clear_booking(storage)

        self.assertEqual(storage.items, {})



class AppointmentDateTests(unittest.TestCase):
    def test_today_and_later_are_accepted(self) -> None:
        today = date(2026, 10, 18)
        self.assertEqual(parse_appointment_date("2026-10-18", today), today)
        self.assertEqual(parse_appointment_date(" 2026-11-02 ", today), date(2026, 11, 2))

    def test_past_date_is_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, "cannot be in the past"):
            parse_appointment_date("2026-10-17", date(2026, 10, 18))

    def test_malformed_date_is_rejected(self) -> None:
        for value in ("next tuesday", "2026-13-01", "11/02/2026"):
            with self.subTest(value=value):
                with self.assertRaisesRegex(ValueError, "valid appointment date"):
                    parse_appointment_date(value, date(2026, 10, 18))


class DatabaseSessionStorageTests(unittest.TestCase):
    """Booking slots kept server-side, keyed by a token in the cookie."""

    def setUp(self) -> None:  # noqa: D401 - documented in base class
        self.app = create_app("testing")
        self.app_context = self.app.app_context()
        self.app_context.push()
        db.create_all()

    def tearDown(self) -> None:  # noqa: D401 - documented in base class
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def test_reads_nothing_before_first_write(self) -> None:
        with self.app.test_request_context():
            storage = DatabaseSessionStorage()
            self.assertIsNone(storage.get_item(BOOKING_KEY))
            storage.remove_item(BOOKING_KEY)
            self.assertNotIn(SESSION_TOKEN_KEY, session)

    def test_session_carries_only_a_token(self) -> None:
        with self.app.test_request_context():
            storage = DatabaseSessionStorage()
            booking_slot(storage).set(make_booking())
            booking_slot(storage).set(make_booking(appointment_time="1:00 PM"))

            self.assertEqual(list(session.keys()), [SESSION_TOKEN_KEY])
            stored = booking_slot(storage).get()
            assert stored is not None
            self.assertEqual(stored.appointment_time, "1:00 PM")
            self.assertEqual(SessionItem.query.count(), 1)

            booking_slot(storage).clear()
            self.assertIsNone(booking_slot(storage).get())
            self.assertEqual(SessionItem.query.count(), 0)

    def test_visitors_do_not_share_items(self) -> None:
        with self.app.test_request_context():
            booking_slot(DatabaseSessionStorage()).set(make_booking())
        with self.app.test_request_context():
            self.assertIsNone(booking_slot(DatabaseSessionStorage()).get())

    def test_purge_removes_idle_items(self) -> None:
        now = datetime(2026, 10, 18, 12, 0)
        db.session.add_all(
            [
                SessionItem(
                    session_token="stale",
                    key=BOOKING_KEY,
                    value="{}",
                    updated_at=now - timedelta(hours=30),
                ),
                SessionItem(
                    session_token="fresh",
                    key=BOOKING_KEY,
                    value="{}",
                    updated_at=now - timedelta(hours=1),
                ),
            ]
        )
        db.session.commit()

        self.assertEqual(purge_idle_items(timedelta(hours=24), now=now), 1)
        self.assertEqual(
            [item.session_token for item in SessionItem.query.all()], ["fresh"]
        )


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
