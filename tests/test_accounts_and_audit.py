from __future__ import annotations

from http import HTTPStatus
import unittest

from storefront.app import create_app
from storefront.app.models import AuditLog, User
from storefront.extensions import bcrypt, db


class AccountsAuditTestCase(unittest.TestCase):
    """Validate account endpoints and the audit trail they leave."""

    def setUp(self) -> None:  # noqa: D401 - documented in base class
        self.app = create_app("testing")

        self.app_context = self.app.app_context()
        self.app_context.push()
        db.create_all()

        password = bcrypt.generate_password_hash("patient-pass").decode("utf-8")
        user = User(
            email="patient@example.com",
            password_hash=password,
            full_name="Pat Client",
        )
        db.session.add(user)
        db.session.commit()

        self.client = self.app.test_client()
        self.user = user

    def tearDown(self) -> None:  # noqa: D401 - documented in base class
        db.session.remove()
        db.drop_all()
        self.app_context.pop()

    def _login(self) -> str:
        response = self.client.post(
            "/api/auth/login",
            json={"email": self.user.email, "password": "patient-pass"},
        )
        self.assertEqual(response.status_code, HTTPStatus.OK, response.get_data(as_text=True))
        payload = response.get_json()
        assert payload is not None
        token = payload.get("accessToken")
        self.assertTrue(token)
        return token

    def test_register_signs_in_and_rejects_duplicate_email(self) -> None:
        payload = {"email": "New@Example.com", "password": "secret", "name": "New Patient"}
        response = self.client.post("/api/auth/register", json=payload)
        self.assertEqual(response.status_code, HTTPStatus.CREATED)
        body = response.get_json()
        self.assertTrue(body["accessToken"])
        self.assertEqual(body["patient"]["email"], "new@example.com")
        self.assertEqual(body["patient"]["name"], "New Patient")
        self.assertEqual(body["patient"]["lmnPatientName"], "new@example.com")

        duplicate = self.client.post("/api/auth/register", json=payload)
        self.assertEqual(duplicate.status_code, HTTPStatus.CONFLICT)

    def test_register_without_name(self) -> None:
        response = self.client.post(
            "/api/auth/register", json={"email": "quiet@example.com", "password": "secret"}
        )
        self.assertEqual(response.status_code, HTTPStatus.CREATED)
        self.assertIsNone(response.get_json()["patient"]["name"])

    def test_register_requires_fields(self) -> None:
        response = self.client.post("/api/auth/register", json={"email": "a@example.com"})
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)

    def test_login_records_audit_entry(self) -> None:
        token = self._login()

        logs = AuditLog.query.order_by(AuditLog.id).all()
        self.assertEqual(len(logs), 1)
        self.assertEqual(logs[0].action, "auth.login")
        self.assertEqual(logs[0].user_id, self.user.id)
        self.assertEqual(logs[0].entity_ref, str(self.user.id))
        self.assertEqual(len(logs[0].request_hash), 64)
        self.assertEqual(len(logs[0].response_hash), 64)

        me = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(me.status_code, HTTPStatus.OK)
        self.assertEqual(
            me.get_json()["patient"],
            {
                "id": self.user.id,
                "email": "patient@example.com",
                "name": "Pat Client",
                "lmnPatientName": "patient@example.com",
            },
        )

    def test_failed_login_is_not_audited(self) -> None:
        response = self.client.post(
            "/api/auth/login",
            json={"email": self.user.email, "password": "wrong"},
        )
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)
        self.assertEqual(AuditLog.query.count(), 0)

    def test_deactivated_account_cannot_log_in(self) -> None:
        self.user.is_active = False
        db.session.commit()

        response = self.client.post(
            "/api/auth/login",
            json={"email": self.user.email, "password": "patient-pass"},
        )
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_me_refuses_deactivated_account(self) -> None:
        token = self._login()
        self.user.is_active = False
        db.session.commit()

        me = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(me.status_code, HTTPStatus.UNAUTHORIZED)

    def test_lmn_uses_account_email_and_is_audited(self) -> None:
        token = self._login()
        body = {
            "provider": "healthequity",
            "serviceName": "Nutritional Counseling",
            "diagnosedConditions": ["Diabetes", "High Blood Pressure"],
        }

        response = self.client.post(
            "/api/lmn", json=body, headers={"Authorization": f"Bearer {token}"}
        )

        self.assertEqual(response.status_code, HTTPStatus.CREATED)
        lmn = response.get_json()["lmn"]
        self.assertEqual(lmn["patientName"], "patient@example.com")
        self.assertIn("Diabetes, High Blood Pressure", lmn["clinicalRationale"])

        entry = AuditLog.query.filter_by(action="lmn.generated").one()
        self.assertEqual(entry.user_id, self.user.id)
        self.assertEqual(entry.entity_ref, lmn["lmnId"])

    def test_anonymous_lmn_uses_placeholder_name(self) -> None:
        response = self.client.post(
            "/api/lmn",
            json={
                "provider": "optum",
                "serviceName": "Fitness Training Session",
                "diagnosedConditions": ["Obesity"],
            },
        )
        self.assertEqual(response.status_code, HTTPStatus.CREATED)
        payload = response.get_json()
        self.assertEqual(payload["lmn"]["patientName"], "Patient")
        self.assertTrue(payload["submission"].startswith("Please submit the LMN to Optum"))

    def test_lmn_rejects_unknown_provider(self) -> None:
        response = self.client.post(
            "/api/lmn",
            json={"provider": "acme", "serviceName": "Yoga", "diagnosedConditions": []},
        )
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertEqual(AuditLog.query.count(), 0)


class CatalogApiTestCase(unittest.TestCase):
    """Read-only catalog endpoints."""

    def setUp(self) -> None:
        self.app = create_app("testing")
        self.client = self.app.test_client()

    def test_list_services_filters(self) -> None:
        response = self.client.get("/api/services?category=Wellness&q=spa")
        payload = response.get_json()
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual([item["id"] for item in payload["services"]], ["2"])
        self.assertEqual(payload["categories"][0], "All")

    def test_unknown_service_is_not_found(self) -> None:
        self.assertEqual(self.client.get("/api/services/42").status_code, HTTPStatus.NOT_FOUND)

    def test_questionnaire_options_for_nutrition(self) -> None:
        payload = self.client.get("/api/services/3/questionnaire").get_json()
        self.assertEqual(payload["category"], "Nutritional Counseling")
        self.assertIn("Diabetes", payload["conditions"])

    def test_markers_without_maps_key(self) -> None:
        payload = self.client.get("/api/services/markers?category=Fitness").get_json()
        self.assertFalse(payload["mapsEnabled"])
        self.assertEqual([marker["id"] for marker in payload["markers"]], ["4"])

    def test_hsa_provider_directory(self) -> None:
        payload = self.client.get("/api/hsa-providers").get_json()
        codes = [provider["code"] for provider in payload["providers"]]
        self.assertEqual(codes, ["healthequity", "wex", "optum"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
