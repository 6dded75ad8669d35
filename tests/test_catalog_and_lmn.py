from __future__ import annotations

from datetime import datetime, timezone
import unittest

from storefront.app.services.maps import maps_enabled
from wellness.models.catalog import categories, filter_services, get_service
from wellness.models.conditions import (
    DEFAULT_RISK_FACTOR_PROMPT,
    ServiceCategory,
    conditions_for,
    conditions_for_service,
    risk_factor_prompt,
)
from wellness.models.hsa import find_provider, submission_message
from wellness.models.lmn import UnknownProviderError, clinical_rationale, generate_lmn


class CatalogTests(unittest.TestCase):
    def test_categories_start_with_all(self) -> None:
        self.assertEqual(categories(), ["All", "Wellness", "Nutrition", "Fitness"])

    def test_filter_by_category_and_text(self) -> None:
        wellness = filter_services("Wellness")
        self.assertEqual([service.id for service in wellness], ["1", "2"])

        matches = filter_services("All", "NUTRITION")
        self.assertEqual([service.id for service in matches], ["3"])

        self.assertEqual(filter_services("Fitness", "spa"), [])

    def test_unknown_service_is_none(self) -> None:
        self.assertIsNone(get_service("999"))

    def test_maps_key_placeholders_disable_maps(self) -> None:
        self.assertFalse(maps_enabled(None))
        self.assertFalse(maps_enabled("your_google_maps_api_key_here"))
        self.assertTrue(maps_enabled("AIzaRealLookingKey"))


class ConditionTableTests(unittest.TestCase):
    def test_unmapped_service_falls_back_to_general(self) -> None:
        self.assertIs(ServiceCategory.for_service_name("Tension-Intervention"), ServiceCategory.GENERAL)
        self.assertIs(ServiceCategory.for_service_name(None), ServiceCategory.GENERAL)
        self.assertEqual(
            conditions_for_service("Tension-Intervention"), conditions_for(ServiceCategory.GENERAL)
        )

    def test_every_category_has_conditions(self) -> None:
        for category in ServiceCategory:
            self.assertTrue(conditions_for(category), category)

    def test_nutrition_lists_diabetes(self) -> None:
        self.assertIn("Diabetes", conditions_for_service("Nutritional Counseling"))

    def test_general_uses_default_risk_prompt(self) -> None:
        self.assertEqual(risk_factor_prompt(ServiceCategory.GENERAL), DEFAULT_RISK_FACTOR_PROMPT)


class LetterOfMedicalNecessityTests(unittest.TestCase):
    def test_rationale_joins_conditions(self) -> None:
        rationale = clinical_rationale(["Diabetes", "High Blood Pressure"])
        self.assertIn("Diabetes, High Blood Pressure", rationale)
        self.assertTrue(rationale.startswith("Based on the patient's reported health conditions ("))

    def test_generate_lmn_populates_document(self) -> None:
        fixed = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
        document = generate_lmn(
            provider_code="healthequity",
            patient_name="",
            service_name="Nutritional Counseling",
            conditions=["Diabetes", "High Blood Pressure"],
            now=lambda: fixed,
        )

        self.assertRegex(document.lmn_id, r"^LMN-[A-Z0-9]{9}$")
        self.assertEqual(document.patient_name, "Patient")
        self.assertEqual(document.status, "generated")
        payload = document.to_dict()
        self.assertEqual(payload["generatedAt"], fixed.isoformat())
        self.assertEqual(payload["conditions"], ["Diabetes", "High Blood Pressure"])

    def test_unknown_provider_is_rejected(self) -> None:
        with self.assertRaises(UnknownProviderError):
            generate_lmn(
                provider_code="acme",
                patient_name="Patient",
                service_name="Nutritional Counseling",
                conditions=["Diabetes"],
            )

    def test_submission_messages(self) -> None:
        healthequity = find_provider("healthequity")
        optum = find_provider("optum")
        assert healthequity is not None and optum is not None

        self.assertEqual(
            submission_message(healthequity),
            "LMN submitted to HealthEquity via digital submission. "
            "You will receive confirmation via email.",
        )
        self.assertEqual(
            submission_message(optum),
            "Please submit the LMN to Optum via https://www.optum.com or call 866-234-8913",
        )


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
