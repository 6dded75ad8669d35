"""Static health-intake reference data keyed by service category."""
from __future__ import annotations

from enum import Enum


class ServiceCategory(str, Enum):
    """Closed set of service kinds with tailored questionnaire content."""

    NUTRITIONAL_COUNSELING = "Nutritional Counseling"
    THERAPEUTIC_MASSAGE = "Therapeutic Massage"
    STRETCHING_MOBILITY = "Stretching & Mobility Session"
    YOGA_THERAPY = "Yoga Therapy Session"
    PILATES_REHABILITATION = "Pilates Rehabilitation"
    CHIROPRACTIC_ADJUSTMENT = "Chiropractic Adjustment"
    ACUPUNCTURE_TREATMENT = "Acupuncture Treatment"
    FITNESS_TRAINING = "Fitness Training Session"
    GENERAL = "General Wellness"

    @classmethod
    def for_service_name(cls, service_name: str | None) -> "ServiceCategory":
        """Return the category for a service name, or ``GENERAL`` when unmapped."""

        name = (service_name or "").strip()
        for category in cls:
            if category is not cls.GENERAL and category.value == name:
                return category
        return cls.GENERAL


_CONDITIONS: dict[ServiceCategory, tuple[str, ...]] = {
    ServiceCategory.NUTRITIONAL_COUNSELING: (
        "Diabetes",
        "High Blood Pressure",
        "Heart Disease",
        "Obesity",
        "High Cholesterol",
        "Metabolic Syndrome",
        "Digestive Issues",
        "Food Allergies",
        "Eating Disorders",
    ),
    ServiceCategory.THERAPEUTIC_MASSAGE: (
        "Back Pain",
        "Neck Pain",
        "Muscle Tension",
        "Stress",
        "Anxiety",
        "Headaches",
        "Sciatica",
        "Fibromyalgia",
        "Arthritis",
        "Sports Injuries",
    ),
    ServiceCategory.STRETCHING_MOBILITY: (
        "Limited Mobility",
        "Joint Stiffness",
        "Posture Issues",
        "Back Pain",
        "Neck Pain",
        "Arthritis",
        "Sports Injuries",
        "Recovery from Surgery",
        "Chronic Pain",
    ),
    ServiceCategory.YOGA_THERAPY: (
        "Anxiety",
        "Depression",
        "Stress",
        "Back Pain",
        "Balance Issues",
        "Flexibility Issues",
        "Chronic Pain",
        "Sleep Disorders",
        "High Blood Pressure",
        "Arthritis",
    ),
    ServiceCategory.PILATES_REHABILITATION: (
        "Back Pain",
        "Posture Issues",
        "Core Weakness",
        "Injury Recovery",
        "Arthritis",
        "Limited Mobility",
        "Balance Issues",
        "Chronic Pain",
        "Sports Injuries",
    ),
    ServiceCategory.CHIROPRACTIC_ADJUSTMENT: (
        "Back Pain",
        "Neck Pain",
        "Headaches",
        "Sciatica",
        "Joint Pain",
        "Posture Issues",
        "Sports Injuries",
        "Chronic Pain",
        "Limited Mobility",
    ),
    ServiceCategory.ACUPUNCTURE_TREATMENT: (
        "Chronic Pain",
        "Anxiety",
        "Depression",
        "Migraines",
        "Digestive Issues",
        "Insomnia",
        "Stress",
        "Arthritis",
        "Fibromyalgia",
        "Allergies",
    ),
    ServiceCategory.FITNESS_TRAINING: (
        "Obesity",
        "High Blood Pressure",
        "Diabetes",
        "Heart Disease",
        "High Cholesterol",
        "Metabolic Syndrome",
        "Muscle Weakness",
        "Balance Issues",
        "Limited Mobility",
    ),
    ServiceCategory.GENERAL: (
        "Back Pain",
        "Neck Pain",
        "Headaches",
        "Stress",
        "Anxiety",
        "Chronic Pain",
        "Diabetes",
        "High Blood Pressure",
        "Heart Disease",
        "Arthritis",
    ),
}

DEFAULT_RISK_FACTOR_PROMPT = (
    "Tell us about any risk factors you know of, and why you want to prevent these conditions."
)

_RISK_FACTOR_PROMPTS: dict[ServiceCategory, str] = {
    ServiceCategory.NUTRITIONAL_COUNSELING: (
        "Tell us about any risk factors for diabetes, heart disease, or metabolic "
        "conditions (family history, lifestyle factors, etc.)"
    ),
    ServiceCategory.THERAPEUTIC_MASSAGE: (
        "Tell us about any risk factors for chronic pain, stress-related conditions, "
        "or musculoskeletal issues"
    ),
    ServiceCategory.YOGA_THERAPY: (
        "Tell us about any risk factors for anxiety, depression, stress, or physical limitations"
    ),
    ServiceCategory.PILATES_REHABILITATION: (
        "Tell us about any risk factors for back pain, posture issues, or injury recurrence"
    ),
    ServiceCategory.CHIROPRACTIC_ADJUSTMENT: (
        "Tell us about any risk factors for spinal issues, chronic pain, or musculoskeletal problems"
    ),
    ServiceCategory.ACUPUNCTURE_TREATMENT: (
        "Tell us about any risk factors for chronic pain, stress, or conditions that may "
        "benefit from acupuncture"
    ),
}

HSA_PROVIDER_OPTIONS: tuple[str, ...] = (
    "Unknown / Not listed",
    "HealthEquity",
    "WEX",
    "Optum",
    "Bank of America",
    "Fidelity",
    "FSAFEDS",
    "HealthTrust",
    "Navia",
    "Lively",
    "Thatch",
    "P&A Group",
    "PIOPAC Fidelity",
    "Melody Benefit",
)

US_STATES: tuple[str, ...] = (
    "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado", "Connecticut",
    "Delaware", "Florida", "Georgia", "Hawaii", "Idaho", "Illinois", "Indiana", "Iowa",
    "Kansas", "Kentucky", "Louisiana", "Maine", "Maryland", "Massachusetts", "Michigan",
    "Minnesota", "Mississippi", "Missouri", "Montana", "Nebraska", "Nevada", "New Hampshire",
    "New Jersey", "New Mexico", "New York", "North Carolina", "North Dakota", "Ohio",
    "Oklahoma", "Oregon", "Pennsylvania", "Rhode Island", "South Carolina", "South Dakota",
    "Tennessee", "Texas", "Utah", "Vermont", "Virginia", "Washington", "West Virginia",
    "Wisconsin", "Wyoming",
)

ATTESTATION_STATEMENT = (
    "I attest that I am receiving this service/product primarily for the purpose of curing, "
    "mitigating, treating, or preventing the diagnosed medical condition(s) I have identified. "
    "I further affirm that I would not obtain these service(s) in the absence of such medical "
    "condition(s), and that this request is consistent with the medical necessity determination "
    "provided by a licensed healthcare provider."
)


def conditions_for(category: ServiceCategory) -> tuple[str, ...]:
    """Return the selectable conditions for ``category``."""

    return _CONDITIONS[category]


def conditions_for_service(service_name: str | None) -> tuple[str, ...]:
    return conditions_for(ServiceCategory.for_service_name(service_name))


def risk_factor_prompt(category: ServiceCategory) -> str:
    """Return the step-6 prompt, falling back to the generic wording."""

    return _RISK_FACTOR_PROMPTS.get(category, DEFAULT_RISK_FACTOR_PROMPT)
