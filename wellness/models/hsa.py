"""Static HSA/FSA administrator directory."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ContactInfo:
    phone: str
    email: str
    website: str


@dataclass(frozen=True)
class HSAProvider:
    """An HSA administrator and its Letter of Medical Necessity requirements."""

    name: str
    code: str
    lmn_required: bool
    lmn_format: str
    required_fields: tuple[str, ...]
    digital_submission: bool
    contact_info: ContactInfo
    api_endpoint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "code": self.code,
            "lmnRequired": self.lmn_required,
            "lmnFormat": self.lmn_format,
            "requiredFields": list(self.required_fields),
            "digitalSubmission": self.digital_submission,
            "contactInfo": {
                "phone": self.contact_info.phone,
                "email": self.contact_info.email,
                "website": self.contact_info.website,
            },
        }
        if self.api_endpoint:
            payload["apiEndpoint"] = self.api_endpoint
        return payload


HSA_PROVIDERS: tuple[HSAProvider, ...] = (
    HSAProvider(
        name="HealthEquity",
        code="healthequity",
        lmn_required=True,
        lmn_format="standard",
        required_fields=(
            "patient_name",
            "dob",
            "service_description",
            "icd10_code",
            "clinical_rationale",
            "provider_signature",
        ),
        digital_submission=True,
        api_endpoint="https://api.healthequity.com/lmn",
        contact_info=ContactInfo(
            phone="866-346-5800",
            email="support@healthequity.com",
            website="https://www.healthequity.com",
        ),
    ),
    HSAProvider(
        name="WEX",
        code="wex",
        lmn_required=True,
        lmn_format="custom",
        required_fields=(
            "patient_info",
            "service_details",
            "medical_necessity",
            "provider_info",
            "attestation",
        ),
        digital_submission=True,
        api_endpoint="https://api.wexinc.com/hsa/lmn",
        contact_info=ContactInfo(
            phone="877-934-6389",
            email="hsasupport@wexinc.com",
            website="https://www.wexinc.com",
        ),
    ),
    HSAProvider(
        name="Optum",
        code="optum",
        lmn_required=True,
        lmn_format="standard",
        required_fields=(
            "patient_name",
            "dob",
            "service_description",
            "icd10_code",
            "clinical_rationale",
            "provider_signature",
            "npi",
        ),
        digital_submission=False,
        contact_info=ContactInfo(
            phone="866-234-8913",
            email="hsasupport@optum.com",
            website="https://www.optum.com",
        ),
    ),
)

# Administrators offered on the checkout HSA/FSA payment path.
CHECKOUT_HSA_PROVIDERS: tuple[str, ...] = (
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
    "Unknown / Not listed",
)


def find_provider(code: str | None) -> HSAProvider | None:
    """Return the directory entry for ``code`` or ``None``."""

    for provider in HSA_PROVIDERS:
        if provider.code == code:
            return provider
    return None


def submission_message(provider: HSAProvider) -> str:
    """Return the acknowledgement shown after "Submit to HSA Provider"."""

    if provider.digital_submission:
        return (
            f"LMN submitted to {provider.name} via digital submission. "
            "You will receive confirmation via email."
        )
    return (
        f"Please submit the LMN to {provider.name} via {provider.contact_info.website} "
        f"or call {provider.contact_info.phone}"
    )
