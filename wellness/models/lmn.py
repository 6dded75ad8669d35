"""Letter of Medical Necessity document generation."""
from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Sequence

from wellness.models.hsa import find_provider

_ID_ALPHABET = string.ascii_uppercase + string.digits

RATIONALE_TEMPLATE = (
    "Based on the patient's reported health conditions ({conditions}), this service is "
    "medically necessary to address their specific health concerns and improve their "
    "quality of life."
)


class UnknownProviderError(ValueError):
    """Raised when an LMN is requested for a provider outside the directory."""


def random_code(prefix: str, length: int = 9) -> str:
    """Return ``prefix`` followed by ``length`` upper-case alphanumerics."""

    return prefix + "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def clinical_rationale(conditions: Sequence[str]) -> str:
    return RATIONALE_TEMPLATE.format(conditions=", ".join(conditions))


@dataclass(frozen=True)
class LMNDocument:
    """A generated, unsigned letter. Lives only for the current response."""

    lmn_id: str
    provider: str
    patient_name: str
    service_name: str
    conditions: tuple[str, ...]
    clinical_rationale: str
    generated_at: datetime
    status: str = "generated"

    def to_dict(self) -> dict[str, Any]:
        return {
            "lmnId": self.lmn_id,
            "provider": self.provider,
            "patientName": self.patient_name,
            "serviceName": self.service_name,
            "conditions": list(self.conditions),
            "clinicalRationale": self.clinical_rationale,
            "generatedAt": self.generated_at.isoformat(),
            "status": self.status,
        }


def generate_lmn(
    *,
    provider_code: str,
    patient_name: str,
    service_name: str,
    conditions: Sequence[str],
    now: Callable[[], datetime] | None = None,
) -> LMNDocument:
    """Build an LMN for ``service_name`` citing the diagnosed ``conditions``."""

    if find_provider(provider_code) is None:
        raise UnknownProviderError(f"Unknown HSA provider: {provider_code!r}.")

    generated_at = (now or (lambda: datetime.now(timezone.utc)))()
    return LMNDocument(
        lmn_id=random_code("LMN-"),
        provider=provider_code,
        patient_name=patient_name or "Patient",
        service_name=service_name,
        conditions=tuple(conditions),
        clinical_rationale=clinical_rationale(conditions),
        generated_at=generated_at,
    )
