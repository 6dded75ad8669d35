"""HSA provider directory and Letter of Medical Necessity endpoints."""
from __future__ import annotations

from http import HTTPStatus

from flask import current_app, jsonify, request
from flask.typing import ResponseReturnValue

from storefront.app.accounts import current_patient_name
from storefront.app.middleware import record_audit_entity
from storefront.app.services.booking_service import draft_letter
from wellness.models.hsa import HSA_PROVIDERS, find_provider, submission_message

from . import api_bp


@api_bp.get("/hsa-providers")
def hsa_providers() -> ResponseReturnValue:
    return jsonify(providers=[provider.to_dict() for provider in HSA_PROVIDERS]), HTTPStatus.OK


@api_bp.post("/lmn")
def lmn() -> ResponseReturnValue:
    """Generate a Letter of Medical Necessity for the posted booking details."""

    payload = request.get_json(silent=True) or {}
    provider_code = payload.get("provider")
    service_name = payload.get("serviceName")
    conditions = payload.get("diagnosedConditions")

    if not isinstance(service_name, str) or not service_name.strip():
        return jsonify(message="serviceName is required."), HTTPStatus.BAD_REQUEST
    if not isinstance(conditions, list) or not all(isinstance(item, str) for item in conditions):
        return (
            jsonify(message="diagnosedConditions must be a list of strings."),
            HTTPStatus.BAD_REQUEST,
        )

    provider = find_provider(provider_code)
    if provider is None:
        return jsonify(message="Please select your HSA provider"), HTTPStatus.BAD_REQUEST

    document = draft_letter(
        provider_code=provider.code,
        patient_name=current_patient_name(),
        service_name=service_name.strip(),
        conditions=conditions,
        delay_seconds=current_app.config.get("LMN_GENERATION_DELAY_SECONDS", 0),
    )

    record_audit_entity(document.lmn_id)
    return (
        jsonify(lmn=document.to_dict(), submission=submission_message(provider)),
        HTTPStatus.CREATED,
    )
