"""Catalog endpoints backing the marketplace page."""
from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask.typing import ResponseReturnValue

from storefront.app.services.maps import maps_enabled
from wellness.models.catalog import ALL_CATEGORIES, categories, filter_services, get_service
from wellness.models.conditions import (
    ServiceCategory,
    conditions_for,
    risk_factor_prompt,
)

catalog_bp = Blueprint("catalog", __name__)


@catalog_bp.get("")
def list_services() -> ResponseReturnValue:
    """Return the listings matching the ``category`` and ``q`` filters."""

    category = request.args.get("category") or ALL_CATEGORIES
    search_text = (request.args.get("q") or "").strip()
    services = filter_services(category, search_text)
    return (
        jsonify(
            services=[service.to_dict() for service in services],
            categories=categories(),
            total=len(services),
        ),
        HTTPStatus.OK,
    )


@catalog_bp.get("/markers")
def service_markers() -> ResponseReturnValue:
    """Return map markers for the filtered listings, plus whether maps are configured."""

    category = request.args.get("category") or ALL_CATEGORIES
    search_text = (request.args.get("q") or "").strip()
    markers = [
        {
            "id": service.id,
            "name": service.name,
            "address": service.address,
            "price": service.price,
            "lat": service.coordinates.lat,
            "lng": service.coordinates.lng,
        }
        for service in filter_services(category, search_text)
    ]
    enabled = maps_enabled(current_app.config.get("GOOGLE_MAPS_API_KEY"))
    return jsonify(mapsEnabled=enabled, markers=markers), HTTPStatus.OK


@catalog_bp.get("/<service_id>")
def service_detail(service_id: str) -> ResponseReturnValue:
    service = get_service(service_id)
    if service is None:
        return jsonify(message="Service not found."), HTTPStatus.NOT_FOUND
    return jsonify(service.to_dict()), HTTPStatus.OK


@catalog_bp.get("/<service_id>/questionnaire")
def questionnaire_options(service_id: str) -> ResponseReturnValue:
    """Return the condition checklist and risk prompt for a listing."""

    service = get_service(service_id)
    if service is None:
        return jsonify(message="Service not found."), HTTPStatus.NOT_FOUND

    category = ServiceCategory.for_service_name(service.name)
    return (
        jsonify(
            serviceId=service.id,
            category=category.value,
            conditions=list(conditions_for(category)),
            riskFactorPrompt=risk_factor_prompt(category),
        ),
        HTTPStatus.OK,
    )
