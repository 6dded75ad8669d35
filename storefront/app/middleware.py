"""Application middleware utilities such as audit logging."""
from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any

from flask import Flask, current_app, g, request
from sqlalchemy.exc import SQLAlchemyError

from storefront.app.accounts import optional_user
from storefront.app.models import AuditLog, User
from storefront.extensions import db


@dataclass(slots=True)
class _AuditConfig:
    action: str
    entity_type: str


SIGNIFICANT_ACTIONS: dict[tuple[str, str], _AuditConfig] = {
    ("POST", "api.login"): _AuditConfig(
        action="auth.login",
        entity_type="user",
    ),
    ("POST", "frontend.questionnaire"): _AuditConfig(
        action="booking.submitted",
        entity_type="booking",
    ),
    ("POST", "frontend.checkout_hsa"): _AuditConfig(
        action="booking.paid",
        entity_type="payment",
    ),
    ("POST", "frontend.checkout_complete"): _AuditConfig(
        action="booking.paid",
        entity_type="payment",
    ),
    ("POST", "frontend.certification"): _AuditConfig(
        action="lmn.generated",
        entity_type="lmn",
    ),
    ("POST", "api.lmn"): _AuditConfig(
        action="lmn.generated",
        entity_type="lmn",
    ),
}


def record_audit_entity(entity_ref: str, description: str | None = None) -> None:
    """Attach the affected entity to the current request's audit entry.

    Only requests that set an entity are written; a questionnaire step that
    merely advances the wizard is not an auditable booking submission.
    """

    context: dict[str, Any] | None = getattr(g, "audit_context", None)
    if not context:
        return
    context["entity_ref"] = entity_ref
    if description:
        context["description"] = description


def register_audit_middleware(app: Flask) -> None:
    """Attach middleware that records audit logs for significant actions."""

    @app.before_request
    def _capture_audit_context() -> None:
        method = request.method.upper()
        config = SIGNIFICANT_ACTIONS.get((method, request.endpoint or ""))
        if not config:
            g.audit_context = None
            return

        request_bytes = request.get_data(cache=True) or b""
        g.audit_context = {
            "config": config,
            "method": method,
            "path": _normalize_path(request.path),
            "request_bytes": request_bytes,
            "entity_ref": None,
            "description": None,
        }

    @app.after_request
    def _persist_audit_log(response):
        context: dict[str, Any] | None = getattr(g, "audit_context", None)
        if not context:
            return response

        if response.status_code >= 400:
            return response

        config: _AuditConfig = context["config"]
        user = _resolve_user(config.action, context["request_bytes"])
        entity_ref = context.get("entity_ref")
        if config.action == "auth.login" and user:
            entity_ref = str(user.id)
        if entity_ref is None:
            return response

        description = context.get("description") or _default_description(
            config.action, user, entity_ref
        )

        audit_log = AuditLog(
            user_id=user.id if user else None,
            entity_type=config.entity_type,
            entity_ref=entity_ref,
            action=config.action,
            description=description,
            method=context["method"],
            path=context["path"],
            request_hash=_hash_request(
                context["method"], context["path"], context["request_bytes"]
            ),
            response_hash=_hash_response(response),
        )

        db.session.add(audit_log)
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Failed to persist audit log entry")

        return response


def _normalize_path(path: str) -> str:
    if path != "/" and path.endswith("/"):
        return path[:-1]
    return path


def _resolve_user(action: str, request_bytes: bytes) -> User | None:
    user = optional_user()
    if user:
        return user

    if action == "auth.login":
        try:
            payload = json.loads(request_bytes.decode("utf-8") or "{}")
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        email = (payload.get("email") or "").strip().lower()
        if not email:
            return None
        return User.query.filter_by(email=email).first()

    return None


def _default_description(action: str, user: User | None, entity_ref: str) -> str | None:
    if action == "auth.login" and user:
        return f"User {user.email} authenticated successfully."
    if action == "booking.submitted":
        return f"Booking for service {entity_ref} submitted from questionnaire."
    if action == "booking.paid":
        return f"Payment {entity_ref} recorded for booking."
    if action == "lmn.generated":
        return f"Letter of Medical Necessity {entity_ref} generated."
    return None


def _hash_request(method: str, path: str, body: bytes) -> str:
    payload = f"{method}\n{path}\n".encode("utf-8") + body
    return hashlib.sha256(payload).hexdigest()


def _hash_response(response) -> str:
    body = response.get_data() or b""
    payload = f"{response.status_code}\n".encode("utf-8") + body
    return hashlib.sha256(payload).hexdigest()
