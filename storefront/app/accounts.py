"""Helpers for resolving the signed-in account, when there is one."""
from __future__ import annotations

from typing import Any

from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from storefront.app.models import User
from storefront.extensions import db

ANONYMOUS_PATIENT = "Patient"


def user_for_identity(identity: Any) -> User | None:
    """Load the user named by a token identity; ``None`` when it names nobody."""

    if identity is None:
        return None
    try:
        user_id = int(identity)
    except (TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


def optional_user() -> User | None:
    """Return the user behind a valid bearer token, ignoring bad tokens."""

    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return None
    return user_for_identity(get_jwt_identity())


def lmn_patient_name(user: User | None) -> str:
    if user is None or not user.is_active:
        return ANONYMOUS_PATIENT
    return user.email


def current_patient_name() -> str:
    """Name printed on generated letters: the account email, else a placeholder."""

    return lmn_patient_name(optional_user())


def patient_profile(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.full_name,
        "lmnPatientName": lmn_patient_name(user),
    }
