"""Patient sign-in for the storefront.

The storefront only needs an account to put a name on the Letter of Medical
Necessity, so these endpoints issue a bearer token and describe the patient.
"""
from __future__ import annotations

from datetime import datetime
from http import HTTPStatus

from flask import jsonify, request
from flask.typing import ResponseReturnValue
from flask_jwt_extended import create_access_token, get_jwt_identity, jwt_required

from storefront.app.accounts import patient_profile, user_for_identity
from storefront.app.models import User
from storefront.extensions import bcrypt, db

from . import api_bp


def _credentials() -> tuple[str, str]:
    payload = request.get_json(silent=True) or {}
    email = (payload.get("email") or "").strip().lower()
    password = payload.get("password") or ""
    return email, password


def _signed_in(user: User, status: HTTPStatus) -> ResponseReturnValue:
    token = create_access_token(identity=str(user.id))
    return jsonify(accessToken=token, patient=patient_profile(user)), status


@api_bp.post("/auth/register")
def register() -> ResponseReturnValue:
    """Create a patient account and sign it in."""

    email, password = _credentials()
    if not email or not password:
        return jsonify(message="Email and password are required."), HTTPStatus.BAD_REQUEST
    if User.query.filter_by(email=email).first():
        return jsonify(message="An account with this email already exists."), HTTPStatus.CONFLICT

    name = ((request.get_json(silent=True) or {}).get("name") or "").strip() or None
    user = User(
        email=email,
        password_hash=bcrypt.generate_password_hash(password).decode("utf-8"),
        full_name=name,
    )
    db.session.add(user)
    db.session.commit()
    return _signed_in(user, HTTPStatus.CREATED)


@api_bp.post("/auth/login")
def login() -> ResponseReturnValue:
    email, password = _credentials()
    if not email or not password:
        return jsonify(message="Email and password are required."), HTTPStatus.BAD_REQUEST

    user = User.query.filter_by(email=email).first()
    if user is None or not bcrypt.check_password_hash(user.password_hash, password):
        return jsonify(message="Invalid email or password."), HTTPStatus.UNAUTHORIZED
    if not user.is_active:
        return jsonify(message="This account has been deactivated."), HTTPStatus.FORBIDDEN

    user.last_login_at = datetime.utcnow()
    db.session.commit()
    return _signed_in(user, HTTPStatus.OK)


@api_bp.get("/auth/me")
@jwt_required()
def current_patient() -> ResponseReturnValue:
    """Describe the signed-in patient, including the name printed on letters."""

    user = user_for_identity(get_jwt_identity())
    if user is None or not user.is_active:
        return jsonify(message="Please sign in again."), HTTPStatus.UNAUTHORIZED
    return jsonify(patient=patient_profile(user)), HTTPStatus.OK
