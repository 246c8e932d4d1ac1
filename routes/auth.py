"""Authentication blueprint providing register, login and email verification."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, jsonify, request

from services import auth as auth_service
from utils.request_validation import (
    clean_email,
    clean_password,
    clean_string,
    parse_json_request,
    raise_for_errors,
)

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Register a new, unverified user and send the verification email."""
    payload = parse_json_request(request)

    errors: dict[str, str] = {}
    username = clean_string(
        payload, "username", errors, label="Username", min_length=2, max_length=200
    )
    email = clean_email(payload, errors)
    password = clean_password(payload, errors)
    raise_for_errors(errors)

    user, email_sent = auth_service.register(username, email, password)

    message = "We sent you an email, please check your inbox"
    if not email_sent:
        message = "Account created, but the verification email could not be sent"
    return (
        jsonify({"success": True, "message": message, "user": user.to_dict()}),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a user and return a signed session credential."""
    payload = parse_json_request(request)

    errors: dict[str, str] = {}
    email = clean_email(payload, errors)
    password = clean_password(payload, errors, strength=False)
    raise_for_errors(errors)

    user, token = auth_service.login(email, password)
    return (
        jsonify(
            {
                "success": True,
                "message": "User logged in successfully",
                "token": token,
                "user": user.to_dict(),
            }
        ),
        HTTPStatus.OK,
    )


@auth_bp.route("/<int:user_id>/verify/<token>", methods=["GET"])
def verify_email(user_id: int, token: str) -> tuple:
    """Consume an email verification token."""
    auth_service.verify_email(user_id, token)
    return (
        jsonify(
            {
                "success": True,
                "message": "Email verified successfully. You can now log in.",
            }
        ),
        HTTPStatus.OK,
    )
