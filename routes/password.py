"""Password reset blueprint."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from services import password_reset
from utils.request_validation import (
    clean_email,
    clean_password,
    parse_json_request,
    raise_for_errors,
)

password_bp = Blueprint("password", __name__)


@password_bp.route("/link", methods=["POST"])
def send_reset_link():
    """Email a password reset link to the account owner."""

    payload = parse_json_request(request)
    errors: dict[str, str] = {}
    email = clean_email(payload, errors)
    raise_for_errors(errors)

    password_reset.request_reset(email)
    return jsonify({"success": True, "message": "Password reset link sent successfully"})


@password_bp.route("/check/<int:user_id>/<token>", methods=["GET"])
def check_reset_token(user_id: int, token: str):
    """Confirm that a reset link can still be used."""

    password_reset.check_token(user_id, token)
    return jsonify({"success": True, "message": "Token is valid"})


@password_bp.route("/reset/<int:user_id>/<token>", methods=["POST"])
def reset_password(user_id: int, token: str):
    """Replace the password and consume the reset token."""

    payload = parse_json_request(request)
    errors: dict[str, str] = {}
    password = clean_password(payload, errors, strength=False)
    raise_for_errors(errors)

    password_reset.reset_password(user_id, token, password)
    return jsonify({"success": True, "message": "Password reset successfully"})
