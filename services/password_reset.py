"""Password reset links and password replacement."""

from __future__ import annotations

from flask import current_app
from markupsafe import escape

from models import db
from models.user import User
from services import credentials, tokens
from utils.errors import NotFound, UpstreamFailure
from utils.mailer import send_email

RESET_SUBJECT = "Password Reset Link"


def reset_link(user_id: int, token: str) -> str:
    base = current_app.config.get("CLIENT_URL", "").rstrip("/")
    return f"{base}/new-password/{user_id}/{token}"


def _get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def request_reset(email: str) -> None:
    """Rotate the user's token and email a reset link."""

    user = credentials.find_by_email(email)
    if user is None:
        raise NotFound("User not found")

    token = tokens.reissue_or_rotate(user.id)
    link = reset_link(user.id, token.token)
    db.session.commit()

    html = (
        f"<h1>Hello {escape(user.username)},</h1>"
        "<p>Click the link below to reset your password:</p>"
        f"<a href=\"{link}\">Reset Password</a>"
    )
    if not send_email(user.email, RESET_SUBJECT, html):
        raise UpstreamFailure("Failed to send email")
    current_app.logger.info("Password reset link sent to user %s", user.id)


def check_token(user_id: int, raw_token: str) -> None:
    """Raise unless the reset link is still usable. Does not consume."""

    user = _get_user(user_id)
    tokens.require(user.id, raw_token)


def reset_password(user_id: int, raw_token: str, new_password: str) -> User:
    user = _get_user(user_id)
    tokens.consume(user.id, raw_token)
    user.set_password(new_password)
    db.session.commit()
    current_app.logger.info("Password reset for user %s", user.id)
    return user
