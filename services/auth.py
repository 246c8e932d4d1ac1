"""Registration, login and email verification."""

from __future__ import annotations

from flask import current_app
from flask_jwt_extended import create_access_token

from models import db
from models.user import User
from services import credentials, tokens
from utils.access import session_claims
from utils.errors import (
    AccountBlocked,
    AlreadyVerified,
    EmailNotVerified,
    InvalidCredentials,
    NotFound,
)
from utils.mailer import send_email

VERIFY_EMAIL_SUBJECT = "Verify Your Email"


def verification_link(user_id: int, token: str) -> str:
    base = current_app.config.get("CLIENT_URL", "").rstrip("/")
    return f"{base}/verify-email/{user_id}/verify/{token}"


def _verification_html(link: str) -> str:
    return (
        "<div style=\"font-family: Arial, sans-serif; max-width: 500px; margin: auto;\">"
        "<h2>Verify Your Email</h2>"
        "<p>Thanks for joining! Please confirm your email by clicking the link below:</p>"
        f"<p><a href=\"{link}\">Verify My Email</a></p>"
        f"<p>If the link does not work, paste this into your browser: {link}</p>"
        "<p>If you did not sign up, you can safely ignore this message.</p>"
        "</div>"
    )


def issue_session_credential(user: User) -> str:
    """Sign a credential carrying the user's identity, role and block flag."""

    return create_access_token(identity=str(user.id), additional_claims=session_claims(user))


def register(username: str, email: str, password: str) -> tuple[User, bool]:
    """Create an unverified user and email a verification link.

    Returns the user and whether the email went out. A failed send does not
    roll back the account.
    """

    user = credentials.create_user(username, email, password)
    token = tokens.issue(user.id)
    link = verification_link(user.id, token.token)
    db.session.commit()
    current_app.logger.info("Registered user %s", user.id)

    sent = send_email(user.email, VERIFY_EMAIL_SUBJECT, _verification_html(link))
    if not sent:
        current_app.logger.warning(
            "Verification email for user %s was not delivered", user.id
        )
    return user, sent


def login(email: str, password: str) -> tuple[User, str]:
    """Check credentials then account state, in that order."""

    user = credentials.verify_credentials(email, password)
    if user is None:
        current_app.logger.info("Failed login attempt")
        raise InvalidCredentials()
    if user.is_blocked:
        raise AccountBlocked("You are blocked")
    if not user.is_account_verified:
        raise EmailNotVerified()

    return user, issue_session_credential(user)


def verify_email(user_id: int, raw_token: str) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    if user.is_account_verified:
        raise AlreadyVerified()

    tokens.consume(user.id, raw_token)
    user.mark_verified()
    db.session.commit()
    current_app.logger.info("Verified email for user %s", user.id)
    return user
