"""Single-use verification tokens for email confirmation and password reset.

A token is valid only while its row exists and has not expired. Successful
consumption deletes the row, so a second attempt with the same value fails.
Apart from purging expired rows, these helpers do not commit; the calling
service owns the transaction.
"""

from __future__ import annotations

import hmac
import secrets
from datetime import datetime, timedelta

from flask import current_app

from models import db
from models.verification_token import VerificationToken
from utils.errors import TokenInvalid

TOKEN_BYTES = 32


def _new_value() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def _expiry(now: datetime | None = None) -> datetime | None:
    hours = int(current_app.config.get("VERIFICATION_TOKEN_TTL_HOURS") or 0)
    if hours <= 0:
        return None
    return (now or datetime.utcnow()) + timedelta(hours=hours)


def issue(user_id: int) -> VerificationToken:
    """Create a fresh token for ``user_id``; existing tokens are left alone."""

    token = VerificationToken(user_id=user_id, token=_new_value(), expires_at=_expiry())
    db.session.add(token)
    db.session.flush()
    current_app.logger.info("Issued verification token %s for user %s", token.id, user_id)
    return token


def reissue_or_rotate(user_id: int) -> VerificationToken:
    """Overwrite the value of the user's existing token, or issue one."""

    token = (
        VerificationToken.query.filter_by(user_id=user_id)
        .order_by(VerificationToken.created_at.desc(), VerificationToken.id.desc())
        .first()
    )
    if token is None:
        return issue(user_id)

    token.token = _new_value()
    token.expires_at = _expiry()
    db.session.flush()
    current_app.logger.info("Rotated verification token %s for user %s", token.id, user_id)
    return token


def find(user_id: int, raw_token: str | None) -> VerificationToken | None:
    """Return the live token matching ``(user_id, raw_token)`` exactly.

    Expired matches are deleted at once, committed, and treated as absent.
    """

    candidate = (raw_token or "").strip()
    if not candidate:
        return None

    now = datetime.utcnow()
    match = None
    for token in VerificationToken.query.filter_by(user_id=user_id).all():
        if hmac.compare_digest(token.token.encode(), candidate.encode()):
            match = token
            break

    if match is not None and match.is_expired(now):
        current_app.logger.info("Discarding expired verification token %s", match.id)
        db.session.delete(match)
        db.session.commit()
        return None
    return match


def require(user_id: int, raw_token: str | None) -> VerificationToken:
    token = find(user_id, raw_token)
    if token is None:
        raise TokenInvalid()
    return token


def consume(user_id: int, raw_token: str | None) -> None:
    """Delete the matching token or raise ``TokenInvalid``."""

    token = require(user_id, raw_token)
    db.session.delete(token)
    db.session.flush()
    current_app.logger.info("Consumed verification token for user %s", user_id)
