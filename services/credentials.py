"""User records and password verification."""

from __future__ import annotations

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import User
from utils.errors import DuplicateEntity
from utils.request_validation import normalize_email


def find_by_email(email: str | None) -> User | None:
    """Case-insensitive lookup of a user by email address."""

    normalized = normalize_email(email)
    if not normalized:
        return None
    return User.query.filter(func.lower(User.email) == normalized).first()


def email_taken(email: str, exclude_user_id: int | None = None) -> bool:
    existing = find_by_email(email)
    return existing is not None and existing.id != exclude_user_id


def create_user(username: str, email: str, password: str) -> User:
    """Create an unverified account holding only a salted password hash.

    The caller commits. Raises ``DuplicateEntity`` when the email is taken.
    """

    email = normalize_email(email)
    if email_taken(email):
        raise DuplicateEntity("Email is used before")

    user = User(username=username.strip(), email=email)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.flush()
    except IntegrityError:
        # a concurrent registration claimed the email first
        db.session.rollback()
        raise DuplicateEntity("Email is used before")
    return user


def verify_credentials(email: str | None, password: str | None) -> User | None:
    """Return the user when the password matches, otherwise ``None``.

    Unknown emails and wrong passwords are indistinguishable to the caller.
    """

    user = find_by_email(email)
    if user is None or not password:
        return None
    if not user.check_password(password):
        current_app.logger.info("Password mismatch for user %s", user.id)
        return None
    return user
