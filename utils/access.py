"""Request-time authorization derived from the signed session credential."""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask import current_app, g
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from models import db
from models.user import User
from utils.errors import AccountBlocked, Forbidden, Unauthenticated


@dataclass(frozen=True)
class Caller:
    """Identity and role of the user behind the current request."""

    id: int
    username: str
    email: str
    is_admin: bool
    is_blocked: bool

    def owns(self, owner_id: int | None) -> bool:
        return owner_id is not None and self.id == owner_id


def session_claims(user: User) -> dict:
    """Claims embedded in the credential next to the ``sub`` identity."""

    return {
        "username": user.username,
        "email": user.email,
        "isAdmin": bool(user.is_admin),
        "isBlocked": bool(user.is_blocked),
    }


def _caller_from_claims(identity: int, claims: dict) -> Caller:
    return Caller(
        id=identity,
        username=claims.get("username", ""),
        email=claims.get("email", ""),
        is_admin=bool(claims.get("isAdmin")),
        is_blocked=bool(claims.get("isBlocked")),
    )


def _load_caller() -> Caller:
    # Missing, malformed and expired credentials are rendered by the JWT loaders.
    verify_jwt_in_request()

    try:
        identity = int(get_jwt_identity())
    except (TypeError, ValueError):
        raise Unauthenticated("Invalid or expired token")

    if not current_app.config.get("ACCESS_CONTROL_LIVE_STATE", True):
        return _caller_from_claims(identity, get_jwt())

    user = db.session.get(User, identity)
    if user is None:
        raise Unauthenticated("Account no longer exists")
    return Caller(
        id=user.id,
        username=user.username,
        email=user.email,
        is_admin=bool(user.is_admin),
        is_blocked=bool(user.is_blocked),
    )


def authenticate() -> Caller:
    """Resolve and cache the caller, rejecting blocked accounts."""

    caller = g.get("caller")
    if caller is None:
        caller = _load_caller()
        if caller.is_blocked:
            raise AccountBlocked("User is blocked")
        g.caller = caller
    return caller


def current_caller() -> Caller:
    return authenticate()


def require_authenticated(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        authenticate()
        return view(*args, **kwargs)

    return wrapper


def require_admin(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        caller = authenticate()
        if not caller.is_admin:
            raise Forbidden("Admin privileges required")
        return view(*args, **kwargs)

    return wrapper


def require_owner_or_admin(resource_owner_id: int | None) -> Caller:
    """Allow the resource owner or an administrator, otherwise ``Forbidden``."""

    caller = authenticate()
    if not (caller.owns(resource_owner_id) or caller.is_admin):
        raise Forbidden()
    return caller


def require_self_or_admin(view):
    """Owner-or-admin gate for routes addressing a user by ``user_id``."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        require_owner_or_admin(kwargs.get("user_id"))
        return view(*args, **kwargs)

    return wrapper
