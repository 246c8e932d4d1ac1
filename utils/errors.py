"""HTTP error taxonomy shared by services and blueprints."""

from __future__ import annotations

from werkzeug.exceptions import (
    BadGateway,
    BadRequest,
    Conflict,
    Forbidden as _Forbidden,
    NotFound as _NotFound,
    Unauthorized,
)


class ValidationError(BadRequest):
    """Malformed or missing input, with a ``{field: message}`` map."""

    description = "Invalid request body"

    def __init__(self, errors: dict[str, str] | None = None, description: str | None = None):
        super().__init__(description=description)
        self.errors = dict(errors or {})


class InvalidCredentials(BadRequest):
    description = "Invalid email or password"


class TokenInvalid(BadRequest):
    description = "Invalid or expired token"


class AlreadyVerified(BadRequest):
    description = "Email is already verified"


class Unauthenticated(Unauthorized):
    description = "Authentication required"


class Forbidden(_Forbidden):
    description = "You do not have permission to perform this action"


class AccountBlocked(Forbidden):
    description = "Your account is blocked"


class EmailNotVerified(Forbidden):
    description = "Please verify your email first"


class NotFound(_NotFound):
    description = "Resource not found"


class DuplicateEntity(Conflict):
    description = "Resource already exists"


class UpstreamFailure(BadGateway):
    description = "An upstream service failed"
