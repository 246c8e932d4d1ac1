"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

import re
from typing import Iterable

from flask import Request, current_app
from werkzeug.datastructures import FileStorage

from utils.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_DIGIT = re.compile(r"[0-9]")
PASSWORD_SPECIAL = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise ValidationError(
            description="Request content type must be application/json."
        )

    data = req.get_json(silent=True)
    if data is None:
        raise ValidationError(description="Request JSON body is required.")

    if not isinstance(data, dict):
        raise ValidationError(description="Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise ValidationError(description="Request JSON body must not be empty.")

    if required_keys:
        missing = {key: f"{key} is required" for key in required_keys if not data.get(key)}
        if missing:
            raise ValidationError(missing)

    return data


def parse_body(req: Request, *, allow_empty: bool = False) -> dict:
    """Return JSON or form fields, for endpoints that also accept uploads."""

    if req.is_json:
        return parse_json_request(req, allow_empty=allow_empty)
    data = req.form.to_dict()
    if not data and not allow_empty and not req.files:
        raise ValidationError(description="Request body must not be empty.")
    return data


def clean_string(
    data: dict,
    field: str,
    errors: dict[str, str],
    *,
    label: str | None = None,
    required: bool = True,
    min_length: int = 1,
    max_length: int | None = None,
) -> str | None:
    """Trim ``data[field]`` and check its length, recording any problem in ``errors``."""

    label = label or field
    raw = data.get(field)
    if raw is None:
        if required:
            errors[field] = f"{label} is required"
        return None
    if not isinstance(raw, str):
        errors[field] = f"{label} must be a string"
        return None

    value = raw.strip()
    if not value:
        errors[field] = f"{label} is required" if required else f"{label} cannot be empty"
        return None
    if len(value) < min_length:
        errors[field] = f"{label} must be at least {min_length} characters"
        return None
    if max_length is not None and len(value) > max_length:
        errors[field] = f"{label} cannot exceed {max_length} characters"
        return None
    return value


def normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""

    return (raw_email or "").strip().lower()


def clean_email(data: dict, errors: dict[str, str], *, required: bool = True) -> str | None:
    value = clean_string(
        data, "email", errors, label="Email", required=required, min_length=3, max_length=100
    )
    if value is None:
        return None
    value = normalize_email(value)
    if not EMAIL_PATTERN.match(value):
        errors["email"] = "Email must be a valid format (e.g., user@example.com)"
        return None
    return value


def clean_password(
    data: dict,
    errors: dict[str, str],
    *,
    required: bool = True,
    strength: bool = True,
) -> str | None:
    """Validate a password; ``strength`` additionally demands a digit and a symbol."""

    value = clean_string(
        data, "password", errors, label="Password", required=required, min_length=6
    )
    if value is None:
        return None
    if strength and not (PASSWORD_DIGIT.search(value) and PASSWORD_SPECIAL.search(value)):
        errors["password"] = (
            "Password must include at least one number and one special character"
        )
        return None
    return value


def raise_for_errors(errors: dict[str, str]) -> None:
    if errors:
        raise ValidationError(errors)


def read_image_upload(req: Request, field: str = "image", *, required: bool = True) -> FileStorage | None:
    """Return the uploaded image file after checking type and size."""

    file = req.files.get(field)
    if not isinstance(file, FileStorage) or not (file.filename or "").strip():
        if required:
            raise ValidationError({field: "No file uploaded"})
        return None

    if not (file.mimetype or "").startswith("image"):
        raise ValidationError({field: "Only image formats are allowed"})

    max_size = int(current_app.config.get("MAX_IMAGE_SIZE", 5 * 1024 * 1024))
    file.stream.seek(0, 2)
    size = file.stream.tell()
    file.stream.seek(0)
    if size > max_size:
        raise ValidationError(
            {field: f"File exceeds the maximum upload size of {max_size // (1024 * 1024)}MB"}
        )
    return file


def parse_pagination(args, default_limit: int) -> tuple[int, int]:
    """Read ``page``/``limit`` query parameters, falling back on bad input."""

    def _positive(name: str, default: int) -> int:
        try:
            value = int(args.get(name, default))
        except (TypeError, ValueError):
            return default
        return value if value > 0 else default

    page = _positive("page", 1)
    limit = min(_positive("limit", default_limit), 100)
    return page, limit
