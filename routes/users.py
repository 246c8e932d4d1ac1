"""Users blueprint: profiles, admin moderation and account deletion."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from models import db
from models.user import User
from services.cascade import purge_user
from services.content import commit_unique, commit_with_image, get_or_404, paginate
from services.credentials import email_taken
from storage import delete_image, upload_image
from utils.access import current_caller, require_admin, require_authenticated, require_self_or_admin
from utils.errors import AlreadyVerified, DuplicateEntity, ValidationError
from utils.request_validation import (
    clean_email,
    clean_password,
    clean_string,
    parse_json_request,
    parse_pagination,
    raise_for_errors,
    read_image_upload,
)

users_bp = Blueprint("users", __name__)

UPDATABLE_FIELDS = {"username", "email", "password", "bio"}


def _profile_payload(user: User) -> dict:
    data = user.to_dict()
    data["posts"] = [post.to_dict(include_comments=True) for post in user.posts]
    return data


@users_bp.route("", methods=["GET"])
@require_admin
def list_users():
    """Return every account except the calling admin, newest first."""

    caller = current_caller()
    page, limit = parse_pagination(
        request.args, current_app.config.get("USERS_PAGE_SIZE", 10)
    )
    query = User.query.filter(User.id != caller.id).order_by(User.created_at.desc(), User.id.desc())
    users, meta = paginate(query, page, limit)
    return jsonify(
        {
            "success": True,
            "message": "Users retrieved successfully",
            **meta,
            "users": [user.to_dict() for user in users],
        }
    )


@users_bp.route("/count", methods=["GET"])
@require_admin
def count_users():
    return jsonify(
        {"success": True, "message": "Users counted successfully", "count": User.query.count()}
    )


@users_bp.route("/profile", methods=["GET"])
@require_authenticated
def my_profile():
    user = get_or_404(User, current_caller().id, "User")
    return jsonify(
        {"success": True, "message": "User retrieved successfully", "user": _profile_payload(user)}
    )


@users_bp.route("/profile/<int:user_id>", methods=["GET"])
def get_profile(user_id: int):
    user = get_or_404(User, user_id, "User")
    return jsonify(
        {"success": True, "message": "User retrieved successfully", "user": _profile_payload(user)}
    )


@users_bp.route("/profile/<int:user_id>", methods=["PUT", "PATCH"])
@require_self_or_admin
def update_profile(user_id: int):
    """Update username, email, password or bio. Only given fields change."""

    user = get_or_404(User, user_id, "User")
    payload = parse_json_request(request)

    unknown = sorted(set(payload) - UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError({field: f"{field} is not allowed" for field in unknown})

    errors: dict[str, str] = {}
    username = clean_string(
        payload, "username", errors, label="Username", required=False, min_length=2, max_length=200
    )
    email = clean_email(payload, errors, required=False)
    password = clean_password(payload, errors, required=False)
    bio = None
    if "bio" in payload:
        bio = payload.get("bio")
        if not isinstance(bio, str):
            errors["bio"] = "Bio must be a string"
        elif len(bio.strip()) > 300:
            errors["bio"] = "Bio cannot exceed 300 characters"
        else:
            bio = bio.strip()
    raise_for_errors(errors)

    if email is not None and email_taken(email, exclude_user_id=user.id):
        raise DuplicateEntity("Email is used before")

    if username is not None:
        user.username = username
    if email is not None:
        user.email = email
    if bio is not None:
        user.bio = bio
    if password is not None:
        user.set_password(password)
    commit_unique("Email is used before")

    return jsonify({"success": True, "message": "User updated successfully", "user": user.to_dict()})


@users_bp.route("/profile/image", methods=["POST"])
@require_authenticated
def upload_profile_image():
    """Replace the caller's profile image, deleting the previous hosted copy."""

    user = get_or_404(User, current_caller().id, "User")
    image_file = read_image_upload(request, "image")
    image = upload_image(image_file)

    old_image_id = user.profile_image_public_id
    user.profile_image_url = image.url
    user.profile_image_public_id = image.public_id
    commit_with_image(image)

    if old_image_id:
        delete_image(old_image_id)

    return jsonify(
        {
            "success": True,
            "message": "Image uploaded successfully",
            "profileImage": user.profile_image(),
        }
    )


@users_bp.route("/profile/<int:user_id>", methods=["DELETE"])
@require_self_or_admin
def delete_profile(user_id: int):
    """Delete the account together with its posts, comments and images."""

    user = get_or_404(User, user_id, "User")
    snapshot = user.to_dict()
    purge_user(user.id)
    return jsonify({"success": True, "message": "User deleted successfully", "user": snapshot})


@users_bp.route("/block/<int:user_id>", methods=["PUT"])
@require_admin
def toggle_block(user_id: int):
    caller = current_caller()
    user = get_or_404(User, user_id, "User")
    if user.id == caller.id:
        raise ValidationError(description="You can not block yourself")

    user.is_blocked = not user.is_blocked
    db.session.commit()
    current_app.logger.info(
        "Admin %s %s user %s", caller.id, "blocked" if user.is_blocked else "unblocked", user.id
    )
    return jsonify(
        {
            "success": True,
            "message": "User blocked successfully" if user.is_blocked else "User unblocked successfully",
            "user": user.to_dict(),
        }
    )


@users_bp.route("/verify/<int:user_id>", methods=["PUT"])
@require_admin
def verify_user(user_id: int):
    """Mark an account as verified without a token."""

    user = get_or_404(User, user_id, "User")
    if user.is_account_verified:
        raise AlreadyVerified("User is already verified")
    user.mark_verified()
    db.session.commit()
    return jsonify({"success": True, "message": "User verified successfully", "user": user.to_dict()})
