"""Posts blueprint with pagination, CRUD and likes."""

from __future__ import annotations

from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func

from models import db
from models.post import Post, post_likes
from services.cascade import delete_post
from services.content import (
    apply_partial_update,
    commit_with_image,
    get_or_404,
    get_owned,
    paginate,
    toggle_like,
)
from storage import delete_image, upload_image
from utils.access import current_caller, require_authenticated
from utils.request_validation import (
    clean_string,
    parse_body,
    parse_pagination,
    raise_for_errors,
    read_image_upload,
)

posts_bp = Blueprint("posts", __name__)


def _validate_post_payload(data: dict, partial: bool = False) -> dict:
    errors: dict[str, str] = {}
    required = not partial
    values = {
        "title": clean_string(
            data, "title", errors, label="Title", required=required, min_length=3, max_length=100
        ),
        "description": clean_string(
            data,
            "description",
            errors,
            label="Description",
            required=required,
            min_length=10,
            max_length=500,
        ),
        "category": clean_string(
            data, "category", errors, label="Category", required=required, max_length=100
        ),
    }
    raise_for_errors(errors)
    return values


@posts_bp.route("", methods=["POST"])
@require_authenticated
def create_post():
    """Create a post with an uploaded image. The caller becomes the owner."""

    caller = current_caller()
    image_file = read_image_upload(request, "image")
    values = _validate_post_payload(request.form.to_dict())

    image = upload_image(image_file)
    post = Post(
        title=values["title"],
        description=values["description"],
        category=values["category"],
        image_url=image.url,
        image_public_id=image.public_id,
        user_id=caller.id,
    )
    db.session.add(post)
    commit_with_image(image)
    current_app.logger.info("User %s created post %s", caller.id, post.id)

    return (
        jsonify({"success": True, "message": "Post created successfully", "post": post.to_dict()}),
        201,
    )


@posts_bp.route("", methods=["GET"])
def list_posts():
    """Return posts newest first, optionally filtered by category."""

    page, limit = parse_pagination(
        request.args, current_app.config.get("POSTS_PAGE_SIZE", 10)
    )
    query = Post.query

    category = (request.args.get("category") or "").strip()
    if category:
        query = query.filter(func.lower(Post.category) == category.lower())

    posts, meta = paginate(
        query.order_by(Post.created_at.desc(), Post.id.desc()), page, limit
    )
    now = datetime.utcnow()
    return jsonify(
        {
            "success": True,
            "message": "Posts fetched successfully",
            **meta,
            "posts": [post.to_dict(now=now) for post in posts],
        }
    )


@posts_bp.route("/count", methods=["GET"])
def count_posts():
    return jsonify(
        {
            "success": True,
            "message": "Total post count fetched successfully",
            "count": Post.query.count(),
        }
    )


@posts_bp.route("/<int:post_id>", methods=["GET"])
def get_post(post_id: int):
    post = get_or_404(Post, post_id, "Post")
    return jsonify(
        {
            "success": True,
            "message": "Post fetched successfully",
            "post": post.to_dict(include_comments=True),
        }
    )


@posts_bp.route("/<int:post_id>", methods=["PUT", "PATCH"])
@require_authenticated
def update_post(post_id: int):
    """Merge provided fields into the post and optionally replace its image."""

    post = get_owned(Post, post_id, "Post")
    data = parse_body(request)
    values = _validate_post_payload(data, partial=True)
    image_file = read_image_upload(request, "image", required=False)

    image = None
    old_image_id = None
    if image_file is not None:
        image = upload_image(image_file)
        old_image_id = post.image_public_id
        post.image_url = image.url
        post.image_public_id = image.public_id

    apply_partial_update(post, values)
    if image is not None:
        commit_with_image(image)
    else:
        db.session.commit()

    if old_image_id:
        delete_image(old_image_id)

    return jsonify(
        {"success": True, "message": "Post updated successfully", "post": post.to_dict()}
    )


@posts_bp.route("/<int:post_id>", methods=["DELETE"])
@require_authenticated
def remove_post(post_id: int):
    post = get_owned(Post, post_id, "Post")
    snapshot = post.to_dict()
    delete_post(post)
    return jsonify({"success": True, "message": "Post deleted successfully", "post": snapshot})


@posts_bp.route("/like/<int:post_id>", methods=["PUT"])
@require_authenticated
def toggle_post_like(post_id: int):
    """Add the caller to the post's like set, or remove them if present."""

    get_or_404(Post, post_id, "Post")
    liked = toggle_like(post_likes, "post_id", post_id, current_caller())
    post = db.session.get(Post, post_id)
    return jsonify(
        {
            "success": True,
            "message": "Post liked" if liked else "Post unliked",
            "liked": liked,
            "post": post.to_dict(),
        }
    )
