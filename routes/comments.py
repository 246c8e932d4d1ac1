"""Comments blueprint."""

from __future__ import annotations

from datetime import datetime

from flask import Blueprint, current_app, jsonify, request

from models import db
from models.comment import Comment, comment_likes
from models.post import Post
from services.content import (
    apply_partial_update,
    get_or_404,
    get_owned,
    paginate,
    toggle_like,
)
from utils.access import current_caller, require_authenticated
from utils.errors import ValidationError
from utils.request_validation import (
    clean_string,
    parse_json_request,
    parse_pagination,
    raise_for_errors,
)

comments_bp = Blueprint("comments", __name__)


def _clean_text(data: dict, required: bool = True) -> str | None:
    errors: dict[str, str] = {}
    text = clean_string(
        data, "text", errors, label="Comment", required=required, max_length=500
    )
    raise_for_errors(errors)
    return text


def _parse_post_id(raw) -> int:
    try:
        post_id = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({"postId": "Post ID must be a valid id"})
    if post_id <= 0:
        raise ValidationError({"postId": "Post ID must be a valid id"})
    return post_id


@comments_bp.route("", methods=["POST"])
@require_authenticated
def create_comment():
    caller = current_caller()
    payload = parse_json_request(request)
    post_id = _parse_post_id(payload.get("postId"))
    text = _clean_text(payload)
    get_or_404(Post, post_id, "Post")

    comment = Comment(text=text, post_id=post_id, user_id=caller.id)
    db.session.add(comment)
    db.session.commit()
    current_app.logger.info("User %s commented on post %s", caller.id, post_id)

    return (
        jsonify(
            {
                "success": True,
                "message": "Comment created successfully",
                "comment": comment.to_dict(),
            }
        ),
        201,
    )


@comments_bp.route("", methods=["GET"])
@require_authenticated
def list_comments():
    """Return comments newest first, optionally for a single post."""

    page, limit = parse_pagination(
        request.args, current_app.config.get("COMMENTS_PAGE_SIZE", 10)
    )
    query = Comment.query
    if request.args.get("post"):
        query = query.filter(Comment.post_id == _parse_post_id(request.args["post"]))

    comments, meta = paginate(
        query.order_by(Comment.created_at.desc(), Comment.id.desc()), page, limit
    )
    now = datetime.utcnow()
    return jsonify(
        {
            "success": True,
            "message": "Comments fetched successfully",
            **meta,
            "comments": [comment.to_dict(now=now) for comment in comments],
        }
    )


@comments_bp.route("/<int:comment_id>", methods=["GET"])
def get_comment(comment_id: int):
    comment = get_or_404(Comment, comment_id, "Comment")
    return jsonify(
        {"success": True, "message": "Comment fetched successfully", "comment": comment.to_dict()}
    )


@comments_bp.route("/<int:comment_id>", methods=["PUT", "PATCH"])
@require_authenticated
def update_comment(comment_id: int):
    comment = get_owned(Comment, comment_id, "Comment")
    payload = parse_json_request(request)
    apply_partial_update(comment, {"text": _clean_text(payload, required=False)})
    db.session.commit()
    return jsonify(
        {"success": True, "message": "Comment updated successfully", "comment": comment.to_dict()}
    )


@comments_bp.route("/<int:comment_id>", methods=["DELETE"])
@require_authenticated
def delete_comment(comment_id: int):
    comment = get_owned(Comment, comment_id, "Comment")
    db.session.delete(comment)
    db.session.commit()
    return jsonify({"success": True, "message": "Comment deleted successfully"})


@comments_bp.route("/like/<int:comment_id>", methods=["PUT"])
@require_authenticated
def toggle_comment_like(comment_id: int):
    get_or_404(Comment, comment_id, "Comment")
    liked = toggle_like(comment_likes, "comment_id", comment_id, current_caller())
    comment = db.session.get(Comment, comment_id)
    return jsonify(
        {
            "success": True,
            "message": "Comment liked" if liked else "Comment unliked",
            "liked": liked,
            "comment": comment.to_dict(),
        }
    )
