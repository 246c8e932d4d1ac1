"""Categories blueprint."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from models import db
from models.category import Category
from services.content import (
    commit_unique,
    ensure_category_title_free,
    get_or_404,
    get_owned,
    paginate,
)
from utils.access import current_caller, require_authenticated
from utils.request_validation import (
    clean_string,
    parse_json_request,
    parse_pagination,
    raise_for_errors,
)

categories_bp = Blueprint("categories", __name__)


def _clean_title(data: dict, required: bool = True) -> str | None:
    errors: dict[str, str] = {}
    title = clean_string(data, "title", errors, label="Title", required=required, max_length=100)
    raise_for_errors(errors)
    return title


@categories_bp.route("", methods=["POST"])
@require_authenticated
def create_category():
    caller = current_caller()
    title = _clean_title(parse_json_request(request))
    ensure_category_title_free(title)

    category = Category(title=title, user_id=caller.id)
    db.session.add(category)
    commit_unique("Category title already exists")
    current_app.logger.info("User %s created category %s", caller.id, category.id)

    return (
        jsonify(
            {
                "success": True,
                "message": "Category created successfully",
                "category": category.to_dict(),
            }
        ),
        201,
    )


@categories_bp.route("", methods=["GET"])
def list_categories():
    page, limit = parse_pagination(
        request.args, current_app.config.get("CATEGORIES_PAGE_SIZE", 50)
    )
    categories, meta = paginate(Category.query.order_by(Category.id.desc()), page, limit)
    return jsonify(
        {
            "success": True,
            "message": "Categories fetched successfully",
            **meta,
            "categories": [category.to_dict() for category in categories],
        }
    )


@categories_bp.route("/<int:category_id>", methods=["GET"])
def get_category(category_id: int):
    category = get_or_404(Category, category_id, "Category")
    return jsonify(
        {"success": True, "message": "Category fetched successfully", "category": category.to_dict()}
    )


@categories_bp.route("/<int:category_id>", methods=["PUT", "PATCH"])
@require_authenticated
def update_category(category_id: int):
    category = get_owned(Category, category_id, "Category")
    title = _clean_title(parse_json_request(request), required=False)
    if title is not None:
        ensure_category_title_free(title, exclude_id=category.id)
        category.title = title
    commit_unique("Category title already exists")
    return jsonify(
        {"success": True, "message": "Category updated successfully", "category": category.to_dict()}
    )


@categories_bp.route("/<int:category_id>", methods=["DELETE"])
@require_authenticated
def delete_category(category_id: int):
    category = get_owned(Category, category_id, "Category")
    db.session.delete(category)
    db.session.commit()
    return jsonify({"success": True, "message": "Category deleted successfully"})
