"""Ownership-gated CRUD helpers shared by posts, comments and categories."""

from __future__ import annotations

from flask import current_app
from sqlalchemy import Table, and_, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.category import Category
from storage import StoredImage, delete_image
from utils.access import Caller, require_owner_or_admin
from utils.errors import DuplicateEntity, NotFound


def get_or_404(model, entity_id: int, label: str):
    entity = db.session.get(model, entity_id)
    if entity is None:
        raise NotFound(f"{label} not found")
    return entity


def get_owned(model, entity_id: int, label: str):
    """Load an entity and apply the owner-or-admin gate to it."""

    entity = get_or_404(model, entity_id, label)
    require_owner_or_admin(entity.user_id)
    return entity


def paginate(query, page: int, limit: int) -> tuple[list, dict]:
    """Return one page of ``query`` plus ``page``/``totalPages``/``totalCount``."""

    pagination = query.paginate(page=page, per_page=limit, error_out=False)
    meta = {
        "page": page,
        "totalPages": pagination.pages,
        "totalCount": pagination.total,
    }
    return list(pagination.items), meta


def apply_partial_update(entity, values: dict) -> bool:
    """Overwrite only the attributes present in ``values``; report changes."""

    changed = False
    for attribute, value in values.items():
        if value is None:
            continue
        if getattr(entity, attribute) != value:
            setattr(entity, attribute, value)
            changed = True
    return changed


def toggle_like(table: Table, key: str, entity_id: int, caller: Caller) -> bool:
    """Flip the caller's membership in a like set; return ``True`` if now liked.

    Works directly on the association rows so concurrent toggles on the same
    entity never overwrite each other's likes.
    """

    membership = and_(table.c[key] == entity_id, table.c.user_id == caller.id)
    result = db.session.execute(table.delete().where(membership))
    if result.rowcount:
        db.session.commit()
        return False

    try:
        db.session.execute(table.insert().values({key: entity_id, "user_id": caller.id}))
        db.session.commit()
    except IntegrityError:
        # A concurrent toggle inserted the same row first.
        db.session.rollback()
    return True


def ensure_category_title_free(title: str, exclude_id: int | None = None) -> None:
    """Reject a category title already used by another category."""

    existing = Category.query.filter(func.lower(Category.title) == title.lower()).first()
    if existing is not None and existing.id != exclude_id:
        current_app.logger.info("Category title collision on %r", title)
        raise DuplicateEntity("Category title already exists")


def commit_unique(message: str) -> None:
    """Commit, turning a unique-constraint violation into ``DuplicateEntity``."""

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.info("Unique constraint rejected commit: %s", message)
        raise DuplicateEntity(message)


def commit_with_image(image: StoredImage) -> None:
    """Commit rows that reference a freshly uploaded image.

    The image is deleted again if the commit fails.
    """

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        delete_image(image.public_id)
        raise
