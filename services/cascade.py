"""Cascading deletes for posts and users.

Each purge works from whatever rows still exist for the given id, so running
it again after a partial failure finishes the job. Hosted images are removed
only after the database commit; a failed image deletion is logged and does
not undo the delete.
"""

from __future__ import annotations

from flask import current_app

from models import db
from models.category import Category
from models.comment import Comment, comment_likes
from models.post import Post, post_likes
from models.user import User
from models.verification_token import VerificationToken
from storage import delete_image


def _delete_images(public_ids: list[str]) -> int:
    deleted = 0
    for public_id in public_ids:
        if delete_image(public_id):
            deleted += 1
    return deleted


def delete_post(post: Post) -> None:
    """Delete a post with its comments, likes and hosted image."""

    post_id = post.id
    image_id = post.image_public_id
    db.session.delete(post)
    db.session.commit()
    current_app.logger.info("Deleted post %s", post_id)

    if image_id:
        _delete_images([image_id])


def purge_user(user_id: int) -> bool:
    """Remove a user and everything they own. Returns ``False`` if already gone."""

    user = db.session.get(User, user_id)
    if user is None:
        return False

    posts = Post.query.filter_by(user_id=user_id).all()
    post_ids = [post.id for post in posts]
    image_ids = [post.image_public_id for post in posts if post.image_public_id]
    if user.profile_image_public_id:
        image_ids.append(user.profile_image_public_id)

    doomed_comments = Comment.query.filter(Comment.user_id == user_id)
    if post_ids:
        doomed_comments = Comment.query.filter(
            db.or_(Comment.user_id == user_id, Comment.post_id.in_(post_ids))
        )
    comments = doomed_comments.all()
    for comment in comments:
        db.session.delete(comment)
    db.session.flush()

    for post in posts:
        db.session.delete(post)

    db.session.execute(post_likes.delete().where(post_likes.c.user_id == user_id))
    db.session.execute(comment_likes.delete().where(comment_likes.c.user_id == user_id))
    VerificationToken.query.filter_by(user_id=user_id).delete(synchronize_session=False)
    Category.query.filter_by(user_id=user_id).update(
        {Category.user_id: None}, synchronize_session=False
    )
    db.session.flush()

    db.session.expire(user)
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info(
        "Deleted user %s with %d posts and %d comments",
        user_id,
        len(post_ids),
        len(comments),
    )

    _delete_images(image_ids)
    return True
