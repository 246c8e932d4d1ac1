"""Database initialization and model exports."""

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()

# Import models to register them with SQLAlchemy metadata.
from .user import User  # noqa: E402,F401
from .verification_token import VerificationToken  # noqa: E402,F401
from .post import Post, post_likes  # noqa: E402,F401
from .comment import Comment, comment_likes  # noqa: E402,F401
from .category import Category  # noqa: E402,F401

__all__ = [
    "db",
    "User",
    "VerificationToken",
    "Post",
    "post_likes",
    "Comment",
    "comment_likes",
    "Category",
]
