"""User model definition."""

from datetime import datetime

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from . import db


DEFAULT_PROFILE_IMAGE_URL = (
    "https://media.istockphoto.com/id/1433039224/photo/"
    "blue-user-3d-icon-person-profile-concept-isolated-on-white-background.jpg"
)


class User(db.Model):
    """Represents a blog account."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    is_blocked = db.Column(db.Boolean, nullable=False, default=False)
    is_account_verified = db.Column(db.Boolean, nullable=False, default=False)
    profile_image_url = db.Column(
        db.String(512), nullable=False, default=DEFAULT_PROFILE_IMAGE_URL
    )
    profile_image_public_id = db.Column(db.String(255), nullable=True)
    bio = db.Column(db.String(300), nullable=False, default="")
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    posts = db.relationship(
        "Post",
        back_populates="author",
        lazy="dynamic",
        order_by="Post.created_at.desc()",
    )

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        method = current_app.config.get("PASSWORD_HASH_METHOD", "scrypt")
        self.password_hash = generate_password_hash(password, method=method)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def mark_verified(self) -> None:
        self.is_account_verified = True

    def profile_image(self) -> dict:
        return {"url": self.profile_image_url, "publicId": self.profile_image_public_id}

    def summary(self) -> dict:
        """Public author card embedded in posts, comments and categories."""

        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "profileImage": self.profile_image(),
        }

    def to_dict(self) -> dict:
        """Serialize the user without any credential material."""

        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "isAdmin": self.is_admin,
            "isBlocked": self.is_blocked,
            "isAccountVerified": self.is_account_verified,
            "profileImage": self.profile_image(),
            "bio": self.bio,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
