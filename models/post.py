"""Post model and its like set."""

from datetime import datetime

from utils.timefmt import humanize_since

from . import db


DEFAULT_POST_IMAGE_URL = (
    "https://upload.wikimedia.org/wikipedia/commons/6/65/No-Image-Placeholder.svg"
)

# Composite primary key keeps the like set free of duplicates.
post_likes = db.Table(
    "post_likes",
    db.Column("post_id", db.Integer, db.ForeignKey("posts.id"), primary_key=True),
    db.Column("user_id", db.Integer, db.ForeignKey("users.id"), primary_key=True),
)


class Post(db.Model):
    """A blog post owned by a single user."""

    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=False)
    category = db.Column(db.String(100), nullable=False, index=True)
    image_url = db.Column(db.String(512), nullable=False, default=DEFAULT_POST_IMAGE_URL)
    image_public_id = db.Column(db.String(255), nullable=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    created_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, index=True
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    author = db.relationship("User", back_populates="posts")
    comments = db.relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.created_at.desc()",
    )
    likers = db.relationship(
        "User",
        secondary=post_likes,
        backref=db.backref("liked_posts"),
        order_by="User.id",
    )

    def image(self) -> dict:
        return {"url": self.image_url, "publicId": self.image_public_id}

    def like_ids(self) -> list[int]:
        return [user.id for user in self.likers]

    def to_dict(self, include_comments: bool = False, now: datetime | None = None) -> dict:
        """Serialize the post with author card and relative timestamps."""

        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "image": self.image(),
            "user": self.author.summary() if self.author else None,
            "likes": self.like_ids(),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "createdAtHuman": humanize_since(self.created_at, now),
            "updatedAtHuman": humanize_since(self.updated_at, now),
        }
        if include_comments:
            data["comments"] = [comment.to_dict(now=now) for comment in self.comments]
            data["likers"] = [user.summary() for user in self.likers]
        return data

    def __repr__(self) -> str:
        return f"<Post id={self.id} user_id={self.user_id}>"
