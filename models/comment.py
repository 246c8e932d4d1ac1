"""Comment model and its like set."""

from datetime import datetime

from utils.timefmt import humanize_since

from . import db


comment_likes = db.Table(
    "comment_likes",
    db.Column(
        "comment_id", db.Integer, db.ForeignKey("comments.id"), primary_key=True
    ),
    db.Column("user_id", db.Integer, db.ForeignKey("users.id"), primary_key=True),
)


class Comment(db.Model):
    """A comment left by a user on a post."""

    __tablename__ = "comments"

    id = db.Column(db.Integer, primary_key=True)
    text = db.Column(db.String(500), nullable=False)
    post_id = db.Column(
        db.Integer, db.ForeignKey("posts.id"), nullable=False, index=True
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    created_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, index=True
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    post = db.relationship("Post", back_populates="comments")
    author = db.relationship(
        "User", backref=db.backref("comments", lazy="dynamic")
    )
    likers = db.relationship(
        "User",
        secondary=comment_likes,
        backref=db.backref("liked_comments"),
        order_by="User.id",
    )

    def to_dict(self, now: datetime | None = None) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "postId": self.post_id,
            "postTitle": self.post.title if self.post else None,
            "user": self.author.summary() if self.author else None,
            "likes": [user.id for user in self.likers],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "createdAtHuman": humanize_since(self.created_at, now),
            "updatedAtHuman": humanize_since(self.updated_at, now),
        }

    def __repr__(self) -> str:
        return f"<Comment id={self.id} post_id={self.post_id}>"
