"""Category model definition."""

from . import db


class Category(db.Model):
    """A globally unique post category title."""

    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(100), unique=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    __table_args__ = (
        db.Index("uq_categories_title_lower", db.func.lower(title), unique=True),
    )

    creator = db.relationship(
        "User", backref=db.backref("categories", lazy="dynamic")
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "user": self.creator.summary() if self.creator else None,
        }
