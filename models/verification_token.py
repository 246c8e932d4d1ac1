"""VerificationToken model definition."""

from datetime import datetime

from . import db


class VerificationToken(db.Model):
    """Single-use secret proving possession of an account's email address.

    The same table serves email verification and password reset; the purpose
    is implied by the endpoint that consumes the token.
    """

    __tablename__ = "verification_tokens"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    token = db.Column(db.String(128), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship(
        "User", backref=db.backref("verification_tokens", lazy="dynamic")
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.utcnow()
        return self.expires_at <= now

    def __repr__(self) -> str:
        return f"<VerificationToken id={self.id} user_id={self.user_id}>"
