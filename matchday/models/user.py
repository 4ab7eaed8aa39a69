from datetime import datetime, timezone

from flask_login import UserMixin

from matchday import db


class User(UserMixin, db.Model):
    """A player known to the identity service.

    The id is issued upstream (the BFF forwards it after verifying the token);
    this table only exists so unknown ids can be rejected.
    """

    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True)
    display_name = db.Column(db.String(100))

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    predictions = db.relationship(
        "Prediction", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User {self.id}>"

    @staticmethod
    def find(user_id):
        return db.session.get(User, user_id)

    def to_dict(self):
        return {
            "id": self.id,
            "display_name": self.display_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
