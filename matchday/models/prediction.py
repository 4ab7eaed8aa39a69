from datetime import datetime, timezone

from matchday import db
from matchday.utils.scoring import CHOICE_LABELS, SKIP, score


class Prediction(db.Model):
    __tablename__ = "predictions"

    id = db.Column(db.Integer, primary_key=True)

    # Prediction identification
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    fixture_id = db.Column(db.Integer, db.ForeignKey("fixtures.id"), nullable=False)

    # Denormalized from the fixture for per-week and per-mode queries
    mode = db.Column(db.String(10), nullable=False)
    week = db.Column(db.Integer, nullable=False)

    # "1", "X", "2" or "SKIP"
    choice = db.Column(db.String(4), nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    submitted_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("user_id", "fixture_id", name="unique_user_fixture_prediction"),
        db.Index("idx_prediction_user_mode_week", "user_id", "mode", "week"),
        db.Index("idx_prediction_fixture", "fixture_id"),
    )

    def __repr__(self):
        return f"<Prediction user_id={self.user_id} fixture_id={self.fixture_id} choice={self.choice}>"

    @property
    def is_skip(self):
        return self.choice == SKIP

    @property
    def is_correct(self):
        """Correctness derived from the fixture result, None while unknown"""
        if self.fixture is None:
            return None
        return score(self.choice, self.fixture.result).is_correct

    @property
    def choice_display(self):
        return CHOICE_LABELS.get(self.choice, "Unknown")

    @staticmethod
    def get_for_user_week(user_id, mode, week):
        return Prediction.query.filter_by(user_id=user_id, mode=mode, week=week).all()

    def to_dict(self):
        """Convert prediction to dictionary for API responses"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "fixture_id": self.fixture_id,
            "mode": self.mode,
            "week": self.week,
            "choice": self.choice,
            "choice_display": self.choice_display,
            "is_correct": self.is_correct,
            "match_display": self.fixture.match_display if self.fixture else None,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
        }
