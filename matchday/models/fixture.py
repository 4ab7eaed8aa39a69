from datetime import datetime, timedelta, timezone

from matchday import db
from matchday.utils.scoring import RESULTS, result_from_scores

SCHEDULED = "SCHEDULED"
LIVE = "LIVE"
FINISHED = "FINISHED"
POSTPONED = "POSTPONED"
CANCELLED = "CANCELLED"

FIXTURE_STATUSES = (SCHEDULED, LIVE, FINISHED, POSTPONED, CANCELLED)


class Fixture(db.Model):
    __tablename__ = "fixtures"

    id = db.Column(db.Integer, primary_key=True)

    # Fixture identification
    mode = db.Column(db.String(10), nullable=False)  # "live" or "test"
    week = db.Column(db.Integer, nullable=False)

    # Teams
    home_team = db.Column(db.String(100), nullable=False)
    away_team = db.Column(db.String(100), nullable=False)

    # Match timing and place
    kickoff = db.Column(db.DateTime, nullable=False)
    venue = db.Column(db.String(100))

    # Status and final result
    status = db.Column(db.String(20), nullable=False, default=SCHEDULED)
    home_score = db.Column(db.Integer)
    away_score = db.Column(db.Integer)
    result = db.Column(db.String(1))  # "1", "X", "2" once played

    # External id from the fixture provider
    external_id = db.Column(db.String(50))

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    predictions = db.relationship(
        "Prediction", backref="fixture", lazy="dynamic", cascade="all, delete-orphan"
    )

    # Indexes
    __table_args__ = (
        db.Index("idx_fixture_mode_week", "mode", "week"),
        db.Index("idx_fixture_kickoff", "kickoff"),
        db.UniqueConstraint("mode", "external_id", name="unique_mode_external_id"),
        db.CheckConstraint("home_team != away_team", name="different_teams"),
    )

    def __repr__(self):
        return f"<Fixture {self.home_team} vs {self.away_team} {self.mode} week {self.week}>"

    @property
    def kickoff_utc(self):
        """Kickoff as an aware UTC datetime (SQLite hands back naive values)"""
        if self.kickoff is None:
            return None
        if self.kickoff.tzinfo is None:
            return self.kickoff.replace(tzinfo=timezone.utc)
        return self.kickoff.astimezone(timezone.utc)

    @property
    def is_completed(self):
        return self.result is not None

    @property
    def match_display(self):
        return f"{self.home_team} vs {self.away_team}"

    @property
    def result_display(self):
        if self.home_score is not None and self.away_score is not None:
            return f"{self.home_team} {self.home_score} - {self.away_score} {self.away_team}"
        return self.match_display

    def prediction_deadline(self, buffer_minutes=0):
        """Last instant a prediction is accepted"""
        return self.kickoff_utc - timedelta(minutes=buffer_minutes)

    def is_open_for_predictions(self, buffer_minutes=0, now=None):
        """Check the fixture is scheduled and its deadline hasn't passed"""
        if self.status != SCHEDULED or self.is_completed:
            return False
        now = now or datetime.now(timezone.utc)
        return now < self.prediction_deadline(buffer_minutes)

    def record_result(self, home_score, away_score):
        """Store the final score and derive the 1/X/2 result from it"""
        self.home_score = home_score
        self.away_score = away_score
        self.result = result_from_scores(home_score, away_score)
        self.status = FINISHED

    def to_dict(self):
        """Convert fixture to dictionary for API responses"""
        return {
            "id": self.id,
            "mode": self.mode,
            "week": self.week,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "kickoff": self.kickoff_utc.isoformat() if self.kickoff else None,
            "venue": self.venue,
            "status": self.status,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "result": self.result if self.result in RESULTS else None,
        }
