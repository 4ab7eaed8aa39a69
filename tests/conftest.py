"""
Shared fixtures: an app on in-memory SQLite, registered users and rounds of
fixtures with known results.
"""
from datetime import datetime, timedelta, timezone

import pytest

from matchday import create_app, db
from matchday.models import Fixture, User
from matchday.models.fixture import FINISHED, SCHEDULED
from matchday.utils.scoring import AWAY, DRAW, HOME, result_from_scores

# Scores cycling through home win, draw, away win
SCORE_CYCLE = [(2, 0), (1, 1), (0, 3)]
RESULT_CYCLE = [HOME, DRAW, AWAY]


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    user = User(id="user-1", display_name="Giulia")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def other_user(app):
    user = User(id="user-2", display_name="Marco")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def make_round(app):
    """
    Factory creating one round of fixtures.

    Played rounds get scores from SCORE_CYCLE, so fixture i has result
    RESULT_CYCLE[i % 3]. Unplayed rounds kick off two days from now.
    """

    def _make_round(week, count=10, mode="test", played=True):
        base = datetime(2023, 8, 19, 16, 30) + timedelta(days=7 * (week - 1))
        if not played:
            base = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(days=2)

        fixtures = []
        for i in range(count):
            fixture = Fixture(
                mode=mode,
                week=week,
                home_team=f"Home {week}-{i}",
                away_team=f"Away {week}-{i}",
                kickoff=base + timedelta(minutes=15 * i),
                status=SCHEDULED,
            )
            if played:
                home_score, away_score = SCORE_CYCLE[i % 3]
                fixture.home_score = home_score
                fixture.away_score = away_score
                fixture.result = result_from_scores(home_score, away_score)
                fixture.status = FINISHED
            db.session.add(fixture)
            fixtures.append(fixture)
        db.session.commit()
        return fixtures

    return _make_round


def expected_result(index):
    return RESULT_CYCLE[index % 3]


def wrong_choice(index):
    """A choice guaranteed not to match fixture number index"""
    return HOME if expected_result(index) != HOME else AWAY
