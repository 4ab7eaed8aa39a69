from datetime import datetime

import pytest

from matchday.models import Fixture
from matchday.models.fixture import FINISHED, SCHEDULED
from matchday.services import fixture_catalog
from matchday.utils.exceptions import ValidationError
from matchday.utils.scoring import AWAY, DRAW, HOME


def test_seed_test_fixtures(app):
    created = fixture_catalog.seed_test_fixtures()

    assert created == len(fixture_catalog.TEST_FIXTURES)
    assert fixture_catalog.get_weeks("test") == [1, 2, 3, 4, 5]
    assert fixture_catalog.get_weeks("live") == []
    assert all(f.status == FINISHED for f in Fixture.query.all())


def test_seed_is_idempotent(app):
    fixture_catalog.seed_test_fixtures()

    assert fixture_catalog.seed_test_fixtures() == 0
    assert Fixture.query.count() == len(fixture_catalog.TEST_FIXTURES)


def test_seeded_rounds_are_full_rounds(app):
    fixture_catalog.seed_test_fixtures()

    for week in fixture_catalog.get_weeks("test"):
        fixtures = fixture_catalog.get_fixtures_for_week("test", week)
        teams = [f.home_team for f in fixtures] + [f.away_team for f in fixtures]
        assert len(fixtures) == 10
        assert len(set(teams)) == 20


def test_seeded_kickoffs_are_stored_in_utc(app):
    fixture_catalog.seed_test_fixtures()

    first = fixture_catalog.get_fixtures_for_week("test", 1)[0]

    # 18:30 in Rome during summer time
    assert first.kickoff == datetime(2023, 8, 19, 16, 30)
    assert first.home_team == "Empoli"
    assert first.venue == "Stadio Carlo Castellani"


def test_fixtures_for_week_ordered_by_kickoff(app):
    fixture_catalog.seed_test_fixtures()

    fixtures = fixture_catalog.get_fixtures_for_week("test", 2)

    assert len(fixtures) == 10
    kickoffs = [f.kickoff for f in fixtures]
    assert kickoffs == sorted(kickoffs)


def test_get_fixture_checks_mode(make_round):
    fixture = make_round(week=1, count=1)[0]

    assert fixture_catalog.get_fixture(fixture.id, "test") is fixture
    assert fixture_catalog.get_fixture(fixture.id, "live") is None
    assert fixture_catalog.get_fixture(12345, "test") is None


def test_add_fixture(app):
    fixture = fixture_catalog.add_fixture(
        "live", 7, "Napoli", "Lazio", datetime(2024, 10, 6, 20, 45)
    )

    assert fixture.status == SCHEDULED
    assert fixture.result is None
    assert fixture.venue == "Stadio Diego Armando Maradona"
    assert fixture.kickoff == datetime(2024, 10, 6, 18, 45)
    assert fixture_catalog.get_weeks("live") == [7]


@pytest.mark.parametrize(
    "home,away,week",
    [("Roma", "Roma", 1), ("", "Lazio", 1), ("Roma", "Lazio", 40)],
)
def test_add_fixture_rejects_bad_input(app, home, away, week):
    with pytest.raises(ValidationError):
        fixture_catalog.add_fixture("live", week, home, away, datetime(2024, 10, 6))


@pytest.mark.parametrize(
    "scores,expected", [((3, 1), HOME), ((2, 2), DRAW), ((0, 1), AWAY)]
)
def test_record_result_derives_outcome(make_round, scores, expected):
    fixture = make_round(week=1, count=1, mode="live", played=False)[0]

    updated = fixture_catalog.record_result(fixture.id, *scores)

    assert updated.result == expected
    assert updated.status == FINISHED
    assert updated.is_completed


def test_record_result_validation(make_round):
    fixture = make_round(week=1, count=1, mode="live", played=False)[0]

    with pytest.raises(ValidationError):
        fixture_catalog.record_result(fixture.id, -1, 0)
    with pytest.raises(ValidationError):
        fixture_catalog.record_result(9999, 1, 0)


def test_result_changes_scoring_on_next_read(user, make_round):
    from matchday.services.prediction_service import submit_prediction
    from matchday.services.stats_service import compute_weekly_stats

    fixture = make_round(week=1, count=1, mode="live", played=False)[0]
    submit_prediction(user.id, fixture.id, "2", "live")
    assert compute_weekly_stats(user.id, 1, "live")["correct_predictions"] == 0

    fixture_catalog.record_result(fixture.id, 0, 2)

    stats = compute_weekly_stats(user.id, 1, "live")
    assert stats["correct_predictions"] == 1
    assert stats["weekly_percentage"] == 100
