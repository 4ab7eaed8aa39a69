"""
Fixture Catalog

Read-only view of fixtures per game mode and week. Fixtures are owned by the
external ingestion process; the two write hooks here (seeding the sample
test-mode rounds and recording a final score) are the entry points that
process and the CLI use.
"""

import logging

from matchday import db
from matchday.models import Fixture
from matchday.models.fixture import FINISHED, SCHEDULED
from matchday.services.storage import storage_access
from matchday.utils.exceptions import ValidationError
from matchday.utils.scoring import result_from_scores
from matchday.utils.timezone_utils import kickoff_to_utc
from matchday.utils.validators import TEST_MODE, validate_mode, validate_week

logger = logging.getLogger(__name__)

HOME_VENUES = {
    "AC Milan": "San Siro",
    "Inter": "San Siro",
    "Atalanta": "Gewiss Stadium",
    "Bologna": "Stadio Renato Dall'Ara",
    "Cagliari": "Unipol Domus",
    "Empoli": "Stadio Carlo Castellani",
    "Fiorentina": "Stadio Artemio Franchi",
    "Frosinone": "Stadio Benito Stirpe",
    "Genoa": "Stadio Luigi Ferraris",
    "Hellas Verona": "Stadio Marcantonio Bentegodi",
    "Juventus": "Allianz Stadium",
    "Lazio": "Stadio Olimpico",
    "Lecce": "Stadio Via del Mare",
    "Monza": "U-Power Stadium",
    "Napoli": "Stadio Diego Armando Maradona",
    "Roma": "Stadio Olimpico",
    "Salernitana": "Stadio Arechi",
    "Sassuolo": "Mapei Stadium",
    "Torino": "Stadio Olimpico Grande Torino",
    "Udinese": "Bluenergy Stadium",
}

# Sample Serie A rounds used by test mode, ten matches each (local kickoffs)
TEST_FIXTURES = [
    # Giornata 1
    (1, "2023-08-19 18:30", "Empoli", "Hellas Verona", 0, 1),
    (1, "2023-08-19 18:30", "Frosinone", "Napoli", 1, 3),
    (1, "2023-08-19 20:45", "Genoa", "Fiorentina", 1, 4),
    (1, "2023-08-19 20:45", "Inter", "Monza", 2, 0),
    (1, "2023-08-20 18:30", "Roma", "Salernitana", 2, 2),
    (1, "2023-08-20 18:30", "Sassuolo", "Atalanta", 0, 2),
    (1, "2023-08-20 20:45", "Lecce", "Lazio", 2, 1),
    (1, "2023-08-20 20:45", "Udinese", "Juventus", 0, 3),
    (1, "2023-08-21 18:30", "Torino", "Cagliari", 0, 0),
    (1, "2023-08-21 20:45", "Bologna", "AC Milan", 0, 2),
    # Giornata 2
    (2, "2023-08-26 18:30", "Monza", "Empoli", 2, 0),
    (2, "2023-08-26 18:30", "Fiorentina", "Lecce", 2, 2),
    (2, "2023-08-26 20:45", "Cagliari", "Inter", 0, 2),
    (2, "2023-08-26 20:45", "Hellas Verona", "Roma", 2, 1),
    (2, "2023-08-27 18:30", "Juventus", "Bologna", 1, 1),
    (2, "2023-08-27 18:30", "Lazio", "Genoa", 0, 1),
    (2, "2023-08-27 20:45", "Napoli", "Sassuolo", 2, 0),
    (2, "2023-08-27 20:45", "Salernitana", "Udinese", 1, 1),
    (2, "2023-08-28 18:30", "Atalanta", "Frosinone", 2, 0),
    (2, "2023-08-28 20:45", "AC Milan", "Torino", 4, 1),
    # Giornata 3
    (3, "2023-09-02 18:30", "Bologna", "Cagliari", 2, 1),
    (3, "2023-09-02 18:30", "Udinese", "Frosinone", 0, 0),
    (3, "2023-09-02 20:45", "Inter", "Fiorentina", 4, 0),
    (3, "2023-09-02 20:45", "Lazio", "Napoli", 1, 2),
    (3, "2023-09-03 18:30", "Empoli", "Juventus", 0, 2),
    (3, "2023-09-03 18:30", "Sassuolo", "Hellas Verona", 3, 1),
    (3, "2023-09-03 20:45", "Monza", "Atalanta", 0, 3),
    (3, "2023-09-03 20:45", "Roma", "AC Milan", 1, 2),
    (3, "2023-09-04 18:30", "Torino", "Genoa", 1, 0),
    (3, "2023-09-04 20:45", "Salernitana", "Lecce", 0, 2),
    # Giornata 4
    (4, "2023-09-16 15:00", "AC Milan", "Inter", 1, 5),
    (4, "2023-09-16 15:00", "Atalanta", "Cagliari", 2, 0),
    (4, "2023-09-16 18:00", "Juventus", "Lazio", 3, 1),
    (4, "2023-09-16 18:00", "Genoa", "Napoli", 2, 2),
    (4, "2023-09-16 20:45", "Frosinone", "Sassuolo", 4, 2),
    (4, "2023-09-17 15:00", "Monza", "Lecce", 1, 1),
    (4, "2023-09-17 18:00", "Roma", "Empoli", 7, 0),
    (4, "2023-09-17 20:45", "Torino", "Salernitana", 0, 0),
    (4, "2023-09-18 18:30", "Hellas Verona", "Bologna", 0, 0),
    (4, "2023-09-18 20:45", "Fiorentina", "Udinese", 2, 1),
    # Giornata 5
    (5, "2023-09-23 15:00", "Lecce", "Genoa", 1, 0),
    (5, "2023-09-23 15:00", "Sassuolo", "Juventus", 4, 2),
    (5, "2023-09-23 18:00", "Lazio", "Monza", 1, 1),
    (5, "2023-09-23 20:45", "AC Milan", "Hellas Verona", 1, 0),
    (5, "2023-09-24 15:00", "Empoli", "Inter", 0, 1),
    (5, "2023-09-24 15:00", "Salernitana", "Frosinone", 1, 1),
    (5, "2023-09-24 18:00", "Bologna", "Napoli", 0, 0),
    (5, "2023-09-24 20:45", "Udinese", "Cagliari", 1, 1),
    (5, "2023-09-25 18:30", "Fiorentina", "Atalanta", 3, 2),
    (5, "2023-09-25 20:45", "Torino", "Roma", 1, 1),
]


def get_fixture(fixture_id, mode):
    """Get a fixture by id, only if it belongs to the given mode"""
    with storage_access("fixture lookup"):
        fixture = db.session.get(Fixture, fixture_id)
    if fixture is None or fixture.mode != mode:
        return None
    return fixture


def get_fixtures_for_week(mode, week):
    """Get all fixtures of a round ordered by kickoff"""
    mode = validate_mode(mode)
    week = validate_week(week)
    with storage_access("fixture listing"):
        return (
            Fixture.query.filter_by(mode=mode, week=week)
            .order_by(Fixture.kickoff, Fixture.id)
            .all()
        )


def get_weeks(mode):
    """Get the sorted list of weeks that have at least one fixture"""
    mode = validate_mode(mode)
    with storage_access("week listing"):
        rows = (
            db.session.query(Fixture.week)
            .filter(Fixture.mode == mode)
            .distinct()
            .order_by(Fixture.week)
            .all()
        )
    return [row.week for row in rows]


def add_fixture(mode, week, home_team, away_team, kickoff, venue=None, external_id=None):
    """Register a scheduled fixture on behalf of the ingestion process"""
    mode = validate_mode(mode)
    week = validate_week(week)
    if not home_team or not away_team or home_team == away_team:
        raise ValidationError("A fixture needs two different teams", field="teams")
    if kickoff is None:
        raise ValidationError("Kickoff is required", field="kickoff")

    fixture = Fixture(
        mode=mode,
        week=week,
        home_team=home_team,
        away_team=away_team,
        kickoff=kickoff_to_utc(kickoff),
        venue=venue or HOME_VENUES.get(home_team),
        status=SCHEDULED,
        external_id=external_id,
    )
    with storage_access("fixture creation"):
        db.session.add(fixture)
        db.session.commit()

    logger.info(f"Fixture added: {fixture.match_display} ({mode}, week {week})")
    return fixture


def record_result(fixture_id, home_score, away_score):
    """Store a final score; predictions pick up the new result on next read"""
    if home_score is None or away_score is None or home_score < 0 or away_score < 0:
        raise ValidationError("Scores must be non-negative integers", field="score")

    with storage_access("result recording"):
        fixture = db.session.get(Fixture, fixture_id)
        if fixture is None:
            raise ValidationError(f"Unknown fixture {fixture_id}", field="fixture_id")
        fixture.record_result(home_score, away_score)
        db.session.commit()

    logger.info(f"Result recorded: {fixture.result_display} -> {fixture.result}")
    return fixture


def seed_test_fixtures():
    """Load the sample rounds for test mode. Returns the number created."""
    with storage_access("test fixture seeding"):
        existing = Fixture.query.filter_by(mode=TEST_MODE).count()
        if existing > 0:
            logger.warning(
                f"Test data already exists ({existing} fixtures). Skipping seed."
            )
            return 0

        for week, kickoff, home_team, away_team, home_score, away_score in TEST_FIXTURES:
            db.session.add(
                Fixture(
                    mode=TEST_MODE,
                    week=week,
                    home_team=home_team,
                    away_team=away_team,
                    kickoff=kickoff_to_utc(kickoff),
                    venue=HOME_VENUES.get(home_team),
                    status=FINISHED,
                    home_score=home_score,
                    away_score=away_score,
                    result=result_from_scores(home_score, away_score),
                )
            )
        db.session.commit()

    logger.info(f"Test data seeded successfully: {len(TEST_FIXTURES)} fixtures")
    return len(TEST_FIXTURES)
