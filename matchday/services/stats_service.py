"""
Weekly Aggregator

compute_weekly_stats() is the one place week statistics are derived. The
progression gate, the overall summary, the API and the CLI all call it, so a
week shown to the user and a week checked by the gate can never disagree.
"""

import logging

from matchday.models import Fixture, Prediction
from matchday.services.storage import storage_access
from matchday.utils.exceptions import DependencyError
from matchday.utils.scoring import SKIP, percentage, points_for, score
from matchday.utils.validators import validate_mode, validate_user_id, validate_week

logger = logging.getLogger(__name__)

NO_PICK = "no_pick"
SKIPPED = "skipped"
PENDING = "pending"
CORRECT = "correct"
WRONG = "wrong"


def check_consistency(fixtures, predictions, scope):
    """Refuse to aggregate predictions whose fixture is missing from the read"""
    fixture_ids = {fixture.id for fixture in fixtures}
    orphans = [p.fixture_id for p in predictions if p.fixture_id not in fixture_ids]
    if orphans:
        logger.error(f"Predictions for {scope} reference unknown fixtures: {orphans}")
        raise DependencyError(f"Inconsistent fixture catalog for {scope}")


def load_week(user_id, mode, week):
    """
    Read fixtures and predictions of one round together.

    Either both reads succeed or a DependencyError is raised.
    """
    with storage_access(f"week {week} read"):
        fixtures = (
            Fixture.query.filter_by(mode=mode, week=week)
            .order_by(Fixture.kickoff, Fixture.id)
            .all()
        )
        predictions = Prediction.get_for_user_week(user_id, mode, week)

    check_consistency(fixtures, predictions, f"{mode} week {week} of user {user_id}")
    return fixtures, predictions


def _breakdown_entry(fixture, prediction):
    """Describe one fixture of the week from the user's point of view"""
    choice = prediction.choice if prediction else None
    is_correct = None
    if prediction is None:
        outcome = NO_PICK
    elif choice == SKIP:
        outcome = SKIPPED
    else:
        is_correct = score(choice, fixture.result).is_correct
        if is_correct is None:
            outcome = PENDING
        else:
            outcome = CORRECT if is_correct else WRONG

    return {
        "fixture_id": fixture.id,
        "home_team": fixture.home_team,
        "away_team": fixture.away_team,
        "kickoff": fixture.kickoff_utc.isoformat() if fixture.kickoff else None,
        "venue": fixture.venue,
        "user_choice": choice,
        "actual_result": fixture.result or "TBD",
        "is_correct": is_correct,
        "home_score": fixture.home_score,
        "away_score": fixture.away_score,
        "outcome": outcome,
    }


def aggregate_week(week, mode, fixtures, predictions):
    """
    Roll a round's predictions up into WeeklyStats.

    Pure aside from reading POINTS_PER_CORRECT from the app config, so the
    summary engine can reuse it on data it already loaded.
    """
    by_fixture = {prediction.fixture_id: prediction for prediction in predictions}

    breakdown = [
        _breakdown_entry(fixture, by_fixture.get(fixture.id)) for fixture in fixtures
    ]

    total_predictions = sum(
        1 for entry in breakdown if entry["outcome"] in (PENDING, CORRECT, WRONG)
    )
    correct_predictions = sum(1 for entry in breakdown if entry["outcome"] == CORRECT)
    skipped_count = sum(1 for entry in breakdown if entry["outcome"] == SKIPPED)

    return {
        "week": week,
        "mode": mode,
        "total_predictions": total_predictions,
        "correct_predictions": correct_predictions,
        "weekly_percentage": percentage(correct_predictions, total_predictions),
        "skipped_count": skipped_count,
        "total_turns": total_predictions + skipped_count,
        "points": points_for(correct_predictions),
        "fixture_count": len(fixtures),
        "has_activity": total_predictions + skipped_count > 0,
        "predictions": breakdown,
    }


def compute_weekly_stats(user_id, week, mode):
    """
    Compute a user's statistics for one round.

    A week without any prediction is not an error: it comes back with zero
    totals and has_activity=False.
    """
    mode = validate_mode(mode)
    week = validate_week(week)
    with storage_access("user lookup"):
        validate_user_id(user_id)

    fixtures, predictions = load_week(user_id, mode, week)
    stats = aggregate_week(week, mode, fixtures, predictions)

    logger.debug(
        f"Weekly stats: user={user_id} mode={mode} week={week} "
        f"{stats['correct_predictions']}/{stats['total_predictions']} "
        f"({stats['weekly_percentage']}%), skipped={stats['skipped_count']}"
    )
    return stats
