"""
Summary/Ranking Engine

Overall statistics across every round a user has played in one game mode,
plus best and worst week selection.
"""

import logging
from collections import defaultdict

from matchday.models import Fixture, Prediction
from matchday.services.stats_service import (
    CORRECT,
    WRONG,
    aggregate_week,
    check_consistency,
)
from matchday.services.storage import storage_access
from matchday.utils.scoring import percentage
from matchday.utils.validators import validate_mode, validate_user_id

logger = logging.getLogger(__name__)


def _ranking_entry(stats):
    return {
        "week": stats["week"],
        "weekly_percentage": stats["weekly_percentage"],
        "points": stats["points"],
        "correct_predictions": stats["correct_predictions"],
        "total_predictions": stats["total_predictions"],
    }


def pick_best_worst_week(weekly_stats_list):
    """
    Select the best and worst week among weeks with at least one pick.

    Best: higher accuracy, then more points, then the more recent week.
    Worst: lower accuracy, then fewer points, then the more recent week.
    Recency wins the last tie in both directions.
    """
    ranked = [stats for stats in weekly_stats_list if stats["total_predictions"] > 0]
    if not ranked:
        return {"best": None, "worst": None}

    best = max(
        ranked, key=lambda s: (s["weekly_percentage"], s["points"], s["week"])
    )
    worst = min(
        ranked, key=lambda s: (s["weekly_percentage"], s["points"], -s["week"])
    )
    return {"best": _ranking_entry(best), "worst": _ranking_entry(worst)}


def calculate_longest_streak(weekly_stats_list):
    """Calculate longest run of correct or wrong predictions

    Predictions are walked in week then kickoff order; pending and skipped
    ones are ignored.

    Returns:
        Longest streak (positive for correct, negative for wrong)
    """
    longest_win_streak = 0
    longest_loss_streak = 0
    current_streak = 0

    for stats in weekly_stats_list:
        for entry in stats["predictions"]:
            if entry["outcome"] == CORRECT:
                current_streak = current_streak + 1 if current_streak > 0 else 1
                longest_win_streak = max(longest_win_streak, current_streak)
            elif entry["outcome"] == WRONG:
                current_streak = current_streak - 1 if current_streak < 0 else -1
                longest_loss_streak = min(longest_loss_streak, current_streak)

    # Return the streak with largest absolute value
    if abs(longest_win_streak) >= abs(longest_loss_streak):
        return longest_win_streak
    return longest_loss_streak


def load_history(user_id, mode):
    """Read every prediction of the user and the fixtures of the weeks played"""
    with storage_access("history read"):
        predictions = Prediction.query.filter_by(user_id=user_id, mode=mode).all()
        weeks = sorted({prediction.week for prediction in predictions})
        fixtures = []
        if weeks:
            fixtures = (
                Fixture.query.filter(Fixture.mode == mode, Fixture.week.in_(weeks))
                .order_by(Fixture.week, Fixture.kickoff, Fixture.id)
                .all()
            )

    check_consistency(fixtures, predictions, f"{mode} history of user {user_id}")
    return weeks, fixtures, predictions


def compute_overall_summary(user_id, mode):
    """
    Compute the overall summary of a user in one game mode.

    A user with no predictions gets zero totals and no best/worst week.
    """
    mode = validate_mode(mode)
    with storage_access("user lookup"):
        validate_user_id(user_id)

    weeks, fixtures, predictions = load_history(user_id, mode)

    fixtures_by_week = defaultdict(list)
    for fixture in fixtures:
        fixtures_by_week[fixture.week].append(fixture)
    predictions_by_week = defaultdict(list)
    for prediction in predictions:
        predictions_by_week[prediction.week].append(prediction)

    weekly_stats = [
        aggregate_week(week, mode, fixtures_by_week[week], predictions_by_week[week])
        for week in weeks
    ]

    counted = [stats for stats in weekly_stats if stats["total_predictions"] > 0]
    total_predictions = sum(stats["total_predictions"] for stats in counted)
    correct_predictions = sum(stats["correct_predictions"] for stats in counted)
    ranking = pick_best_worst_week(weekly_stats)

    summary = {
        "user_id": user_id,
        "mode": mode,
        "total_predictions": total_predictions,
        "correct_predictions": correct_predictions,
        "overall_accuracy": percentage(correct_predictions, total_predictions),
        "total_points": sum(stats["points"] for stats in counted),
        "current_week": weeks[-1] if weeks else None,
        "total_weeks": len(weeks),
        "longest_streak": calculate_longest_streak(weekly_stats),
        "weekly_stats": weekly_stats,
        "best_week": ranking["best"],
        "worst_week": ranking["worst"],
    }

    logger.info(
        f"Summary calculated: user={user_id} mode={mode} "
        f"{correct_predictions}/{total_predictions} ({summary['overall_accuracy']}%), "
        f"{len(weeks)} weeks"
    )
    return summary
