"""
Progression Gate

Decides whether a user may reveal the results of a round. Rounds must be
completed in order: revealing week N needs every week from 2 to N-1 to have
reached the configured prediction quota. Week 1 never counts as a
prerequisite. The quota does not depend on how many fixtures a round has, so
fixtures added to a completed round never lock later weeks again.

Nothing is cached; the decision is re-derived from the predictions on every
call.
"""

import logging

from flask import current_app

from matchday.services.stats_service import compute_weekly_stats
from matchday.services.storage import storage_access
from matchday.utils.validators import validate_mode, validate_user_id, validate_week

logger = logging.getLogger(__name__)

FIRST_GATED_WEEK = 2


def required_predictions():
    """Non-skip predictions needed to complete a round"""
    return current_app.config.get("REQUIRED_PREDICTIONS_PER_WEEK", 10)


def is_week_complete(stats):
    return stats["total_predictions"] >= required_predictions()


def can_reveal_week(user_id, target_week, mode):
    """
    Check whether a user may reveal results for target_week.

    Returns:
        dict with allowed, blocking_week (the lowest unfinished prerequisite,
        or None), target_week and required_per_week
    """
    mode = validate_mode(mode)
    target_week = validate_week(target_week)
    with storage_access("user lookup"):
        validate_user_id(user_id)

    decision = {
        "target_week": target_week,
        "mode": mode,
        "allowed": True,
        "blocking_week": None,
        "required_per_week": required_predictions(),
    }

    for week in range(FIRST_GATED_WEEK, target_week):
        stats = compute_weekly_stats(user_id, week, mode)
        if not is_week_complete(stats):
            decision["allowed"] = False
            decision["blocking_week"] = week
            logger.info(
                f"Reveal blocked: user={user_id} mode={mode} target={target_week} "
                f"blocking_week={week} ({stats['total_predictions']}/"
                f"{required_predictions()})"
            )
            return decision

    logger.debug(f"Reveal allowed: user={user_id} mode={mode} target={target_week}")
    return decision
