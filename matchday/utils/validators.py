"""
Input validation for the service boundary.

Everything a caller passes in is checked here before any read or write
happens, so a rejected request never leaves partial state behind.
"""

from flask import current_app

from matchday.utils.exceptions import ValidationError

LIVE_MODE = "live"
TEST_MODE = "test"
GAME_MODES = (LIVE_MODE, TEST_MODE)


def validate_mode(mode):
    """Return the normalized game mode or raise ValidationError"""
    normalized = str(mode or "").strip().lower()
    if normalized not in GAME_MODES:
        raise ValidationError(
            f"Invalid game mode '{mode}'. Valid modes: {', '.join(GAME_MODES)}",
            field="mode",
        )
    return normalized


def validate_week(week):
    """Return the week as an int within 1..MAX_WEEK or raise ValidationError"""
    max_week = current_app.config.get("MAX_WEEK", 38)

    if isinstance(week, bool):
        raise ValidationError("Week must be an integer", field="week")
    try:
        week = int(week)
    except (TypeError, ValueError):
        raise ValidationError(f"Week must be an integer, got '{week}'", field="week")

    if week < 1 or week > max_week:
        raise ValidationError(
            f"Week {week} is out of range (1-{max_week})", field="week"
        )
    return week


def validate_user_id(user_id):
    """Check the id is well formed and belongs to a registered user"""
    from matchday.models import User

    if not user_id or not isinstance(user_id, str) or len(user_id) > 36:
        raise ValidationError("Invalid user id", field="user_id")

    user = User.find(user_id)
    if user is None:
        raise ValidationError(f"Unknown user '{user_id}'", field="user_id")
    return user
