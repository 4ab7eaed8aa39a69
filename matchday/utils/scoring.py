"""
Scoring Engine for matchday predictions

This module handles scoring of individual predictions. For per-week
aggregation see matchday.services.stats_service, for overall summaries see
matchday.services.summary_service.
"""

from collections import namedtuple

from flask import current_app

from matchday.utils.exceptions import ValidationError

HOME = "1"
DRAW = "X"
AWAY = "2"
SKIP = "SKIP"

RESULTS = (HOME, DRAW, AWAY)
CHOICES = RESULTS + (SKIP,)

CHOICE_LABELS = {
    HOME: "Home Win",
    DRAW: "Draw",
    AWAY: "Away Win",
    SKIP: "Skipped",
}

ScoreResult = namedtuple("ScoreResult", ["is_correct"])


def parse_choice(value):
    """
    Normalize a choice coming from a client.

    Accepts '1', 'X', '2' and 'SKIP' in any case. Integers 1 and 2 are accepted
    too since some clients send the home/away picks as numbers.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError("Choice is required", field="choice")

    normalized = str(value).strip().upper()
    if normalized not in CHOICES:
        raise ValidationError(
            f"Invalid choice '{value}'. Valid choices: {', '.join(CHOICES)}",
            field="choice",
        )
    return normalized


def score(choice, result):
    """
    Score a single prediction against a fixture result.

    Returns:
        ScoreResult(is_correct=None) while the match has no result or when
        the choice is SKIP, otherwise ScoreResult(choice == result).
    """
    if choice not in CHOICES:
        raise ValidationError(f"Invalid choice '{choice}'", field="choice")
    if result is not None and result not in RESULTS:
        raise ValidationError(f"Invalid result '{result}'", field="result")

    if result is None or choice == SKIP:
        return ScoreResult(is_correct=None)

    return ScoreResult(is_correct=choice == result)


def result_from_scores(home_score, away_score):
    """Derive the 1/X/2 result of a match from its final score"""
    if home_score is None or away_score is None:
        return None
    if home_score > away_score:
        return HOME
    if home_score < away_score:
        return AWAY
    return DRAW


def percentage(correct, total):
    """Percentage rounded half up to an int, 0 when there is nothing to count"""
    if total <= 0:
        return 0
    return (correct * 200 + total) // (2 * total)


def points_for(correct):
    """Points earned for a number of correct predictions"""
    return correct * current_app.config.get("POINTS_PER_CORRECT", 1)
