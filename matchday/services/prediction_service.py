"""
Prediction Store operations

One prediction per (user, fixture). A resubmission overwrites the previous
choice; two racing submissions resolve last-write-wins on the unique
constraint.
"""

import logging
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy.exc import IntegrityError

from matchday import db
from matchday.models import Prediction, User
from matchday.services.fixture_catalog import get_fixture
from matchday.services.storage import storage_access
from matchday.utils.exceptions import ConflictError, NotFoundError, ValidationError
from matchday.utils.scoring import SKIP, parse_choice
from matchday.utils.validators import LIVE_MODE, validate_mode, validate_user_id

logger = logging.getLogger(__name__)


def register_user(user_id, display_name=None):
    """Create the user if needed, update the display name otherwise"""
    if not user_id or not isinstance(user_id, str) or len(user_id) > 36:
        raise ValidationError("Invalid user id", field="user_id")

    with storage_access("user registration"):
        user = User.find(user_id)
        if user is None:
            user = User(id=user_id, display_name=display_name)
            db.session.add(user)
            logger.info(f"User registered: {user_id}")
        elif display_name:
            user.display_name = display_name
        db.session.commit()
    return user


def _resolve_fixture(fixture_id, mode):
    if isinstance(fixture_id, bool):
        raise ValidationError("Fixture id must be an integer", field="fixture_id")
    try:
        fixture_id = int(fixture_id)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Fixture id must be an integer, got '{fixture_id}'", field="fixture_id"
        )

    fixture = get_fixture(fixture_id, mode)
    if fixture is None:
        raise ValidationError(
            f"Unknown fixture {fixture_id} in {mode} mode", field="fixture_id"
        )
    return fixture


def _check_deadline(fixture, mode):
    """Live fixtures only accept predictions until kickoff minus the buffer"""
    if mode != LIVE_MODE:
        return

    buffer_minutes = current_app.config.get("PREDICTION_DEADLINE_BUFFER_MINUTES", 0)
    if not fixture.is_open_for_predictions(buffer_minutes):
        raise ConflictError(
            f"Predictions for {fixture.match_display} are closed",
            fixture_id=fixture.id,
            status=fixture.status,
            deadline=fixture.prediction_deadline(buffer_minutes).isoformat(),
        )


def _apply_choice(prediction, choice):
    """Overwrite a stored choice, refusing to turn a pick back into a skip"""
    if choice == SKIP and prediction.choice != SKIP:
        raise ConflictError(
            "A fixture that already has a pick cannot be skipped",
            fixture_id=prediction.fixture_id,
            current_choice=prediction.choice,
        )
    prediction.choice = choice
    prediction.submitted_at = datetime.now(timezone.utc)


def submit_prediction(user_id, fixture_id, choice, mode):
    """
    Record a user's choice for a fixture.

    Validation runs before any write: unknown user or fixture and malformed
    choices raise ValidationError, closed live fixtures raise ConflictError.
    Submitting the same choice twice leaves a single unchanged row.

    Returns:
        (prediction, created) where created is False for an overwrite
    """
    mode = validate_mode(mode)
    choice = parse_choice(choice)
    with storage_access("user lookup"):
        validate_user_id(user_id)
    fixture = _resolve_fixture(fixture_id, mode)
    _check_deadline(fixture, mode)

    with storage_access("prediction upsert"):
        prediction = Prediction.query.filter_by(
            user_id=user_id, fixture_id=fixture.id
        ).first()
        created = prediction is None

        if created:
            prediction = Prediction(
                user_id=user_id,
                fixture_id=fixture.id,
                mode=mode,
                week=fixture.week,
                choice=choice,
                submitted_at=datetime.now(timezone.utc),
            )
            db.session.add(prediction)
        else:
            _apply_choice(prediction, choice)

        try:
            db.session.commit()
        except IntegrityError:
            # Another request inserted the row first; overwrite it instead
            db.session.rollback()
            prediction = Prediction.query.filter_by(
                user_id=user_id, fixture_id=fixture.id
            ).one()
            _apply_choice(prediction, choice)
            db.session.commit()
            created = False

    logger.info(
        f"Prediction {'created' if created else 'updated'}: user={user_id} "
        f"mode={mode} fixture={fixture.id} week={fixture.week} choice={choice}"
    )
    return prediction, created


def get_prediction(user_id, fixture_id, mode):
    """Get the user's prediction for one fixture or raise NotFoundError"""
    mode = validate_mode(mode)
    with storage_access("user lookup"):
        validate_user_id(user_id)
    fixture = _resolve_fixture(fixture_id, mode)

    with storage_access("prediction lookup"):
        prediction = Prediction.query.filter_by(
            user_id=user_id, fixture_id=fixture.id
        ).first()

    if prediction is None:
        raise NotFoundError(
            f"No prediction for fixture {fixture.id}", fixture_id=fixture.id
        )
    return prediction


def reset_user_data(user_id, mode):
    """
    Delete every prediction of a user in one game mode.

    The other mode is never touched. Returns the number of predictions removed.
    """
    mode = validate_mode(mode)
    with storage_access("user lookup"):
        validate_user_id(user_id)

    logger.info(f"Resetting {mode} data for user {user_id}...")
    with storage_access("prediction reset"):
        deleted = Prediction.query.filter_by(user_id=user_id, mode=mode).delete(
            synchronize_session=False
        )
        db.session.commit()

    logger.info(
        f"Reset completed for user {user_id} ({mode}): {deleted} predictions deleted"
    )
    return deleted
