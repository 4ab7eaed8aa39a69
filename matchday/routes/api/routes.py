from flask import current_app, jsonify
from flask_login import current_user, login_required

from matchday import limiter
from matchday.forms.predictions import PredictionForm, RegisterUserForm
from matchday.routes.api import bp
from matchday.services import fixture_catalog
from matchday.services.prediction_service import (
    get_prediction,
    register_user,
    reset_user_data,
    submit_prediction,
)
from matchday.services.progression_service import can_reveal_week
from matchday.services.stats_service import compute_weekly_stats
from matchday.services.summary_service import compute_overall_summary
from matchday.utils.cache_utils import cached_route
from matchday.utils.exceptions import ValidationError
from matchday.utils.identity import forwarded_user_id

MODE = "<any(live, test):mode>"


def _prediction_rate_limit():
    return current_app.config.get("PREDICTION_RATE_LIMIT", "120 per minute")


def _form_error(form):
    """Turn WTForms errors into a ValidationError"""
    fields = sorted(form.errors)
    return ValidationError(
        f"Invalid request body: {', '.join(fields) or 'no data'}",
        fields={name: list(messages) for name, messages in form.errors.items()},
    )


@bp.route("/health")
def health():
    return jsonify({"status": "ok"})


@bp.route("/users/me", methods=["PUT"])
def register_me():
    """Sync the forwarded user into the prediction service"""
    form = RegisterUserForm()
    if not form.validate():
        raise _form_error(form)

    user = register_user(forwarded_user_id(), display_name=form.display_name.data)
    return jsonify(user.to_dict())


@bp.route(f"/{MODE}/weeks")
@cached_route(timeout=3600, key_prefix="catalog_weeks")
def weeks(mode):
    """Weeks that have fixtures in the catalog"""
    return {"mode": mode, "weeks": fixture_catalog.get_weeks(mode)}


@bp.route(f"/{MODE}/fixtures/week/<int:week>")
@cached_route(timeout=300, key_prefix="catalog_fixtures")
def week_fixtures(mode, week):
    """Fixtures of a round"""
    fixtures = fixture_catalog.get_fixtures_for_week(mode, week)
    return {
        "mode": mode,
        "week": week,
        "fixtures": [fixture.to_dict() for fixture in fixtures],
    }


@bp.route(f"/{MODE}/predictions", methods=["POST"])
@login_required
@limiter.limit(_prediction_rate_limit)
def create_prediction(mode):
    """Submit or overwrite a prediction

    409 when a live fixture is closed or an existing pick would become SKIP.
    """
    form = PredictionForm()
    if not form.validate_on_submit():
        raise _form_error(form)

    prediction, created = submit_prediction(
        current_user.id, form.fixture_id.data, form.choice.data, mode
    )
    return jsonify(prediction.to_dict()), 201 if created else 200


@bp.route(f"/{MODE}/predictions/<int:fixture_id>")
@login_required
def prediction_detail(mode, fixture_id):
    prediction = get_prediction(current_user.id, fixture_id, mode)
    return jsonify(prediction.to_dict())


@bp.route(f"/{MODE}/predictions", methods=["DELETE"])
@login_required
def reset_predictions(mode):
    """Purge every prediction of the current user in this mode"""
    deleted = reset_user_data(current_user.id, mode)
    return jsonify({"mode": mode, "deleted": deleted})


@bp.route(f"/{MODE}/stats/week/<int:week>")
@login_required
def weekly_stats(mode, week):
    return jsonify(compute_weekly_stats(current_user.id, week, mode))


@bp.route(f"/{MODE}/reveal/<int:week>")
@login_required
def reveal_check(mode, week):
    """Whether the current user may reveal results of a week"""
    return jsonify(can_reveal_week(current_user.id, week, mode))


@bp.route(f"/{MODE}/summary")
@login_required
def summary(mode):
    return jsonify(compute_overall_summary(current_user.id, mode))
