#!/usr/bin/env python3
"""
Matchday Predictions Management CLI

Command-line management for fixtures, users, predictions and statistics.
"""

import logging
import os

import click
from alembic.util import CommandError
from flask.cli import with_appcontext
from flask_migrate import init as flask_migrate_init
from flask_migrate import migrate, upgrade

from matchday import create_app, db
from matchday.models import Fixture, Prediction, User
from matchday.services import fixture_catalog
from matchday.services.prediction_service import (
    register_user,
    reset_user_data,
    submit_prediction,
)
from matchday.services.progression_service import can_reveal_week
from matchday.services.stats_service import compute_weekly_stats
from matchday.services.summary_service import compute_overall_summary
from matchday.utils.cache_utils import invalidate_catalog_cache
from matchday.utils.exceptions import MatchdayError
from matchday.utils.timezone_utils import format_kickoff
from matchday.utils.validators import GAME_MODES

app = create_app()

mode_option = click.option(
    "--mode",
    type=click.Choice(GAME_MODES),
    default="test",
    show_default=True,
    help="Game mode",
)


@click.group()
def cli():
    """Matchday Predictions Management CLI"""
    pass


# Fixture Catalog Commands
@cli.group()
def fixtures():
    """Fixture catalog commands"""
    pass


@fixtures.command("seed-test")
@with_appcontext
def seed_test():
    """Load the sample test-mode rounds"""
    try:
        created = fixture_catalog.seed_test_fixtures()
    except MatchdayError as e:
        click.echo(f"❌ Error seeding test fixtures: {e.message}")
        return

    if created:
        invalidate_catalog_cache()
        click.echo(f"✅ Seeded {created} test fixtures")
    else:
        click.echo("⚠️  Test fixtures already present, nothing to do")


@fixtures.command("list")
@mode_option
@click.option("--week", type=int, help="Only show one week")
@with_appcontext
def list_fixtures(mode, week):
    """List fixtures of the catalog"""
    try:
        weeks = [week] if week else fixture_catalog.get_weeks(mode)
        for week_number in weeks:
            click.echo(f"Week {week_number}:")
            for fixture in fixture_catalog.get_fixtures_for_week(mode, week_number):
                result = fixture.result or "TBD"
                click.echo(
                    f"  [{fixture.id}] {format_kickoff(fixture.kickoff_utc)} "
                    f"{fixture.result_display} ({fixture.status}, {result})"
                )
    except MatchdayError as e:
        click.echo(f"❌ {e.message}")


@fixtures.command("add")
@mode_option
@click.argument("week", type=int)
@click.argument("home_team")
@click.argument("away_team")
@click.argument("kickoff", type=click.DateTime(formats=["%Y-%m-%d %H:%M"]))
@click.option("--venue", help="Stadium name")
@with_appcontext
def add_fixture(mode, week, home_team, away_team, kickoff, venue):
    """Add a scheduled fixture (kickoff in the app timezone)"""
    try:
        fixture = fixture_catalog.add_fixture(
            mode, week, home_team, away_team, kickoff, venue=venue
        )
    except MatchdayError as e:
        click.echo(f"❌ Error adding fixture: {e.message}")
        return

    invalidate_catalog_cache()
    click.echo(f"✅ Added fixture {fixture.id}: {fixture.match_display}")


@fixtures.command("result")
@click.argument("fixture_id", type=int)
@click.argument("home_score", type=int)
@click.argument("away_score", type=int)
@with_appcontext
def record_result(fixture_id, home_score, away_score):
    """Record the final score of a fixture"""
    try:
        fixture = fixture_catalog.record_result(fixture_id, home_score, away_score)
    except MatchdayError as e:
        click.echo(f"❌ Error recording result: {e.message}")
        return

    invalidate_catalog_cache()
    click.echo(f"✅ {fixture.result_display} ({fixture.result})")


# User Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command("register")
@click.argument("user_id")
@click.option("--display-name", help="Name shown to other players")
@with_appcontext
def register(user_id, display_name):
    """Register a user id issued by the identity service"""
    try:
        registered = register_user(user_id, display_name=display_name)
    except MatchdayError as e:
        click.echo(f"❌ Error registering user: {e.message}")
        return
    click.echo(f"✅ User {registered.id} registered")


@user.command("list")
@with_appcontext
def list_users():
    """List all users"""
    users = User.query.order_by(User.created_at).all()
    if not users:
        click.echo("No users found.")
        return

    click.echo("Users:")
    for u in users:
        live = u.predictions.filter_by(mode="live").count()
        test = u.predictions.filter_by(mode="test").count()
        click.echo(f"  {u.id} {u.display_name or ''} - live: {live}, test: {test}")


# Prediction Commands
@cli.group()
def predictions():
    """Prediction commands"""
    pass


@predictions.command("submit")
@mode_option
@click.argument("user_id")
@click.argument("fixture_id", type=int)
@click.argument("choice")
@with_appcontext
def submit(mode, user_id, fixture_id, choice):
    """Submit a prediction on behalf of a user"""
    try:
        prediction, created = submit_prediction(user_id, fixture_id, choice, mode)
    except MatchdayError as e:
        click.echo(f"❌ {e.kind}: {e.message}")
        return
    action = "Created" if created else "Updated"
    click.echo(f"✅ {action}: fixture {prediction.fixture_id} -> {prediction.choice}")


@predictions.command("reset")
@mode_option
@click.argument("user_id")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@with_appcontext
def reset(mode, user_id, yes):
    """Delete all predictions of a user in one mode"""
    if not yes and not click.confirm(
        f"This will DELETE all {mode} predictions of {user_id}. Are you sure?"
    ):
        click.echo("Cancelled.")
        return

    try:
        deleted = reset_user_data(user_id, mode)
    except MatchdayError as e:
        click.echo(f"❌ Error resetting predictions: {e.message}")
        return
    click.echo(f"✅ Deleted {deleted} {mode} predictions of {user_id}")


# Statistics Commands
@cli.group()
def stats():
    """Statistics commands"""
    pass


@stats.command("week")
@mode_option
@click.argument("user_id")
@click.argument("week", type=int)
@with_appcontext
def week_stats(mode, user_id, week):
    """Show a user's statistics for one week"""
    try:
        result = compute_weekly_stats(user_id, week, mode)
    except MatchdayError as e:
        click.echo(f"❌ {e.message}")
        return

    click.echo(
        f"Week {week} ({mode}): {result['correct_predictions']}/"
        f"{result['total_predictions']} correct ({result['weekly_percentage']}%), "
        f"{result['skipped_count']} skipped, {result['points']} points"
    )
    for entry in result["predictions"]:
        click.echo(
            f"  {entry['home_team']} vs {entry['away_team']}: "
            f"{entry['user_choice'] or '-'} / {entry['actual_result']} ({entry['outcome']})"
        )


@stats.command("reveal")
@mode_option
@click.argument("user_id")
@click.argument("week", type=int)
@with_appcontext
def reveal(mode, user_id, week):
    """Check whether a user may reveal a week"""
    try:
        decision = can_reveal_week(user_id, week, mode)
    except MatchdayError as e:
        click.echo(f"❌ {e.message}")
        return

    if decision["allowed"]:
        click.echo(f"✅ Week {week} can be revealed")
    else:
        click.echo(
            f"🔒 Week {week} is locked: complete week {decision['blocking_week']} first"
        )


@stats.command("summary")
@mode_option
@click.argument("user_id")
@with_appcontext
def summary(mode, user_id):
    """Show a user's overall summary"""
    try:
        result = compute_overall_summary(user_id, mode)
    except MatchdayError as e:
        click.echo(f"❌ {e.message}")
        return

    click.echo(
        f"{user_id} ({mode}): {result['correct_predictions']}/"
        f"{result['total_predictions']} ({result['overall_accuracy']}%), "
        f"{result['total_points']} points over {result['total_weeks']} weeks"
    )
    for label in ("best_week", "worst_week"):
        entry = result[label]
        if entry:
            click.echo(
                f"  {label.replace('_', ' ')}: week {entry['week']} "
                f"({entry['weekly_percentage']}%, {entry['points']} points)"
            )


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Initialize database tables"""
    db.create_all()
    click.echo("✅ Database tables created successfully!")


# Database Migration Commands
@cli.group()
def db_migrate():
    """Alembic migrations through Flask-Migrate"""
    pass


@db_migrate.command("init")
@with_appcontext
def init_migrations():
    """Initialize the migrations repository"""
    if os.path.exists("migrations"):
        click.echo("❌ Migrations directory already exists!")
        return
    try:
        flask_migrate_init()
    except CommandError as e:
        click.echo(f"❌ Error initializing migrations: {e}")
        return
    click.echo("✅ Migrations repository initialized!")


@db_migrate.command("create")
@click.option("-m", "--message", required=True, help="Migration message")
@with_appcontext
def create_migration(message):
    """Autogenerate a migration from the models"""
    try:
        migrate(message=message)
    except CommandError as e:
        click.echo(f"❌ Error creating migration: {e}")
        return
    click.echo(f"✅ Migration created: {message}")


@db_migrate.command("upgrade")
@click.option("--revision", default="head", help="Revision to upgrade to")
@with_appcontext
def apply_migrations(revision):
    """Apply migrations to the database"""
    try:
        upgrade(revision=revision)
    except CommandError as e:
        click.echo(f"❌ Error applying migrations: {e}")
        return
    click.echo(f"✅ Migrations applied to {revision}")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("⚽ Matchday Predictions Status")
    click.echo("=" * 40)
    for mode in GAME_MODES:
        fixture_count = Fixture.query.filter_by(mode=mode).count()
        finished = Fixture.query.filter(
            Fixture.mode == mode, Fixture.result.isnot(None)
        ).count()
        prediction_count = Prediction.query.filter_by(mode=mode).count()
        click.echo(
            f"{mode}: {finished}/{fixture_count} fixtures played, "
            f"{prediction_count} predictions"
        )
    click.echo(f"👥 Users: {User.query.count()}")


if __name__ == "__main__":
    logging.getLogger().setLevel(logging.WARNING)
    with app.app_context():
        cli()
