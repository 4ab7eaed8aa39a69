"""
Kickoff times

Fixtures store kickoffs in UTC. The sample rounds and the CLI give kickoffs in
the league's local time (TIMEZONE, Europe/Rome by default) and get them back
in local time for display.
"""

from datetime import datetime

import pytz
from flask import current_app

from matchday.utils.exceptions import ValidationError

KICKOFF_FORMAT = "%Y-%m-%d %H:%M"


def get_app_timezone():
    """Get the league's configured timezone, UTC if the name is unknown"""
    try:
        return pytz.timezone(current_app.config.get("TIMEZONE", "UTC"))
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def kickoff_to_utc(kickoff):
    """
    Turn a local kickoff into an aware UTC datetime.

    Accepts "YYYY-MM-DD HH:MM" text or a datetime. Naive values are local
    time, so summer and winter kickoffs get the right offset.
    """
    if isinstance(kickoff, str):
        try:
            kickoff = datetime.strptime(kickoff.strip(), KICKOFF_FORMAT)
        except ValueError:
            raise ValidationError(
                f"Kickoff '{kickoff}' must look like 2024-10-06 20:45", field="kickoff"
            )

    if kickoff.tzinfo is None:
        kickoff = get_app_timezone().localize(kickoff)
    return kickoff.astimezone(pytz.UTC)


def format_kickoff(kickoff, format_str="%a %d/%m %H:%M"):
    """Show a stored kickoff in local time; naive values are UTC"""
    if kickoff is None:
        return "TBD"

    if kickoff.tzinfo is None:
        kickoff = pytz.UTC.localize(kickoff)
    return kickoff.astimezone(get_app_timezone()).strftime(format_str)
