from datetime import datetime, timezone

import pytest

from matchday.utils.exceptions import ValidationError
from matchday.utils.timezone_utils import format_kickoff, kickoff_to_utc


@pytest.mark.parametrize(
    "local,expected",
    [
        ("2023-08-19 18:30", datetime(2023, 8, 19, 16, 30, tzinfo=timezone.utc)),
        ("2023-12-03 20:45", datetime(2023, 12, 3, 19, 45, tzinfo=timezone.utc)),
        (datetime(2024, 3, 31, 15, 0), datetime(2024, 3, 31, 13, 0, tzinfo=timezone.utc)),
    ],
)
def test_local_kickoff_converted_to_utc(app, local, expected):
    assert kickoff_to_utc(local) == expected


def test_aware_kickoff_keeps_its_instant(app):
    kickoff = datetime(2024, 5, 1, 18, 0, tzinfo=timezone.utc)

    assert kickoff_to_utc(kickoff) == kickoff


def test_malformed_kickoff_rejected(app):
    with pytest.raises(ValidationError) as excinfo:
        kickoff_to_utc("19/08/2023 18:30")
    assert excinfo.value.details["field"] == "kickoff"


def test_format_kickoff_in_local_time(app):
    assert format_kickoff(datetime(2023, 8, 19, 16, 30)) == "Sat 19/08 18:30"
    assert format_kickoff(None) == "TBD"


def test_unknown_timezone_falls_back_to_utc(app):
    app.config["TIMEZONE"] = "Mars/Olympus_Mons"

    assert kickoff_to_utc("2023-08-19 18:30").hour == 18
