from flask_wtf import FlaskForm
from wtforms import IntegerField, SelectField, StringField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional

from matchday.utils.scoring import CHOICES


def normalize_choice(value):
    if value is None:
        return value
    return str(value).strip().upper()


class PredictionForm(FlaskForm):
    """JSON body of a prediction submission"""

    class Meta:
        # Identity comes from the forwarded header, never a session cookie
        csrf = False

    fixture_id = IntegerField(
        "Fixture", validators=[InputRequired(), NumberRange(min=1)]
    )
    choice = SelectField(
        "Choice",
        choices=[(choice, choice) for choice in CHOICES],
        validators=[DataRequired()],
        filters=[normalize_choice],
        validate_choice=True,
    )


class RegisterUserForm(FlaskForm):
    class Meta:
        csrf = False

    display_name = StringField("Display Name", validators=[Optional(), Length(max=100)])
