"""Forms for the project blueprint."""

from wtforms import StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, Optional

from devconnect.constants import JOIN_DECISIONS, PROJECT_STATUSES
from devconnect.forms import ApiForm


class JoinRequestForm(ApiForm):
    """Body of POST /api/projects/<id>/join."""

    role = StringField("Role", validators=[DataRequired()])
    message = TextAreaField("Message", validators=[Optional(), Length(max=1000)])


class RespondForm(ApiForm):
    """Body of PUT /api/projects/<id>/respond."""

    requestId = StringField("Request", validators=[DataRequired()])
    status = StringField(
        "Decision", validators=[DataRequired(), AnyOf(list(JOIN_DECISIONS))]
    )


class StatusForm(ApiForm):
    """Body of PUT /api/projects/<id>/status."""

    status = StringField(
        "Status", validators=[DataRequired(), AnyOf(list(PROJECT_STATUSES))]
    )
