"""Forms for the notification blueprint."""

from wtforms import StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Optional

from devconnect.constants import NOTIFICATION_TYPES, RELATED_MODELS
from devconnect.forms import ApiForm


class NotificationForm(ApiForm):
    """Body of POST /api/notifications."""

    recipient = StringField("Recipient", validators=[DataRequired()])
    type = StringField(
        "Type", validators=[DataRequired(), AnyOf(list(NOTIFICATION_TYPES))]
    )
    title = StringField("Title", validators=[DataRequired()])
    message = TextAreaField("Message", validators=[DataRequired()])
    relatedId = StringField("Related", validators=[Optional()])
    relatedModel = StringField(
        "Related Model", validators=[Optional(), AnyOf(list(RELATED_MODELS))]
    )
