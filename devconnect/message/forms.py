"""Forms for the message blueprint."""

from wtforms import StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Optional, URL

from devconnect.constants import MESSAGE_TYPES
from devconnect.forms import ApiForm


class MessageForm(ApiForm):
    """Body of POST /api/messages."""

    roomId = StringField("Room", validators=[DataRequired()])
    message = TextAreaField("Message", validators=[DataRequired()])
    messageType = StringField(
        "Type", default="text", validators=[Optional(), AnyOf(list(MESSAGE_TYPES))]
    )
    fileUrl = StringField("File", validators=[Optional(), URL()])
