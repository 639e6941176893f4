"""Messages blueprint for chat history and sending."""

from flask import Blueprint

bp = Blueprint("message", __name__, url_prefix="/api/messages")

from . import routes  # noqa: E402, F401
