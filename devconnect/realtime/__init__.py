"""Real-time blueprint: Server-Sent Event streams over the relay."""

from flask import Blueprint, current_app

bp = Blueprint("realtime", __name__, url_prefix="/api/realtime")

# Endpoints that also take the token from the query string
STREAM_ENDPOINTS = ("realtime.join_room", "realtime.join_user_room")


def get_relay():
    """Return the relay the app factory attached to the current app."""
    return current_app.extensions["relay"]


from . import routes  # noqa: E402, F401
