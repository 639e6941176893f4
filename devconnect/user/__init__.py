"""Users blueprint for developer profiles."""

from flask import Blueprint

bp = Blueprint("user", __name__, url_prefix="/api/users")

from . import routes  # noqa: E402, F401
