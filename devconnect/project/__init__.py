"""Projects blueprint: project listings and the join-request workflow."""

from flask import Blueprint

bp = Blueprint("project", __name__, url_prefix="/api/projects")

from . import routes  # noqa: E402, F401
from .services import ProjectService  # noqa: E402

__all__ = ["ProjectService", "routes"]
