from flask import g

from devconnect.utils import success

from . import bp
from .decorators import login_required


@bp.route("/me", methods=["GET"])
@login_required
def me():
    """Return the user the bearer token belongs to."""
    return success(g.user)
