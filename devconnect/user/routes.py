"""Routes for the user blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import g, request

from devconnect.auth.decorators import login_required
from devconnect.utils import json_body, success

from . import bp
from .services import UserService


@bp.route("", methods=["GET"])
@login_required
def list_users() -> Any:
    """List developers who are not blocked."""
    db = firestore.client()
    users = UserService.list_users(db)
    return success(users, count=len(users))


@bp.route("/search", methods=["GET"])
@login_required
def search_users() -> Any:
    """Search developers by skills and experience."""
    db = firestore.client()
    users = UserService.search_users(
        db,
        skills=request.args.get("skills"),
        experience=request.args.get("experience"),
    )
    return success(users, count=len(users))


@bp.route("/profile", methods=["PUT"])
@login_required
def update_profile() -> Any:
    """Update the current user's profile."""
    db = firestore.client()
    user = UserService.update_profile(db, g.user["uid"], json_body())
    return success(user)


@bp.route("/<string:user_id>", methods=["GET"])
def get_user(user_id: str) -> Any:
    """Show a developer's public profile."""
    db = firestore.client()
    return success(UserService.get_user(db, user_id))
