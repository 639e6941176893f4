"""Routes for the admin blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import current_app, g

from devconnect.auth.decorators import login_required
from devconnect.project.services import ProjectService
from devconnect.user.services import UserService
from devconnect.utils import success

from . import bp
from .services import AdminService


@bp.route("/users", methods=["GET"])
@login_required(admin_required=True)
def list_users() -> Any:
    """List every user, blocked ones included."""
    db = firestore.client()
    users = UserService.list_users(db, include_blocked=True)
    return success(users, count=len(users))


@bp.route("/users/<string:user_id>/block", methods=["PUT"])
@login_required(admin_required=True)
def block_user(user_id: str) -> Any:
    """Toggle whether a user is blocked."""
    db = firestore.client()
    user = AdminService.toggle_block(db, g.user["uid"], user_id)
    state = "blocked" if user["isBlocked"] else "unblocked"
    current_app.logger.info(f"Admin {g.user['uid']} {state} user {user_id}")
    return success(user, message=f"User {state} successfully")


@bp.route("/users/<string:user_id>", methods=["DELETE"])
@login_required(admin_required=True)
def delete_user(user_id: str) -> Any:
    db = firestore.client()
    AdminService.delete_user(db, g.user["uid"], user_id)
    current_app.logger.info(f"Admin {g.user['uid']} deleted user {user_id}")
    return success(message="User deleted successfully")


@bp.route("/projects", methods=["GET"])
@login_required(admin_required=True)
def list_projects() -> Any:
    """List every project, inactive ones included."""
    db = firestore.client()
    projects = ProjectService.populate(
        db, ProjectService.list_projects(db, active_only=False)
    )
    return success(projects, count=len(projects))


@bp.route("/projects/<string:project_id>", methods=["DELETE"])
@login_required(admin_required=True)
def delete_project(project_id: str) -> Any:
    db = firestore.client()
    ProjectService.delete_project(db, project_id, g.user)
    return success(message="Project deleted successfully")
