"""Routes for the project blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import g

from devconnect.auth.decorators import login_required
from devconnect.notification.services import NotificationDispatcher
from devconnect.realtime import get_relay
from devconnect.utils import json_body, success, validate_form

from . import bp
from .forms import JoinRequestForm, RespondForm, StatusForm
from .services import ProjectService


def _populated(db: Any, project: dict[str, Any]) -> dict[str, Any]:
    return ProjectService.populate(db, [project])[0]


@bp.route("", methods=["GET"])
@login_required
def list_projects() -> Any:
    """List active projects, newest first."""
    db = firestore.client()
    projects = ProjectService.populate(db, ProjectService.list_projects(db))
    return success(projects, count=len(projects))


@bp.route("/<string:project_id>", methods=["GET"])
@login_required
def get_project(project_id: str) -> Any:
    """Show a single project."""
    db = firestore.client()
    return success(_populated(db, ProjectService.get_project(db, project_id)))


@bp.route("", methods=["POST"])
@login_required
def create_project() -> Any:
    """Create a project owned by the current user."""
    db = firestore.client()
    dispatcher = NotificationDispatcher(db, get_relay())
    project = ProjectService.create_project(db, dispatcher, json_body(), g.user)
    return success(_populated(db, project), status_code=201)


@bp.route("/<string:project_id>", methods=["PUT"])
@login_required
def update_project(project_id: str) -> Any:
    """Edit a project's details."""
    db = firestore.client()
    project = ProjectService.update_project(db, project_id, g.user["uid"], json_body())
    return success(_populated(db, project))


@bp.route("/<string:project_id>", methods=["DELETE"])
@login_required
def delete_project(project_id: str) -> Any:
    """Delete a project."""
    db = firestore.client()
    ProjectService.delete_project(db, project_id, g.user)
    return success(message="Project deleted successfully")


@bp.route("/<string:project_id>/join", methods=["POST"])
@login_required
def request_to_join(project_id: str) -> Any:
    """Ask to join a project in a given role."""
    form = validate_form(JoinRequestForm)
    db = firestore.client()
    dispatcher = NotificationDispatcher(db, get_relay())
    project = ProjectService.request_to_join(
        db, dispatcher, project_id, g.user, form.role.data, form.message.data
    )
    return success(_populated(db, project), message="Join request sent successfully")


@bp.route("/<string:project_id>/respond", methods=["PUT"])
@login_required
def respond_to_request(project_id: str) -> Any:
    """Accept or reject a join request."""
    form = validate_form(RespondForm)
    db = firestore.client()
    dispatcher = NotificationDispatcher(db, get_relay())
    project = ProjectService.respond_to_request(
        db,
        dispatcher,
        project_id,
        g.user["uid"],
        form.requestId.data,
        form.status.data,
    )
    return success(_populated(db, project))


@bp.route("/<string:project_id>/status", methods=["PUT"])
@login_required
def update_status(project_id: str) -> Any:
    """Move a project to another status."""
    form = validate_form(StatusForm)
    db = firestore.client()
    project = ProjectService.update_status(
        db, project_id, g.user["uid"], form.status.data
    )
    return success(_populated(db, project))
