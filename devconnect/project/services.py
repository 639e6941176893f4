"""Service layer for projects and the join-request workflow."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from devconnect.constants import (
    JOIN_ACCEPTED,
    JOIN_DECISIONS,
    JOIN_PENDING,
    PROJECTS_COLLECTION,
)
from devconnect.errors import (
    DuplicateRequestError,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from devconnect.user.services import UserService
from devconnect.utils import snapshot_to_dict, sort_by_created, utcnow

from .models import (
    clean_status,
    create_project_document,
    new_collaborator,
    new_join_request,
    project_updates,
)

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client

    from devconnect.notification.services import NotificationDispatcher


class ProjectService:
    """Handles business logic and data access for projects.

    Every mutation reads the whole project document, changes it in memory and
    writes the touched fields back. There is no locking, so two concurrent
    writers to the same project race and the last one wins.
    """

    @staticmethod
    def get_project(db: Client, project_id: str) -> dict[str, Any]:
        """Fetch a project, raising NotFoundError if it does not exist."""
        project_ref = db.collection(PROJECTS_COLLECTION).document(project_id)
        project = snapshot_to_dict(cast("DocumentSnapshot", project_ref.get()))
        if project is None:
            raise NotFoundError("Project not found")
        return project

    @staticmethod
    def list_projects(db: Client, active_only: bool = True) -> list[dict[str, Any]]:
        """List projects, newest first."""
        query = db.collection(PROJECTS_COLLECTION)
        if active_only:
            query = query.where(filter=firestore.FieldFilter("isActive", "==", True))

        projects = []
        for doc in query.stream():
            project = snapshot_to_dict(doc)
            if project is not None:
                projects.append(project)
        return sort_by_created(projects)

    @staticmethod
    def populate(db: Client, projects: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Replace the user ids held by projects with user summaries.

        Owners, collaborators and requesters of every project are fetched in
        one round trip.
        """
        user_ids: set[str] = set()
        for project in projects:
            user_ids.add(project.get("owner"))
            user_ids.update(c.get("user") for c in project.get("collaborators", []))
            user_ids.update(r.get("user") for r in project.get("joinRequests", []))
        users = UserService.get_user_summaries(db, user_ids)

        def summary(uid: str | None) -> dict[str, Any] | None:
            return users.get(uid, {"id": uid}) if uid else None

        populated = []
        for project in projects:
            data = dict(project)
            data["owner"] = summary(project.get("owner"))
            data["collaborators"] = [
                {**c, "user": summary(c.get("user"))}
                for c in project.get("collaborators", [])
            ]
            data["joinRequests"] = [
                {**r, "user": summary(r.get("user"))}
                for r in project.get("joinRequests", [])
            ]
            populated.append(data)
        return populated

    @staticmethod
    def create_project(
        db: Client,
        dispatcher: NotificationDispatcher,
        data: dict[str, Any],
        owner: dict[str, Any],
    ) -> dict[str, Any]:
        """Create a project owned by ``owner`` and announce it to other users."""
        project_data = create_project_document(data, owner["uid"])
        project_ref = db.collection(PROJECTS_COLLECTION).document()
        project_ref.set(project_data)
        project = {**project_data, "id": project_ref.id}

        dispatcher.project_created(project, owner)
        return project

    @staticmethod
    def update_project(
        db: Client, project_id: str, user_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        """Apply a partial update; only the owner may edit a project."""
        project = ProjectService.get_project(db, project_id)
        if project.get("owner") != user_id:
            raise NotAuthorizedError("Not authorized to update this project")

        updates = project_updates(data)
        db.collection(PROJECTS_COLLECTION).document(project_id).update(updates)
        project.update(updates)
        return project

    @staticmethod
    def delete_project(db: Client, project_id: str, user: dict[str, Any]) -> None:
        """Delete a project; allowed for its owner and for admins."""
        project = ProjectService.get_project(db, project_id)
        if project.get("owner") != user["uid"] and not user.get("isAdmin"):
            raise NotAuthorizedError("Not authorized to delete this project")
        db.collection(PROJECTS_COLLECTION).document(project_id).delete()

    @staticmethod
    def request_to_join(
        db: Client,
        dispatcher: NotificationDispatcher,
        project_id: str,
        user: dict[str, Any],
        role: str,
        message: str | None = None,
    ) -> dict[str, Any]:
        """Add a pending join request for ``user`` and notify the owner.

        A user gets a single join request per project: any earlier request,
        including a rejected one, blocks another.
        """
        if not role:
            raise ValidationError("Please choose the role you want to join as")

        project = ProjectService.get_project(db, project_id)
        join_requests = list(project.get("joinRequests", []))
        if any(r.get("user") == user["uid"] for r in join_requests):
            raise DuplicateRequestError()

        join_requests.append(new_join_request(user["uid"], role, message))
        updates = {"joinRequests": join_requests, "updatedAt": utcnow()}
        db.collection(PROJECTS_COLLECTION).document(project_id).update(updates)
        project.update(updates)

        dispatcher.join_requested(project, user)
        return project

    @staticmethod
    def respond_to_request(
        db: Client,
        dispatcher: NotificationDispatcher,
        project_id: str,
        owner_id: str,
        request_id: str,
        decision: str,
    ) -> dict[str, Any]:
        """Accept or reject a pending join request.

        Accepting always adds the requester to the collaborators and fills the
        first open required role with the same name, if there is one.
        """
        if decision not in JOIN_DECISIONS:
            raise ValidationError(
                f"Invalid status '{decision}'. Expected one of: "
                f"{', '.join(JOIN_DECISIONS)}"
            )

        project = ProjectService.get_project(db, project_id)
        if project.get("owner") != owner_id:
            raise NotAuthorizedError("Not authorized to respond to join requests")

        join_requests = [dict(r) for r in project.get("joinRequests", [])]
        join_request = next(
            (r for r in join_requests if r.get("id") == request_id), None
        )
        if join_request is None:
            raise NotFoundError("Join request not found")
        if join_request.get("status") != JOIN_PENDING:
            raise ValidationError(
                f"Join request has already been {join_request.get('status')}"
            )

        updates: dict[str, Any] = {}
        if decision == JOIN_ACCEPTED:
            requester_id = join_request["user"]
            role = join_request.get("role")

            collaborators = list(project.get("collaborators", []))
            collaborators.append(new_collaborator(requester_id, role))
            updates["collaborators"] = collaborators

            required_roles = [dict(r) for r in project.get("requiredRoles", [])]
            for required_role in required_roles:
                if required_role.get("role") != role:
                    continue
                if not required_role.get("filled"):
                    required_role["filled"] = True
                    required_role["filledBy"] = requester_id
                    break
            updates["requiredRoles"] = required_roles

        join_request["status"] = decision
        updates["joinRequests"] = join_requests
        updates["updatedAt"] = utcnow()

        db.collection(PROJECTS_COLLECTION).document(project_id).update(updates)
        project.update(updates)

        dispatcher.join_responded(project, join_request, decision)
        return project

    @staticmethod
    def update_status(
        db: Client, project_id: str, user_id: str, status: str
    ) -> dict[str, Any]:
        """Set the project status; the owner and collaborators may do this.

        Any status may follow any other.
        """
        status = clean_status(status)
        project = ProjectService.get_project(db, project_id)

        is_owner = project.get("owner") == user_id
        is_collaborator = any(
            c.get("user") == user_id for c in project.get("collaborators", [])
        )
        if not is_owner and not is_collaborator:
            raise NotAuthorizedError("Not authorized to update project status")

        updates = {"status": status, "updatedAt": utcnow()}
        db.collection(PROJECTS_COLLECTION).document(project_id).update(updates)
        project.update(updates)
        return project
