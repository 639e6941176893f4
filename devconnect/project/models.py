"""Document builders for projects and their embedded join requests."""

from __future__ import annotations

import re
import uuid
from typing import Any

from devconnect.constants import (
    DEFAULT_PROJECT_STATUS,
    JOIN_PENDING,
    PROJECT_ROLES,
    PROJECT_STATUSES,
)
from devconnect.errors import ValidationError
from devconnect.utils import utcnow

EDITABLE_FIELDS = (
    "title",
    "description",
    "techStack",
    "requiredRoles",
    "status",
    "isActive",
)


def slugify(title: str) -> str:
    """Derive a URL slug from a project title."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def clean_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Please add a project title")
    return title.strip()


def clean_description(description: Any) -> str:
    if not isinstance(description, str) or not description.strip():
        raise ValidationError("Please add a project description")
    return description


def clean_status(status: Any) -> str:
    if status not in PROJECT_STATUSES:
        raise ValidationError(
            f"Invalid status '{status}'. Expected one of: {', '.join(PROJECT_STATUSES)}"
        )
    return status


def clean_tech_stack(tech_stack: Any) -> list[str]:
    """Accept a list of strings or a comma separated string."""
    if tech_stack is None:
        return []
    if isinstance(tech_stack, str):
        return [t.strip() for t in tech_stack.split(",") if t.strip()]
    if not isinstance(tech_stack, list) or not all(
        isinstance(t, str) for t in tech_stack
    ):
        raise ValidationError("techStack must be a list of strings")
    return [t.strip() for t in tech_stack if t.strip()]


def clean_required_roles(required_roles: Any) -> list[dict[str, Any]]:
    """Validate required roles given as role names or role objects."""
    if required_roles is None:
        return []
    if not isinstance(required_roles, list):
        raise ValidationError("requiredRoles must be a list")

    roles = []
    for entry in required_roles:
        if isinstance(entry, str):
            entry = {"role": entry}
        if not isinstance(entry, dict):
            raise ValidationError("Each required role must be an object")
        role = entry.get("role")
        if role not in PROJECT_ROLES:
            raise ValidationError(
                f"Invalid role '{role}'. Expected one of: {', '.join(PROJECT_ROLES)}"
            )
        roles.append(
            {
                "role": role,
                "filled": bool(entry.get("filled", False)),
                "filledBy": entry.get("filledBy"),
            }
        )
    return roles


def create_project_document(data: dict[str, Any], owner_id: str) -> dict[str, Any]:
    """Build a validated project document owned by ``owner_id``."""
    title = clean_title(data.get("title"))
    now = utcnow()
    return {
        "title": title,
        "slug": slugify(title),
        "description": clean_description(data.get("description")),
        "owner": owner_id,
        "techStack": clean_tech_stack(data.get("techStack")),
        "requiredRoles": clean_required_roles(data.get("requiredRoles")),
        "status": clean_status(data.get("status") or DEFAULT_PROJECT_STATUS),
        "collaborators": [],
        "joinRequests": [],
        "isActive": True,
        "createdAt": now,
        "updatedAt": now,
    }


def project_updates(data: dict[str, Any]) -> dict[str, Any]:
    """Validate a partial update, keeping only the editable fields present."""
    updates: dict[str, Any] = {}
    if "title" in data:
        updates["title"] = clean_title(data["title"])
        updates["slug"] = slugify(updates["title"])
    if "description" in data:
        updates["description"] = clean_description(data["description"])
    if "techStack" in data:
        updates["techStack"] = clean_tech_stack(data["techStack"])
    if "requiredRoles" in data:
        updates["requiredRoles"] = clean_required_roles(data["requiredRoles"])
    if "status" in data:
        updates["status"] = clean_status(data["status"])
    if "isActive" in data:
        if not isinstance(data["isActive"], bool):
            raise ValidationError("isActive must be a boolean")
        updates["isActive"] = data["isActive"]
    if not updates:
        raise ValidationError(
            f"Nothing to update. Editable fields: {', '.join(EDITABLE_FIELDS)}"
        )
    updates["updatedAt"] = utcnow()
    return updates


def new_join_request(user_id: str, role: str, message: str | None) -> dict[str, Any]:
    """Build a pending join request entry."""
    return {
        "id": uuid.uuid4().hex,
        "user": user_id,
        "role": role,
        "message": message or "",
        "status": JOIN_PENDING,
        "createdAt": utcnow(),
    }


def new_collaborator(user_id: str, role: str) -> dict[str, Any]:
    return {"user": user_id, "role": role, "joinedAt": utcnow()}
