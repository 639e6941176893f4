"""Service layer for developer profiles."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Iterable, cast

from devconnect.constants import PROFILE_FIELDS, USERS_COLLECTION
from devconnect.errors import NotFoundError, ValidationError
from devconnect.utils import snapshot_to_dict, sort_by_created

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client

SUMMARY_FIELDS = ("name", "profile")


class UserService:
    """Service class for user and profile operations."""

    @staticmethod
    def get_user(db: Client, user_id: str) -> dict[str, Any]:
        """Fetch a single user, raising NotFoundError if it does not exist."""
        user_ref = db.collection(USERS_COLLECTION).document(user_id)
        snapshot = cast("DocumentSnapshot", user_ref.get())
        user = snapshot_to_dict(snapshot)
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def get_user_summaries(
        db: Client, user_ids: Iterable[str], fields: tuple[str, ...] = SUMMARY_FIELDS
    ) -> dict[str, dict[str, Any]]:
        """Fetch a small public summary for each user id, keyed by id.

        Unknown ids map to a summary holding only the id so references to
        deleted users still render.
        """
        unique_ids = sorted({uid for uid in user_ids if uid})
        if not unique_ids:
            return {}

        refs = [db.collection(USERS_COLLECTION).document(uid) for uid in unique_ids]
        summaries = {uid: {"id": uid} for uid in unique_ids}
        for snapshot in db.get_all(refs):
            shot = cast("DocumentSnapshot", snapshot)
            if shot.exists:
                data = shot.to_dict() or {}
                summary = {"id": shot.id}
                summary.update({field: data.get(field) for field in fields})
                summaries[shot.id] = summary
        return summaries

    @staticmethod
    def list_users(db: Client, include_blocked: bool = False) -> list[dict[str, Any]]:
        """List users, newest first."""
        users = []
        for doc in db.collection(USERS_COLLECTION).stream():
            user = snapshot_to_dict(doc)
            if user is None:
                continue
            if not include_blocked and user.get("isBlocked"):
                continue
            users.append(user)
        return sort_by_created(users)

    @staticmethod
    def search_users(
        db: Client, skills: str | None = None, experience: str | None = None
    ) -> list[dict[str, Any]]:
        """Find users having any of the comma separated skills.

        Each requested skill matches case-insensitively anywhere inside a
        profile skill, so "react" finds "React Native".
        """
        patterns = []
        if skills:
            patterns = [
                re.compile(re.escape(skill.strip()), re.IGNORECASE)
                for skill in skills.split(",")
                if skill.strip()
            ]

        results = []
        for user in UserService.list_users(db):
            profile = user.get("profile") or {}
            if experience and profile.get("experience") != experience:
                continue
            if patterns:
                user_skills = profile.get("skills") or []
                if not any(
                    p.search(s)
                    for p in patterns
                    for s in user_skills
                    if isinstance(s, str)
                ):
                    continue
            results.append(user)
        return results

    @staticmethod
    def update_profile(
        db: Client, user_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        """Merge the editable profile fields from ``data`` into the user's profile."""
        user = UserService.get_user(db, user_id)
        profile = dict(user.get("profile") or {})

        for field in PROFILE_FIELDS:
            if field in data:
                profile[field] = data[field]

        skills = profile.get("skills")
        if isinstance(skills, str):
            profile["skills"] = [s.strip() for s in skills.split(",") if s.strip()]
        elif skills is not None and not isinstance(skills, list):
            raise ValidationError("skills must be a list of strings")

        db.collection(USERS_COLLECTION).document(user_id).update({"profile": profile})
        user["profile"] = profile
        return user
