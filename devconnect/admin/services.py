"""Service layer for administrative actions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from devconnect.constants import USERS_COLLECTION
from devconnect.errors import ValidationError
from devconnect.user.services import UserService

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


class AdminService:
    """Handles user moderation for administrators."""

    @staticmethod
    def toggle_block(db: Client, admin_id: str, user_id: str) -> dict[str, Any]:
        """Block a user, or unblock them if they are already blocked."""
        user = UserService.get_user(db, user_id)
        if user_id == admin_id:
            raise ValidationError("You cannot block your own account")

        is_blocked = not user.get("isBlocked", False)
        db.collection(USERS_COLLECTION).document(user_id).update(
            {"isBlocked": is_blocked}
        )
        user["isBlocked"] = is_blocked
        return user

    @staticmethod
    def delete_user(db: Client, admin_id: str, user_id: str) -> None:
        """Delete a user document; the Firebase Auth account is left alone."""
        UserService.get_user(db, user_id)
        if user_id == admin_id:
            raise ValidationError("You cannot delete your own account")
        db.collection(USERS_COLLECTION).document(user_id).delete()
