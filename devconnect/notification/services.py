"""Service layer for notifications and their real-time delivery."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from devconnect.constants import (
    EVENT_NEW_NOTIFICATION,
    FIRESTORE_BATCH_LIMIT,
    JOIN_ACCEPTED,
    NOTIFICATION_JOIN_APPROVED,
    NOTIFICATION_JOIN_REJECTED,
    NOTIFICATION_JOIN_REQUEST,
    NOTIFICATION_MESSAGE,
    NOTIFICATION_PROJECT_UPDATE,
    NOTIFICATIONS_COLLECTION,
    USERS_COLLECTION,
)
from devconnect.errors import NotAuthorizedError, NotFoundError
from devconnect.realtime.relay import Relay, envelope, user_room
from devconnect.rooms import recipients_for_room
from devconnect.utils import snapshot_to_dict, sort_by_created, utcnow

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


def build_notification(
    recipient_id: str,
    notification_type: str,
    title: str,
    message: str,
    related_id: str | None = None,
    related_model: str | None = None,
) -> dict[str, Any]:
    """Build an unread notification document."""
    return {
        "recipient": recipient_id,
        "type": notification_type,
        "title": title,
        "message": message,
        "relatedId": related_id,
        "relatedModel": related_model,
        "read": False,
        "createdAt": utcnow(),
    }


class NotificationDispatcher:
    """Turns domain events into stored notifications plus a live push.

    Every event method is best-effort: failures are logged and swallowed so
    that sending a message or changing a project never fails because a
    notification could not be written or pushed.
    """

    def __init__(self, db: Client, relay: Relay) -> None:
        self.db = db
        self.relay = relay

    def notify(
        self,
        recipient_id: str,
        notification_type: str,
        title: str,
        message: str,
        related_id: str | None = None,
        related_model: str | None = None,
    ) -> dict[str, Any]:
        """Store one notification and push it to the recipient's room."""
        data = build_notification(
            recipient_id, notification_type, title, message, related_id, related_model
        )
        ref = self.db.collection(NOTIFICATIONS_COLLECTION).document()
        ref.set(data)
        notification = {**data, "id": ref.id}
        self.push(notification)
        return notification

    def notify_many(
        self,
        recipient_ids: list[str],
        notification_type: str,
        title: str,
        message: str,
        related_id: str | None = None,
        related_model: str | None = None,
    ) -> list[dict[str, Any]]:
        """Store one notification per recipient in batches, then push each."""
        notifications = []
        collection = self.db.collection(NOTIFICATIONS_COLLECTION)
        for start in range(0, len(recipient_ids), FIRESTORE_BATCH_LIMIT):
            batch = self.db.batch()
            for recipient_id in recipient_ids[start : start + FIRESTORE_BATCH_LIMIT]:
                data = build_notification(
                    recipient_id,
                    notification_type,
                    title,
                    message,
                    related_id,
                    related_model,
                )
                ref = collection.document()
                batch.set(ref, data)
                notifications.append({**data, "id": ref.id})
            batch.commit()

        for notification in notifications:
            self.push(notification)
        return notifications

    def push(self, notification: dict[str, Any]) -> None:
        """Publish a stored notification; a recipient who is offline misses it."""
        try:
            self.relay.publish(
                user_room(notification["recipient"]),
                envelope(EVENT_NEW_NOTIFICATION, notification),
            )
        except Exception as e:
            logger.error(
                f"Error pushing notification {notification.get('id')} "
                f"to {notification.get('recipient')}: {e}"
            )

    def project_created(
        self, project: dict[str, Any], creator: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Tell every other non-blocked user about a new project."""
        try:
            creator_id = creator["uid"]
            recipients = []
            for doc in self.db.collection(USERS_COLLECTION).stream():
                data = doc.to_dict() or {}
                if not doc.exists or doc.id == creator_id or data.get("isBlocked"):
                    continue
                recipients.append(doc.id)

            logger.info(
                f"Creating notifications for {len(recipients)} users "
                f"about new project: {project['title']}"
            )
            return self.notify_many(
                recipients,
                NOTIFICATION_PROJECT_UPDATE,
                "New Project Posted",
                f"{creator.get('name', 'Someone')} posted a new project: "
                f"{project['title']}",
                related_id=project["id"],
                related_model="Project",
            )
        except Exception as e:
            logger.error(f"Error creating project notifications: {e}")
            return []

    def join_requested(
        self, project: dict[str, Any], requester: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Tell a project owner that someone asked to join."""
        try:
            return self.notify(
                project["owner"],
                NOTIFICATION_JOIN_REQUEST,
                "New Join Request",
                f"{requester.get('name', 'Someone')} wants to join your project "
                f'"{project["title"]}"',
                related_id=project["id"],
                related_model="Project",
            )
        except Exception as e:
            logger.error(f"Error creating join request notification: {e}")
            return None

    def join_responded(
        self, project: dict[str, Any], join_request: dict[str, Any], decision: str
    ) -> dict[str, Any] | None:
        """Tell a requester whether the owner accepted or rejected them."""
        try:
            if decision == JOIN_ACCEPTED:
                notification_type = NOTIFICATION_JOIN_APPROVED
                title = "Join Request Approved"
                message = (
                    f'Your join request for "{project["title"]}" has been approved!'
                )
            else:
                notification_type = NOTIFICATION_JOIN_REJECTED
                title = "Join Request Rejected"
                message = (
                    f'Your join request for "{project["title"]}" has been rejected.'
                )
            return self.notify(
                join_request["user"],
                notification_type,
                title,
                message,
                related_id=project["id"],
                related_model="Project",
            )
        except Exception as e:
            logger.error(f"Error creating join request response notification: {e}")
            return None

    def message_sent(
        self, message: dict[str, Any], sender: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Tell the other participants of a room about a new message."""
        try:
            recipients = recipients_for_room(self.db, message["roomId"], sender["uid"])
            notifications = [
                self.notify(
                    recipient_id,
                    NOTIFICATION_MESSAGE,
                    "New Message",
                    f"{sender.get('name', 'Someone')} sent you a message",
                    related_id=message["id"],
                    related_model="Message",
                )
                for recipient_id in recipients
            ]
            logger.info(
                f"Created {len(notifications)} message notifications "
                f"for room {message['roomId']}"
            )
            return notifications
        except Exception as e:
            logger.error(f"Error creating message notifications: {e}")
            return []


class NotificationService:
    """Service class for a user's own notifications."""

    @staticmethod
    def _get_owned(db: Client, notification_id: str, user_id: str) -> dict[str, Any]:
        ref = db.collection(NOTIFICATIONS_COLLECTION).document(notification_id)
        notification = snapshot_to_dict(cast("DocumentSnapshot", ref.get()))
        if notification is None:
            raise NotFoundError("Notification not found")
        if notification.get("recipient") != user_id:
            raise NotAuthorizedError()
        return notification

    @staticmethod
    def _recipient_docs(db: Client, user_id: str) -> list[DocumentSnapshot]:
        query = db.collection(NOTIFICATIONS_COLLECTION).where(
            filter=firestore.FieldFilter("recipient", "==", user_id)
        )
        return [doc for doc in query.stream() if doc.exists]

    @staticmethod
    def list_for_user(
        db: Client, user_id: str, limit: int = DEFAULT_PAGE_SIZE
    ) -> list[dict[str, Any]]:
        """Return the user's most recent notifications, newest first."""
        notifications = [
            {**(doc.to_dict() or {}), "id": doc.id}
            for doc in NotificationService._recipient_docs(db, user_id)
        ]
        return sort_by_created(notifications)[:limit]

    @staticmethod
    def unread_count(db: Client, user_id: str) -> int:
        return sum(
            1
            for doc in NotificationService._recipient_docs(db, user_id)
            if not (doc.to_dict() or {}).get("read")
        )

    @staticmethod
    def mark_read(db: Client, notification_id: str, user_id: str) -> dict[str, Any]:
        """Mark one of the user's notifications as read."""
        notification = NotificationService._get_owned(db, notification_id, user_id)
        db.collection(NOTIFICATIONS_COLLECTION).document(notification_id).update(
            {"read": True}
        )
        notification["read"] = True
        return notification

    @staticmethod
    def mark_all_read(db: Client, user_id: str) -> int:
        """Mark every unread notification of the user as read."""
        unread = [
            doc
            for doc in NotificationService._recipient_docs(db, user_id)
            if not (doc.to_dict() or {}).get("read")
        ]
        for start in range(0, len(unread), FIRESTORE_BATCH_LIMIT):
            batch = db.batch()
            for doc in unread[start : start + FIRESTORE_BATCH_LIMIT]:
                batch.update(doc.reference, {"read": True})
            batch.commit()
        return len(unread)

    @staticmethod
    def delete(db: Client, notification_id: str, user_id: str) -> None:
        """Delete one of the user's notifications."""
        NotificationService._get_owned(db, notification_id, user_id)
        db.collection(NOTIFICATIONS_COLLECTION).document(notification_id).delete()
