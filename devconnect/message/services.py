"""Service layer for chat messages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from devconnect.constants import (
    EVENT_RECEIVE_MESSAGE,
    MESSAGE_TYPES,
    MESSAGES_COLLECTION,
)
from devconnect.errors import ValidationError
from devconnect.realtime.relay import envelope
from devconnect.user.services import UserService
from devconnect.utils import snapshot_to_dict, sort_by_created, utcnow

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from devconnect.notification.services import NotificationDispatcher

logger = logging.getLogger(__name__)

SENDER_FIELDS = ("name", "email")


class MessageService:
    """Service class for chat rooms and their messages."""

    @staticmethod
    def _with_senders(
        db: Client, messages: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        senders = UserService.get_user_summaries(
            db, (m.get("sender") for m in messages), fields=SENDER_FIELDS
        )
        return [
            {**m, "sender": senders.get(m.get("sender"), {"id": m.get("sender")})}
            for m in messages
        ]

    @staticmethod
    def get_room_messages(db: Client, room_id: str) -> list[dict[str, Any]]:
        """Return a room's messages in the order they were sent."""
        query = db.collection(MESSAGES_COLLECTION).where(
            filter=firestore.FieldFilter("roomId", "==", room_id)
        )
        messages = [m for m in (snapshot_to_dict(doc) for doc in query.stream()) if m]
        return MessageService._with_senders(
            db, sort_by_created(messages, newest_first=False)
        )

    @staticmethod
    def send_message(
        db: Client,
        dispatcher: NotificationDispatcher,
        sender: dict[str, Any],
        room_id: str,
        text: str,
        message_type: str = "text",
        file_url: str | None = None,
    ) -> dict[str, Any]:
        """Store a message, relay it to the room and notify the other side."""
        if not room_id or not text:
            raise ValidationError("roomId and message are required")
        if message_type not in MESSAGE_TYPES:
            raise ValidationError(f"Invalid messageType '{message_type}'")

        message_data = {
            "roomId": room_id,
            "sender": sender["uid"],
            "message": text,
            "messageType": message_type,
            "fileUrl": file_url or None,
            "createdAt": utcnow(),
        }
        message_ref = db.collection(MESSAGES_COLLECTION).document()
        message_ref.set(message_data)
        message = {**message_data, "id": message_ref.id}
        populated = MessageService._with_senders(db, [message])[0]

        try:
            dispatcher.relay.publish(
                room_id, envelope(EVENT_RECEIVE_MESSAGE, populated)
            )
        except Exception as e:
            # Clients that miss the live event see the message on next fetch
            logger.error(f"Error relaying message to room {room_id}: {e}")

        dispatcher.message_sent(message, sender)
        return populated

    @staticmethod
    def get_user_rooms(db: Client, user_id: str) -> list[str]:
        """Return the rooms the user has sent messages in."""
        query = db.collection(MESSAGES_COLLECTION).where(
            filter=firestore.FieldFilter("sender", "==", user_id)
        )
        rooms: list[str] = []
        for doc in query.stream():
            room_id = (doc.to_dict() or {}).get("roomId")
            if room_id and room_id not in rooms:
                rooms.append(room_id)
        return rooms
