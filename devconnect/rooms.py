"""Chat room identifiers and participant lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING

from firebase_admin import firestore

from devconnect.constants import DIRECT_ROOM_SEPARATOR, MESSAGES_COLLECTION
from devconnect.errors import NotAuthorizedError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


def direct_room_id(user_a_id: str, user_b_id: str) -> str:
    """Return the room shared by two users, independent of argument order."""
    return DIRECT_ROOM_SEPARATOR.join(sorted([user_a_id, user_b_id]))


def is_direct_room(room_id: str) -> bool:
    return DIRECT_ROOM_SEPARATOR in room_id


def room_participants(room_id: str) -> list[str]:
    """Split a direct room id into its participant ids."""
    return [uid for uid in room_id.split(DIRECT_ROOM_SEPARATOR) if uid]


def recipients_for_room(db: Client, room_id: str, sender_id: str) -> list[str]:
    """Return who should be notified of a message sent to a room.

    Direct rooms name their participants, so the recipients are the other
    half of the id. Any other room falls back to everyone who has ever sent a
    message there, which misses members that have only been reading.
    """
    if is_direct_room(room_id):
        candidates = room_participants(room_id)
    else:
        docs = (
            db.collection(MESSAGES_COLLECTION)
            .where(filter=firestore.FieldFilter("roomId", "==", room_id))
            .stream()
        )
        candidates = [(doc.to_dict() or {}).get("sender") for doc in docs]

    recipients: list[str] = []
    for uid in candidates:
        if uid and uid != sender_id and uid not in recipients:
            recipients.append(uid)
    return recipients


def ensure_room_access(room_id: str, user_id: str) -> None:
    """Refuse access to a direct room by anyone but its two participants.

    Other rooms are open to any authenticated user who knows their id.
    """
    if is_direct_room(room_id) and user_id not in room_participants(room_id):
        raise NotAuthorizedError("Not a participant of this room")
