"""Routes for the message blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import current_app, g

from devconnect.auth.decorators import login_required
from devconnect.notification.services import NotificationDispatcher
from devconnect.realtime import get_relay
from devconnect.rooms import ensure_room_access
from devconnect.utils import success, validate_form

from . import bp
from .forms import MessageForm
from .services import MessageService


@bp.route("/room/<string:room_id>", methods=["GET"])
@login_required
def get_room_messages(room_id: str) -> Any:
    """Return a room's chat history, oldest first."""
    ensure_room_access(room_id, g.user["uid"])
    db = firestore.client()
    return success(MessageService.get_room_messages(db, room_id))


@bp.route("", methods=["POST"])
@login_required
def send_message() -> Any:
    """Send a message to a room."""
    form = validate_form(MessageForm)
    ensure_room_access(form.roomId.data, g.user["uid"])
    current_app.logger.info(
        f"Sending message from {g.user['uid']} to room {form.roomId.data}"
    )
    db = firestore.client()
    dispatcher = NotificationDispatcher(db, get_relay())
    message = MessageService.send_message(
        db,
        dispatcher,
        g.user,
        form.roomId.data,
        form.message.data,
        form.messageType.data or "text",
        form.fileUrl.data,
    )
    return success(message, status_code=201)


@bp.route("/rooms", methods=["GET"])
@login_required
def get_user_rooms() -> Any:
    """List the rooms the current user has written in."""
    db = firestore.client()
    return success(MessageService.get_user_rooms(db, g.user["uid"]))
