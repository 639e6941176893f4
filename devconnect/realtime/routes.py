"""Routes for the real-time blueprint."""

from __future__ import annotations

import json
from typing import Any, Iterator

from flask import Response, current_app, g, stream_with_context

from devconnect.auth.decorators import login_required
from devconnect.constants import EVENT_RECEIVE_MESSAGE
from devconnect.rooms import ensure_room_access
from devconnect.utils import json_body

from . import bp, get_relay
from .relay import Subscription, envelope, user_room

KEEPALIVE = ": keep-alive\n\n"


def format_sse(payload: dict[str, Any]) -> str:
    """Encode a relay payload as one Server-Sent Event."""
    data = json.dumps(payload.get("data"), default=str)
    return f"event: {payload.get('event', 'message')}\ndata: {data}\n\n"


def _event_stream(subscription: Subscription) -> Iterator[str]:
    try:
        for payload in subscription:
            if payload is None:
                yield KEEPALIVE
            else:
                yield format_sse(payload)
    finally:
        subscription.close()


def _stream_response(topic: str) -> Response:
    subscription = get_relay().subscribe(
        topic, timeout=current_app.config["RELAY_KEEPALIVE_SECONDS"]
    )
    current_app.logger.info(f"User {g.user['uid']} joined room {topic}")
    return Response(
        stream_with_context(_event_stream(subscription)),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@bp.route("/rooms/<string:room_id>/stream", methods=["GET"])
@login_required
def join_room(room_id: str) -> Any:
    """Stream the messages relayed to a chat room."""
    ensure_room_access(room_id, g.user["uid"])
    return _stream_response(room_id)


@bp.route("/notifications/stream", methods=["GET"])
@login_required
def join_user_room() -> Any:
    """Stream the notifications pushed to the current user."""
    return _stream_response(user_room(g.user["uid"]))


@bp.route("/rooms/<string:room_id>/messages", methods=["POST"])
@login_required
def relay_message(room_id: str) -> Any:
    """Relay a client message to everyone in the room without storing it."""
    ensure_room_access(room_id, g.user["uid"])
    data = json_body()
    data["roomId"] = room_id
    get_relay().publish(room_id, envelope(EVENT_RECEIVE_MESSAGE, data))
    return Response(status=202)
