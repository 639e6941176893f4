"""Routes for the notification blueprint."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import current_app, g

from devconnect.auth.decorators import login_required
from devconnect.realtime import get_relay
from devconnect.utils import success, validate_form

from . import bp
from .forms import NotificationForm
from .services import NotificationDispatcher, NotificationService


@bp.route("", methods=["GET"])
@login_required
def list_notifications() -> Any:
    """List the current user's latest notifications."""
    db = firestore.client()
    notifications = NotificationService.list_for_user(
        db, g.user["uid"], limit=current_app.config["NOTIFICATION_PAGE_SIZE"]
    )
    return success(notifications, count=len(notifications))


@bp.route("/unread-count", methods=["GET"])
@login_required
def unread_count() -> Any:
    db = firestore.client()
    return success({"count": NotificationService.unread_count(db, g.user["uid"])})


@bp.route("/<string:notification_id>/read", methods=["PUT"])
@login_required
def mark_as_read(notification_id: str) -> Any:
    """Mark a notification as read."""
    db = firestore.client()
    notification = NotificationService.mark_read(db, notification_id, g.user["uid"])
    return success(notification)


@bp.route("/mark-all-read", methods=["PUT"])
@login_required
def mark_all_read() -> Any:
    """Mark all of the current user's notifications as read."""
    db = firestore.client()
    updated = NotificationService.mark_all_read(db, g.user["uid"])
    return success({"updated": updated})


@bp.route("", methods=["POST"])
@login_required
def create_notification() -> Any:
    """Create a notification by hand and push it to its recipient."""
    form = validate_form(NotificationForm)
    db = firestore.client()
    dispatcher = NotificationDispatcher(db, get_relay())
    notification = dispatcher.notify(
        form.recipient.data,
        form.type.data,
        form.title.data,
        form.message.data,
        related_id=form.relatedId.data or None,
        related_model=form.relatedModel.data or None,
    )
    return success(notification, status_code=201)


@bp.route("/<string:notification_id>", methods=["DELETE"])
@login_required
def delete_notification(notification_id: str) -> Any:
    """Delete one of the current user's notifications."""
    db = firestore.client()
    NotificationService.delete(db, notification_id, g.user["uid"])
    return success(message="Notification deleted")
