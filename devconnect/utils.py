"""Utility functions for the application."""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any

from flask import jsonify, request

from .errors import ValidationError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot


def utcnow() -> datetime.datetime:
    """Return the current time as an aware UTC datetime.

    Firestore rejects server timestamps inside array elements, so every
    timestamp in this application is taken on the application side.
    """
    return datetime.datetime.now(datetime.timezone.utc)


def snapshot_to_dict(snapshot: DocumentSnapshot) -> dict[str, Any] | None:
    """Return the snapshot's data with its id, or None if it does not exist."""
    if not snapshot.exists:
        return None
    data = snapshot.to_dict() or {}
    data["id"] = snapshot.id
    return data


def json_body() -> dict[str, Any]:
    """Return the request's JSON object body, or an empty dict."""
    body = request.get_json(silent=True)
    if body is None:
        if request.is_json and request.get_data():
            raise ValidationError("Request body must be valid JSON")
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def validate_form(form_class):
    """Instantiate a form from the request body and validate it.

    Raises:
        ValidationError: With the first field error when validation fails.
    """
    json_body()
    form = form_class()
    if not form.validate():
        field, messages = next(iter(form.errors.items()))
        raise ValidationError(f"{field}: {messages[0]}")
    return form


def success(data=None, status_code=200, **extra):
    """Build the JSON envelope used by every successful API response."""
    body = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status_code


def sort_by_created(
    items: list[dict[str, Any]], newest_first: bool = True
) -> list[dict[str, Any]]:
    """Sort documents on ``createdAt``; documents without one sort as oldest."""
    return sorted(
        items,
        key=lambda item: (item.get("createdAt") is not None, item.get("createdAt")),
        reverse=newest_first,
    )
