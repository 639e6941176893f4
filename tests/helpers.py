"""Shared fixtures for API tests."""

from __future__ import annotations

import unittest
from typing import Any
from unittest.mock import MagicMock, patch

from mockfirestore import MockFirestore

from devconnect import create_app
from tests.conftest import MockBatch, patch_mockfirestore

OWNER_ID = "owner1"
VOLUNTEER_ID = "volunteer1"
OTHER_ID = "other1"
ADMIN_ID = "admin1"

USERS = {
    OWNER_ID: {"name": "Olivia Owner", "email": "olivia@example.com"},
    VOLUNTEER_ID: {"name": "Victor Volunteer", "email": "victor@example.com"},
    OTHER_ID: {"name": "Oscar Other", "email": "oscar@example.com"},
    ADMIN_ID: {"name": "Ada Admin", "email": "ada@example.com", "isAdmin": True},
}


def seed_users(db: MockFirestore, users: dict[str, dict[str, Any]] = USERS) -> None:
    for uid, data in users.items():
        db.collection("users").document(uid).set(
            {"isAdmin": False, "isBlocked": False, "profile": {}, **data}
        )


class FirestoreTestCase(unittest.TestCase):
    """Service tests against an in-memory Firestore."""

    def setUp(self) -> None:
        patch_mockfirestore()
        self.db = MockFirestore()
        self.db.batch = lambda: MockBatch(self.db)
        seed_users(self.db)


class ApiTestCase(FirestoreTestCase):
    """Route tests with Firebase mocked out and bearer tokens equal to uids."""

    ROUTE_MODULES = (
        "devconnect",
        "devconnect.project.routes",
        "devconnect.message.routes",
        "devconnect.notification.routes",
        "devconnect.user.routes",
        "devconnect.admin.routes",
    )

    def setUp(self) -> None:
        super().setUp()
        self.mock_firestore_service = MagicMock()
        self.mock_firestore_service.client.return_value = self.db

        patchers = {
            "init_app": patch("firebase_admin.initialize_app"),
            "verify_id_token": patch(
                "firebase_admin.auth.verify_id_token",
                side_effect=lambda token: {"uid": token},
            ),
        }
        for module in self.ROUTE_MODULES:
            patchers[module] = patch(
                f"{module}.firestore", new=self.mock_firestore_service
            )

        self.mocks = {name: p.start() for name, p in patchers.items()}
        for p in patchers.values():
            self.addCleanup(p.stop)

        self.app = create_app({"TESTING": True})
        self.relay = self.app.extensions["relay"]
        self.client = self.app.test_client()

    def auth(self, uid: str) -> dict[str, str]:
        """Authorization header for a seeded user."""
        return {"Authorization": f"Bearer {uid}"}

    def published_to(self, topic: str) -> list[dict[str, Any]]:
        return [payload for t, payload in self.relay.published if t == topic]
