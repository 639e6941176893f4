"""Tests for the project service and its join-request workflow."""

from __future__ import annotations

import itertools
from typing import Any

from devconnect.errors import (
    DuplicateRequestError,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from devconnect.notification.services import NotificationDispatcher
from devconnect.project.services import ProjectService
from devconnect.realtime.relay import InMemoryRelay
from tests.helpers import (
    ADMIN_ID,
    OTHER_ID,
    OWNER_ID,
    USERS,
    VOLUNTEER_ID,
    FirestoreTestCase,
)


def as_user(uid: str) -> dict[str, Any]:
    return {"uid": uid, **USERS[uid]}


class ProjectServiceTestCase(FirestoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.relay = InMemoryRelay()
        self.dispatcher = NotificationDispatcher(self.db, self.relay)
        self.project = ProjectService.create_project(
            self.db,
            self.dispatcher,
            {
                "title": "Open Source Tracker",
                "description": "Track contributions",
                "techStack": "Python, Flask",
                "requiredRoles": ["Frontend", {"role": "Frontend"}, "Backend"],
            },
            as_user(OWNER_ID),
        )
        self.project_id = self.project["id"]

    def stored_project(self) -> dict[str, Any]:
        return ProjectService.get_project(self.db, self.project_id)

    def notifications_for(self, uid: str) -> list[dict[str, Any]]:
        return [
            doc.to_dict()
            for doc in self.db.collection("notifications").stream()
            if doc.exists and doc.to_dict().get("recipient") == uid
        ]

    def request_join(self, uid: str = VOLUNTEER_ID, role: str = "Frontend") -> str:
        project = ProjectService.request_to_join(
            self.db, self.dispatcher, self.project_id, as_user(uid), role, "Hi!"
        )
        return next(r["id"] for r in project["joinRequests"] if r["user"] == uid)


class TestCreateProject(ProjectServiceTestCase):
    def test_defaults(self) -> None:
        project = self.stored_project()
        self.assertEqual(project["owner"], OWNER_ID)
        self.assertEqual(project["status"], "Idea")
        self.assertEqual(project["slug"], "open-source-tracker")
        self.assertEqual(project["techStack"], ["Python", "Flask"])
        self.assertTrue(project["isActive"])
        self.assertEqual(project["collaborators"], [])
        self.assertEqual(project["joinRequests"], [])
        self.assertEqual(
            [r["role"] for r in project["requiredRoles"]],
            ["Frontend", "Frontend", "Backend"],
        )
        self.assertFalse(any(r["filled"] for r in project["requiredRoles"]))

    def test_other_users_are_notified(self) -> None:
        self.assertEqual(self.notifications_for(OWNER_ID), [])
        for uid in (VOLUNTEER_ID, OTHER_ID, ADMIN_ID):
            notifications = self.notifications_for(uid)
            self.assertEqual(len(notifications), 1)
            self.assertEqual(notifications[0]["type"], "project_update")
            self.assertEqual(notifications[0]["relatedId"], self.project_id)
        topics = [topic for topic, _ in self.relay.published]
        self.assertIn(f"user_{VOLUNTEER_ID}", topics)
        self.assertNotIn(f"user_{OWNER_ID}", topics)

    def test_missing_title(self) -> None:
        with self.assertRaises(ValidationError):
            ProjectService.create_project(
                self.db, self.dispatcher, {"description": "x"}, as_user(OWNER_ID)
            )

    def test_invalid_role(self) -> None:
        with self.assertRaises(ValidationError):
            ProjectService.create_project(
                self.db,
                self.dispatcher,
                {"title": "T", "description": "D", "requiredRoles": ["Astronaut"]},
                as_user(OWNER_ID),
            )


class TestJoinRequests(ProjectServiceTestCase):
    def test_request_is_pending_and_owner_notified(self) -> None:
        self.request_join()

        join_requests = self.stored_project()["joinRequests"]
        self.assertEqual(len(join_requests), 1)
        self.assertEqual(join_requests[0]["user"], VOLUNTEER_ID)
        self.assertEqual(join_requests[0]["role"], "Frontend")
        self.assertEqual(join_requests[0]["status"], "pending")
        self.assertEqual(join_requests[0]["message"], "Hi!")

        owner_notifications = self.notifications_for(OWNER_ID)
        self.assertEqual(len(owner_notifications), 1)
        self.assertEqual(owner_notifications[0]["type"], "project_join_request")
        self.assertIn("Victor Volunteer", owner_notifications[0]["message"])

        topic, payload = self.relay.published[-1]
        self.assertEqual(topic, f"user_{OWNER_ID}")
        self.assertEqual(payload["event"], "new-notification")

    def test_duplicate_request_rejected(self) -> None:
        self.request_join()
        with self.assertRaises(DuplicateRequestError) as cm:
            self.request_join(role="Backend")
        self.assertEqual(cm.exception.status_code, 400)
        self.assertEqual(len(self.stored_project()["joinRequests"]), 1)

    def test_duplicate_after_rejection(self) -> None:
        request_id = self.request_join()
        ProjectService.respond_to_request(
            self.db, self.dispatcher, self.project_id, OWNER_ID, request_id, "rejected"
        )
        with self.assertRaises(DuplicateRequestError):
            self.request_join()

    def test_role_required(self) -> None:
        with self.assertRaises(ValidationError):
            self.request_join(role="")

    def test_unknown_project(self) -> None:
        with self.assertRaises(NotFoundError):
            ProjectService.request_to_join(
                self.db, self.dispatcher, "missing", as_user(VOLUNTEER_ID), "Frontend"
            )


class TestRespondToRequest(ProjectServiceTestCase):
    def respond(self, request_id: str, decision: str, uid: str = OWNER_ID) -> Any:
        return ProjectService.respond_to_request(
            self.db, self.dispatcher, self.project_id, uid, request_id, decision
        )

    def test_accept_adds_collaborator_and_fills_first_role(self) -> None:
        request_id = self.request_join()
        self.respond(request_id, "accepted")

        project = self.stored_project()
        self.assertEqual(len(project["collaborators"]), 1)
        self.assertEqual(project["collaborators"][0]["user"], VOLUNTEER_ID)
        self.assertEqual(project["collaborators"][0]["role"], "Frontend")

        roles = project["requiredRoles"]
        self.assertTrue(roles[0]["filled"])
        self.assertEqual(roles[0]["filledBy"], VOLUNTEER_ID)
        self.assertFalse(roles[1]["filled"])
        self.assertFalse(roles[2]["filled"])

        self.assertEqual(project["joinRequests"][0]["status"], "accepted")
        notifications = self.notifications_for(VOLUNTEER_ID)
        self.assertIn(
            "project_join_approved", [n["type"] for n in notifications]
        )

    def test_accept_role_without_opening(self) -> None:
        request_id = self.request_join(role="Designer")
        self.respond(request_id, "accepted")

        project = self.stored_project()
        self.assertEqual(project["collaborators"][0]["role"], "Designer")
        self.assertFalse(any(r["filled"] for r in project["requiredRoles"]))

    def test_reject_leaves_collaborators_unchanged(self) -> None:
        request_id = self.request_join()
        self.respond(request_id, "rejected")

        project = self.stored_project()
        self.assertEqual(project["collaborators"], [])
        self.assertFalse(any(r["filled"] for r in project["requiredRoles"]))
        self.assertEqual(project["joinRequests"][0]["status"], "rejected")
        notifications = self.notifications_for(VOLUNTEER_ID)
        self.assertIn(
            "project_join_rejected", [n["type"] for n in notifications]
        )

    def test_non_owner_cannot_respond(self) -> None:
        request_id = self.request_join()
        before = self.stored_project()

        with self.assertRaises(NotAuthorizedError):
            self.respond(request_id, "accepted", uid=OTHER_ID)

        after = self.stored_project()
        self.assertEqual(after["collaborators"], before["collaborators"])
        self.assertEqual(after["joinRequests"], before["joinRequests"])

    def test_unknown_request(self) -> None:
        self.request_join()
        with self.assertRaises(NotFoundError):
            self.respond("nope", "accepted")

    def test_invalid_decision(self) -> None:
        request_id = self.request_join()
        with self.assertRaises(ValidationError):
            self.respond(request_id, "maybe")

    def test_already_decided(self) -> None:
        request_id = self.request_join()
        self.respond(request_id, "accepted")
        with self.assertRaises(ValidationError):
            self.respond(request_id, "rejected")
        self.assertEqual(len(self.stored_project()["collaborators"]), 1)


class TestProjectUpdates(ProjectServiceTestCase):
    def test_status_by_owner_and_collaborator(self) -> None:
        project = ProjectService.update_status(
            self.db, self.project_id, OWNER_ID, "In Progress"
        )
        self.assertEqual(project["status"], "In Progress")

        request_id = self.request_join()
        ProjectService.respond_to_request(
            self.db, self.dispatcher, self.project_id, OWNER_ID, request_id, "accepted"
        )
        ProjectService.update_status(self.db, self.project_id, VOLUNTEER_ID, "Idea")
        self.assertEqual(self.stored_project()["status"], "Idea")

    def test_status_by_outsider(self) -> None:
        with self.assertRaises(NotAuthorizedError):
            ProjectService.update_status(
                self.db, self.project_id, OTHER_ID, "Completed"
            )
        self.assertEqual(self.stored_project()["status"], "Idea")

    def test_invalid_status(self) -> None:
        with self.assertRaises(ValidationError):
            ProjectService.update_status(self.db, self.project_id, OWNER_ID, "Done")

    def test_update_by_owner_only(self) -> None:
        with self.assertRaises(NotAuthorizedError):
            ProjectService.update_project(
                self.db, self.project_id, OTHER_ID, {"title": "Hijacked"}
            )
        project = ProjectService.update_project(
            self.db, self.project_id, OWNER_ID, {"title": "Contribution Tracker"}
        )
        self.assertEqual(project["slug"], "contribution-tracker")
        self.assertEqual(self.stored_project()["title"], "Contribution Tracker")

    def test_empty_update(self) -> None:
        with self.assertRaises(ValidationError):
            ProjectService.update_project(self.db, self.project_id, OWNER_ID, {})

    def test_delete_by_admin(self) -> None:
        with self.assertRaises(NotAuthorizedError):
            ProjectService.delete_project(self.db, self.project_id, as_user(OTHER_ID))
        ProjectService.delete_project(self.db, self.project_id, as_user(ADMIN_ID))
        with self.assertRaises(NotFoundError):
            self.stored_project()

    def test_inactive_projects_hidden_from_listing(self) -> None:
        ProjectService.update_project(
            self.db, self.project_id, OWNER_ID, {"isActive": False}
        )
        self.assertEqual(ProjectService.list_projects(self.db), [])
        self.assertEqual(
            len(ProjectService.list_projects(self.db, active_only=False)), 1
        )

    def test_populate_replaces_ids(self) -> None:
        self.request_join()
        project = ProjectService.populate(self.db, [self.stored_project()])[0]
        self.assertEqual(project["owner"]["name"], "Olivia Owner")
        self.assertEqual(
            project["joinRequests"][0]["user"],
            {"id": VOLUNTEER_ID, "name": "Victor Volunteer", "profile": {}},
        )

    def test_status_transition_matrix(self) -> None:
        request_id = self.request_join()
        ProjectService.respond_to_request(
            self.db, self.dispatcher, self.project_id, OWNER_ID, request_id, "accepted"
        )
        statuses = ("Idea", "In Progress", "Completed")
        for old, new in itertools.product(statuses, statuses):
            for uid in (OWNER_ID, VOLUNTEER_ID):
                with self.subTest(old=old, new=new, uid=uid):
                    self.db.collection("projects").document(self.project_id).update(
                        {"status": old}
                    )
                    ProjectService.update_status(self.db, self.project_id, uid, new)
                    self.assertEqual(self.stored_project()["status"], new)
            with self.subTest(old=old, new=new, uid=OTHER_ID):
                with self.assertRaises(NotAuthorizedError):
                    ProjectService.update_status(
                        self.db, self.project_id, OTHER_ID, new
                    )
