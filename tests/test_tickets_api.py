"""API tests for ticket CRUD, role checks, ownership filtering and comments."""

import unittest

from app.models import Ticket, TicketComment
from tests.helpers import ApiTestCase, bearer

TICKETS = "/api/v1/tickets"


class TicketApiTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice, self.alice_token = self.user_with_token("alice@example.com")
        self.bob, self.bob_token = self.user_with_token("bob@example.com")
        self.admin, self.admin_token = self.user_with_token("admin@example.com", role="admin")

    def create(self, token: str, **body: object) -> dict:
        payload = {"title": "Printer on fire", "description": "Third floor printer is smoking."}
        payload.update(body)
        resp = self.client.post(TICKETS, headers=bearer(token), json=payload)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["data"]["ticket"]

    def ticket_count(self) -> int:
        return self.db().query(Ticket).count()


class TestCreateTicket(TicketApiTestCase):
    def test_defaults_and_owner(self) -> None:
        ticket = self.create(self.alice_token)
        self.assertEqual(ticket["status"], "open")
        self.assertEqual(ticket["priority"], "medium")
        self.assertEqual(ticket["createdBy"], self.alice.id)
        self.assertIsNone(ticket["assignedTo"])
        self.assertEqual(ticket["comments"], [])

    def test_missing_title_or_description_persists_nothing(self) -> None:
        for body in (
            {"description": "no title"},
            {"title": "no description"},
            {"title": "   ", "description": "blank title"},
            {},
        ):
            with self.subTest(body=body):
                resp = self.client.post(TICKETS, headers=bearer(self.alice_token), json=body)
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.json()["message"], "Please provide title and description.")
        self.assertEqual(self.ticket_count(), 0)

    def test_invalid_priority_rejected(self) -> None:
        resp = self.client.post(
            TICKETS,
            headers=bearer(self.alice_token),
            json={"title": "t", "description": "d", "priority": "urgente"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.ticket_count(), 0)

    def test_non_admin_cannot_create_for_someone_else(self) -> None:
        resp = self.client.post(
            TICKETS,
            headers=bearer(self.alice_token),
            json={"title": "t", "description": "d", "createdBy": self.bob.id},
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(self.ticket_count(), 0)

    def test_admin_can_file_on_behalf_of_user(self) -> None:
        ticket = self.create(self.admin_token, createdBy=self.bob.id, assignedTo=self.admin.id)
        self.assertEqual(ticket["createdBy"], self.bob.id)
        self.assertEqual(ticket["assignedTo"], self.admin.id)

    def test_unknown_assignee_is_not_found(self) -> None:
        resp = self.client.post(
            TICKETS,
            headers=bearer(self.alice_token),
            json={"title": "t", "description": "d", "assignedTo": 424242},
        )
        self.assertEqual(resp.status_code, 404)

    def test_requires_session(self) -> None:
        self.client.cookies.clear()
        resp = self.client.post(TICKETS, json={"title": "t", "description": "d"})
        self.assertEqual(resp.status_code, 401)


class TestListTickets(TicketApiTestCase):
    def test_all_tickets_is_admin_only(self) -> None:
        self.create(self.alice_token)
        forbidden = self.client.get(TICKETS, headers=bearer(self.alice_token))
        self.assertEqual(forbidden.status_code, 403)
        allowed = self.client.get(TICKETS, headers=bearer(self.admin_token))
        self.assertEqual(allowed.status_code, 200)
        self.assertEqual(allowed.json()["results"], 1)

    def test_my_tickets_matches_creator_exactly(self) -> None:
        alice_ids = {self.create(self.alice_token)["id"] for _ in range(3)}
        bob_ids = {self.create(self.bob_token)["id"] for _ in range(2)}
        bob_ids.add(self.create(self.admin_token, createdBy=self.bob.id)["id"])

        for token, expected in (
            (self.alice_token, alice_ids),
            (self.bob_token, bob_ids),
            (self.admin_token, set()),
        ):
            resp = self.client.get(f"{TICKETS}/my-tickets", headers=bearer(token))
            self.assertEqual(resp.status_code, 200)
            got = {t["id"] for t in resp.json()["data"]["tickets"]}
            self.assertEqual(got, expected)


class TestGetUpdateDelete(TicketApiTestCase):
    def test_get_existing(self) -> None:
        ticket = self.create(self.alice_token)
        resp = self.client.get(f"{TICKETS}/{ticket['id']}", headers=bearer(self.bob_token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["ticket"]["title"], "Printer on fire")

    def test_missing_id_is_404_for_get_update_delete(self) -> None:
        headers = bearer(self.alice_token)
        full = {"title": "t", "description": "d", "status": "closed", "priority": "low"}
        self.assertEqual(self.client.get(f"{TICKETS}/999", headers=headers).status_code, 404)
        self.assertEqual(
            self.client.put(f"{TICKETS}/999", headers=headers, json=full).status_code, 404
        )
        self.assertEqual(self.client.delete(f"{TICKETS}/999", headers=headers).status_code, 404)
        resp = self.client.patch(
            f"{TICKETS}/999/comments", headers=headers, json={"comment": "hello"}
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "Ticket not found")

    def test_malformed_id_is_400(self) -> None:
        resp = self.client.get(f"{TICKETS}/not-a-number", headers=bearer(self.alice_token))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Invalid ticket_id: not-a-number")

    def test_update_round_trip(self) -> None:
        ticket = self.create(self.alice_token)
        payload = {
            "title": "Printer fixed",
            "description": "Replaced the fuser.",
            "status": "in_progress",
            "priority": "urgent",
        }
        resp = self.client.put(
            f"{TICKETS}/{ticket['id']}", headers=bearer(self.alice_token), json=payload
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        read = self.client.get(f"{TICKETS}/{ticket['id']}", headers=bearer(self.alice_token))
        stored = read.json()["data"]["ticket"]
        for key, value in payload.items():
            self.assertEqual(stored[key], value)

    def test_partial_update_is_rejected_and_nothing_changes(self) -> None:
        ticket = self.create(self.alice_token)
        full = {"title": "New", "description": "New desc", "status": "closed", "priority": "high"}
        for missing in full:
            with self.subTest(missing=missing):
                body = {k: v for k, v in full.items() if k != missing}
                resp = self.client.put(
                    f"{TICKETS}/{ticket['id']}", headers=bearer(self.alice_token), json=body
                )
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(
                    resp.json()["message"],
                    "Please provide title, description, status and priority.",
                )
        stored = self.db().get(Ticket, ticket["id"])
        self.assertEqual(stored.title, "Printer on fire")
        self.assertEqual(stored.status, "open")
        self.assertEqual(stored.priority, "medium")

    def test_update_rejects_unknown_status(self) -> None:
        ticket = self.create(self.alice_token)
        resp = self.client.put(
            f"{TICKETS}/{ticket['id']}",
            headers=bearer(self.alice_token),
            json={"title": "t", "description": "d", "status": "done", "priority": "low"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Invalid input data", resp.json()["message"])
        self.assertEqual(self.db().get(Ticket, ticket["id"]).status, "open")

    def test_delete_removes_ticket_and_comments(self) -> None:
        ticket = self.create(self.alice_token)
        self.client.patch(
            f"{TICKETS}/{ticket['id']}/comments",
            headers=bearer(self.alice_token),
            json={"comment": "first"},
        )
        resp = self.client.delete(f"{TICKETS}/{ticket['id']}", headers=bearer(self.alice_token))
        self.assertEqual(resp.status_code, 204)
        self.assertEqual(resp.content, b"")
        self.assertEqual(
            self.client.get(f"{TICKETS}/{ticket['id']}", headers=bearer(self.alice_token)).status_code,
            404,
        )
        self.assertEqual(self.db().query(TicketComment).count(), 0)


class TestComments(TicketApiTestCase):
    def _comment(self, ticket_id: int, token: str, body: dict):
        return self.client.patch(f"{TICKETS}/{ticket_id}/comments", headers=bearer(token), json=body)

    def test_empty_comment_rejected(self) -> None:
        ticket = self.create(self.alice_token)
        for body in ({}, {"comment": ""}, {"comment": "   "}):
            with self.subTest(body=body):
                resp = self._comment(ticket["id"], self.alice_token, body)
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.json()["message"], "Please provide comments.")
        self.assertEqual(self.db().query(TicketComment).count(), 0)

    def test_append_preserves_order(self) -> None:
        ticket = self.create(self.alice_token)
        texts = ["first", "second", "third"]
        for i, text in enumerate(texts):
            token = self.alice_token if i % 2 == 0 else self.bob_token
            resp = self._comment(ticket["id"], token, {"comment": text})
            self.assertEqual(resp.status_code, 200, resp.text)
            comments = resp.json()["data"]["ticket"]["comments"]
            self.assertEqual(len(comments), i + 1)
            self.assertEqual([c["text"] for c in comments], texts[: i + 1])
        authors = [c["author"] for c in comments]
        self.assertEqual(authors, [self.alice.id, self.bob.id, self.alice.id])

    def test_author_is_always_the_caller(self) -> None:
        ticket = self.create(self.alice_token)
        resp = self._comment(
            ticket["id"], self.bob_token, {"comment": "on it", "createdBy": self.alice.id}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["ticket"]["comments"][0]["author"], self.bob.id)


if __name__ == "__main__":
    unittest.main()
