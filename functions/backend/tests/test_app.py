import unittest

from fastapi.testclient import TestClient

from backend.app import create_app
from backend.config import Settings
from backend.db import InMemoryDocumentStore
from backend.dependencies import build_in_memory_clients
from shared.firebase_constants import TODOS_COLLECTION, USERS_COLLECTION


class FailingDocumentStore(InMemoryDocumentStore):
    def list_documents(self, collection, limit):
        raise RuntimeError("14 UNAVAILABLE: Deadline exceeded")

    def add_document(self, collection, data):
        raise RuntimeError("7 PERMISSION_DENIED: Missing or insufficient permissions.")

    def get_document(self, collection, doc_id):
        raise RuntimeError("14 UNAVAILABLE: Connection reset by peer")

    def update_document(self, collection, doc_id, data):
        raise RuntimeError("10 ABORTED: Too much contention on these documents.")

    def delete_document(self, collection, doc_id):
        raise RuntimeError("4 DEADLINE_EXCEEDED: Deadline exceeded")


def _make_client(clients=None):
    clients = clients or build_in_memory_clients()
    app = create_app(settings=Settings(_env_file=None), clients=clients)
    return TestClient(app), clients


class HealthTests(unittest.TestCase):
    def setUp(self):
        self.client, _ = _make_client()

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["status"], "healthy")
        self.assertEqual(payload["service"], "firebase-functions-api")
        self.assertTrue(payload["timestamp"].endswith("Z"))

    def test_security_headers_and_cors(self):
        response = self.client.get(
            "/health", headers={"Origin": "https://app.example.com"}
        )
        self.assertEqual(response.headers["x-content-type-options"], "nosniff")
        self.assertEqual(response.headers["x-frame-options"], "SAMEORIGIN")
        self.assertIn("strict-transport-security", response.headers)
        self.assertEqual(response.headers["access-control-allow-origin"], "*")

    def test_cors_preflight(self):
        response = self.client.options(
            "/todos",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "PUT",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn("PUT", response.headers["access-control-allow-methods"])

    def test_unknown_route_returns_error_json(self):
        response = self.client.get("/todos/abc")
        self.assertIn(response.status_code, (404, 405))
        self.assertIn("error", response.json())


class UserRoutesTests(unittest.TestCase):
    def setUp(self):
        self.client, clients = _make_client()
        self.store = clients.document_store

    def test_create_user_defaults_role(self):
        response = self.client.post(
            "/users", json={"name": "Ada", "email": "ada@example.com"}
        )
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertTrue(payload["id"])
        self.assertEqual(payload["name"], "Ada")
        self.assertEqual(payload["email"], "ada@example.com")
        self.assertEqual(payload["role"], "user")
        # Timestamps are resolved by the read-back, not the write sentinel.
        self.assertIsInstance(payload["createdAt"], str)
        self.assertIsInstance(payload["updatedAt"], str)

        stored = self.store.get_document(USERS_COLLECTION, payload["id"])
        self.assertEqual(stored["role"], "user")

    def test_create_user_keeps_supplied_role(self):
        response = self.client.post(
            "/users",
            json={"name": "Grace", "email": "grace@example.com", "role": "admin"},
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["role"], "admin")

    def test_create_user_requires_name_and_email(self):
        for body in (
            {"email": "ada@example.com"},
            {"name": "Ada"},
            {"name": "", "email": "ada@example.com"},
            {},
        ):
            with self.subTest(body=body):
                response = self.client.post("/users", json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(
                    response.json(), {"error": "Name and email are required"}
                )
        self.assertEqual(self.store.list_documents(USERS_COLLECTION, limit=50), [])

    def test_create_user_without_body(self):
        response = self.client.post("/users")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Name and email are required"})
        self.assertEqual(self.store.list_documents(USERS_COLLECTION, limit=50), [])

    def test_create_user_rejects_wrong_types(self):
        response = self.client.post("/users", json={"name": ["Ada"], "email": "a@b.c"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("name", response.json()["error"])

    def test_get_user(self):
        doc_id = self.store.add_document(
            USERS_COLLECTION, {"name": "Ada", "email": "ada@example.com", "role": "user"}
        )
        response = self.client.get(f"/users/{doc_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], doc_id)
        self.assertEqual(response.json()["name"], "Ada")

    def test_get_missing_user(self):
        response = self.client.get("/users/does-not-exist")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "User not found"})

    def test_list_users_is_capped(self):
        for i in range(60):
            self.store.add_document(
                USERS_COLLECTION, {"name": f"user{i}", "email": f"u{i}@example.com"}
            )
        response = self.client.get("/users")
        self.assertEqual(response.status_code, 200)
        users = response.json()["users"]
        self.assertEqual(len(users), 50)
        self.assertTrue(all(user["id"] for user in users))


class TodoRoutesTests(unittest.TestCase):
    def setUp(self):
        self.client, clients = _make_client()
        self.store = clients.document_store

    def test_create_todo_defaults(self):
        response = self.client.post("/todos", json={"title": "Buy milk"})
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertTrue(payload["id"])
        self.assertEqual(payload["title"], "Buy milk")
        self.assertIs(payload["completed"], False)
        self.assertNotIn("description", payload)

    def test_create_todo_with_all_fields(self):
        response = self.client.post(
            "/todos",
            json={"title": "Buy milk", "description": "2 litres", "completed": True},
        )
        self.assertEqual(response.status_code, 201)
        self.assertIs(response.json()["completed"], True)
        self.assertEqual(response.json()["description"], "2 litres")

    def test_create_todo_requires_title(self):
        for body in ({}, {"title": ""}, {"description": "no title"}):
            with self.subTest(body=body):
                response = self.client.post("/todos", json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json(), {"error": "Title is required"})
        self.assertEqual(self.store.list_documents(TODOS_COLLECTION, limit=50), [])

    def test_create_todo_rejects_non_boolean_completed(self):
        response = self.client.post(
            "/todos", json={"title": "Buy milk", "completed": "maybe"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("completed", response.json()["error"])

    def test_create_todo_rejects_coercible_completed(self):
        for completed in ("yes", "true", 1):
            with self.subTest(completed=completed):
                response = self.client.post(
                    "/todos", json={"title": "Buy milk", "completed": completed}
                )
                self.assertEqual(response.status_code, 400)
                self.assertIn("completed", response.json()["error"])
        self.assertEqual(self.store.list_documents(TODOS_COLLECTION, limit=50), [])

    def test_create_todo_without_body(self):
        response = self.client.post("/todos")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Title is required"})
        self.assertEqual(self.store.list_documents(TODOS_COLLECTION, limit=50), [])

    def test_list_todos_includes_ids(self):
        first = self.store.add_document(TODOS_COLLECTION, {"title": "Buy milk"})
        second = self.store.add_document(TODOS_COLLECTION, {"title": "Walk dog"})
        response = self.client.get("/todos")
        self.assertEqual(response.status_code, 200)
        todos = response.json()["todos"]
        self.assertEqual(sorted(todo["id"] for todo in todos), sorted([first, second]))
        by_id = {todo["id"]: todo for todo in todos}
        self.assertEqual(by_id[first]["title"], "Buy milk")

    def test_todo_lifecycle(self):
        created = self.client.post("/todos", json={"title": "Buy milk"})
        self.assertEqual(created.status_code, 201)
        todo_id = created.json()["id"]

        updated = self.client.put(f"/todos/{todo_id}", json={"completed": True})
        self.assertEqual(updated.status_code, 200)
        self.assertIs(updated.json()["completed"], True)
        self.assertEqual(updated.json()["title"], "Buy milk")
        self.assertEqual(updated.json()["createdAt"], created.json()["createdAt"])

        deleted = self.client.delete(f"/todos/{todo_id}")
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(deleted.json(), {"message": "Todo deleted successfully"})
        self.assertIsNone(self.store.get_document(TODOS_COLLECTION, todo_id))

    def test_update_only_touches_supplied_fields(self):
        todo_id = self.store.add_document(
            TODOS_COLLECTION,
            {"title": "Write docs", "description": "API reference", "completed": False},
        )
        response = self.client.put(f"/todos/{todo_id}", json={"completed": True})
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["title"], "Write docs")
        self.assertEqual(payload["description"], "API reference")
        self.assertIs(payload["completed"], True)
        self.assertIn("updatedAt", payload)

    def test_update_ignores_unknown_fields(self):
        todo_id = self.store.add_document(
            TODOS_COLLECTION, {"title": "Write docs", "completed": False}
        )
        response = self.client.put(f"/todos/{todo_id}", json={"owner": "someone"})
        self.assertEqual(response.status_code, 200)
        self.assertNotIn("owner", response.json())

    def test_update_rejects_null_fields(self):
        todo_id = self.store.add_document(
            TODOS_COLLECTION, {"title": "Write docs", "completed": False}
        )
        response = self.client.put(f"/todos/{todo_id}", json={"title": None})
        self.assertEqual(response.status_code, 400)
        self.assertIn("title cannot be null", response.json()["error"])
        self.assertEqual(
            self.store.get_document(TODOS_COLLECTION, todo_id)["title"], "Write docs"
        )

    def test_update_rejects_coercible_completed(self):
        todo_id = self.store.add_document(
            TODOS_COLLECTION, {"title": "Write docs", "completed": False}
        )
        before = self.store.get_document(TODOS_COLLECTION, todo_id)
        for completed in ("yes", 1):
            with self.subTest(completed=completed):
                response = self.client.put(
                    f"/todos/{todo_id}", json={"completed": completed}
                )
                self.assertEqual(response.status_code, 400)
                self.assertIn("completed", response.json()["error"])
        self.assertEqual(self.store.get_document(TODOS_COLLECTION, todo_id), before)

    def test_update_without_body_refreshes_timestamp(self):
        todo_id = self.store.add_document(
            TODOS_COLLECTION, {"title": "Write docs", "completed": False}
        )
        response = self.client.put(f"/todos/{todo_id}")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["title"], "Write docs")
        self.assertIs(payload["completed"], False)
        self.assertIsInstance(payload["updatedAt"], str)

    def test_update_missing_todo(self):
        response = self.client.put("/todos/missing", json={"completed": True})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Todo not found"})

    def test_delete_is_idempotent(self):
        for _ in range(2):
            response = self.client.delete("/todos/never-existed")
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json()["message"], "Todo deleted successfully")

    def test_list_todos_is_compressed_when_large(self):
        for i in range(50):
            self.store.add_document(
                TODOS_COLLECTION, {"title": f"Task number {i} " + "x" * 40}
            )
        response = self.client.get("/todos", headers={"Accept-Encoding": "gzip"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers.get("content-encoding"), "gzip")
        self.assertEqual(len(response.json()["todos"]), 50)


class StoreFailureTests(unittest.TestCase):
    def setUp(self):
        clients = build_in_memory_clients()
        clients.document_store = FailingDocumentStore()
        self.client, _ = _make_client(clients)

    def test_list_failure_surfaces_raw_message(self):
        response = self.client.get("/todos")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "14 UNAVAILABLE: Deadline exceeded"})
        self.assertEqual(response.headers["x-content-type-options"], "nosniff")

    def test_create_failure_surfaces_raw_message(self):
        response = self.client.post(
            "/users", json={"name": "Ada", "email": "ada@example.com"}
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json()["error"],
            "7 PERMISSION_DENIED: Missing or insufficient permissions.",
        )

    def test_read_update_and_delete_failures_surface_raw_message(self):
        cases = [
            ("GET", "/users/u1", None, "14 UNAVAILABLE: Connection reset by peer"),
            (
                "PUT",
                "/todos/t1",
                {"completed": True},
                "10 ABORTED: Too much contention on these documents.",
            ),
            ("DELETE", "/todos/t1", None, "4 DEADLINE_EXCEEDED: Deadline exceeded"),
        ]
        for method, path, body, message in cases:
            with self.subTest(method=method, path=path):
                response = self.client.request(method, path, json=body)
                self.assertEqual(response.status_code, 500)
                self.assertEqual(response.json(), {"error": message})


if __name__ == "__main__":
    unittest.main()
