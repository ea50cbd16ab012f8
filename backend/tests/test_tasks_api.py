"""Integration tests for the /api/v1/tasks endpoints."""

from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from app.main import app

TASKS = "/api/v1/tasks"


def _create(c, text="Write report", **fields):
    resp = c.post(TASKS, json={"text": text, **fields})
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestCreateAndGet:
    def test_create_defaults(self, make_user):
        c, _ = make_user()
        task = _create(c, "  Buy milk  ")
        assert task["text"] == "Buy milk"
        assert task["completed"] is False
        assert task["priority"] == "medium"
        assert task["category"] == "general"
        assert task["completedAt"] is None
        assert task["dueDate"] is None
        assert task["isOverdue"] is False
        assert task["userId"]

    def test_create_completed_sets_timestamp(self, make_user):
        c, _ = make_user()
        task = _create(c, completed=True)
        assert task["completedAt"] is not None

    def test_create_validation(self, make_user):
        c, _ = make_user()
        assert c.post(TASKS, json={"text": ""}).status_code == 400
        assert c.post(TASKS, json={"text": "x" * 501}).status_code == 400
        assert c.post(TASKS, json={"text": "ok", "priority": "urgent"}).status_code == 400
        assert c.post(TASKS, json={"text": "ok", "dueDate": "not a date"}).status_code == 400

    def test_get_by_id(self, make_user):
        c, _ = make_user()
        task = _create(c)
        resp = c.get(f"{TASKS}/{task['id']}")
        assert resp.status_code == 200
        assert resp.json()["data"]["id"] == task["id"]

    def test_get_missing(self, make_user):
        c, _ = make_user()
        resp = c.get(f"{TASKS}/9999")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Task not found"}

    def test_invalid_id(self, make_user):
        c, _ = make_user()
        assert c.get(f"{TASKS}/abc").status_code == 400

    def test_requires_auth(self):
        anon = TestClient(app)
        assert anon.get(TASKS).status_code == 401
        assert anon.post(TASKS, json={"text": "x"}).status_code == 401
        assert anon.get(f"{TASKS}/stats").status_code == 401


class TestOwnership:
    def test_other_users_task_is_invisible(self, make_user):
        alice, _ = make_user(email="alice@example.com")
        bob, _ = make_user(email="bob@example.com", name="Bob")
        task = _create(alice, "Alice's secret", priority="high")
        url = f"{TASKS}/{task['id']}"

        assert bob.get(url).status_code == 404
        assert bob.put(url, json={"text": "hijacked"}).status_code == 404
        assert bob.put(f"{url}/toggle").status_code == 404
        assert bob.delete(url).status_code == 404

        listing = bob.get(TASKS).json()
        assert listing["total"] == 0 and listing["data"] == []
        assert bob.get(f"{TASKS}/priority/high").json()["data"] == []
        assert bob.get(f"{TASKS}/stats").json()["data"]["total"] == 0

        still_there = alice.get(url).json()["data"]
        assert still_there["text"] == "Alice's secret"

    def test_bulk_delete_only_touches_own_tasks(self, make_user):
        alice, _ = make_user(email="alice@example.com")
        bob, _ = make_user(email="bob@example.com", name="Bob")
        _create(alice, "done", completed=True)

        resp = bob.delete(f"{TASKS}/completed")
        assert resp.json()["data"]["deletedCount"] == 0
        assert alice.get(TASKS).json()["total"] == 1


class TestUpdateAndToggle:
    def test_partial_update(self, make_user):
        c, _ = make_user()
        task = _create(c, "Draft", priority="low", category="work")
        resp = c.put(f"{TASKS}/{task['id']}", json={"priority": "high"})
        assert resp.status_code == 200
        updated = resp.json()["data"]
        assert updated["priority"] == "high"
        assert updated["text"] == "Draft"
        assert updated["category"] == "work"

    def test_update_completed_sets_and_clears_timestamp(self, make_user):
        c, _ = make_user()
        task = _create(c)
        url = f"{TASKS}/{task['id']}"

        done = c.put(url, json={"completed": True}).json()["data"]
        assert done["completedAt"] is not None

        # Editing text on a completed task keeps its completion time
        edited = c.put(url, json={"text": "Renamed"}).json()["data"]
        assert edited["completedAt"] == done["completedAt"]

        undone = c.put(url, json={"completed": False}).json()["data"]
        assert undone["completedAt"] is None

    def test_update_clears_due_date(self, make_user):
        c, _ = make_user()
        task = _create(c, dueDate="2030-01-01T00:00:00Z")
        assert task["dueDate"].startswith("2030-01-01")
        cleared = c.put(f"{TASKS}/{task['id']}", json={"dueDate": None}).json()["data"]
        assert cleared["dueDate"] is None

    def test_update_validation(self, make_user):
        c, _ = make_user()
        task = _create(c)
        url = f"{TASKS}/{task['id']}"
        assert c.put(url, json={"text": ""}).status_code == 400
        assert c.put(url, json={"completed": None}).status_code == 400

    def test_toggle_round_trip(self, make_user):
        c, _ = make_user()
        task = _create(c)
        url = f"{TASKS}/{task['id']}/toggle"

        first = c.put(url)
        assert first.json()["message"] == "Task marked as completed"
        assert first.json()["data"]["completed"] is True
        assert first.json()["data"]["completedAt"] is not None

        second = c.put(url)
        assert second.json()["message"] == "Task marked as pending"
        assert second.json()["data"]["completed"] is False
        assert second.json()["data"]["completedAt"] is None

        third = c.put(url).json()["data"]
        assert third["completed"] is True
        assert third["completedAt"] is not None


class TestListing:
    def test_filters(self, make_user):
        c, _ = make_user()
        _create(c, "a", priority="high", category="work")
        _create(c, "b", priority="low", category="home", completed=True)
        _create(c, "c", priority="high", category="home")

        assert c.get(TASKS, params={"priority": "high"}).json()["total"] == 2
        assert c.get(TASKS, params={"category": "home"}).json()["total"] == 2
        assert c.get(TASKS, params={"completed": "true"}).json()["total"] == 1
        assert c.get(TASKS, params={"completed": "false", "category": "home"}).json()["total"] == 1

    def test_pagination(self, make_user):
        c, _ = make_user()
        for i in range(5):
            _create(c, f"task {i}")

        page = c.get(TASKS, params={"page": 2, "limit": 2}).json()
        assert page["success"] is True
        assert page["count"] == 2
        assert page["total"] == 5
        assert page["page"] == 2
        assert page["pages"] == 3

        last = c.get(TASKS, params={"page": 3, "limit": 2}).json()
        assert last["count"] == 1

    def test_pagination_bounds(self, make_user):
        c, _ = make_user()
        assert c.get(TASKS, params={"page": 0}).status_code == 400
        assert c.get(TASKS, params={"limit": 1000}).status_code == 400

    def test_sort(self, make_user):
        c, _ = make_user()
        _create(c, "banana")
        _create(c, "apple")
        _create(c, "cherry")

        asc = [t["text"] for t in c.get(TASKS, params={"sort": "text"}).json()["data"]]
        assert asc == ["apple", "banana", "cherry"]
        desc = [t["text"] for t in c.get(TASKS, params={"sort": "-text"}).json()["data"]]
        assert desc == ["cherry", "banana", "apple"]

    def test_unknown_sort_field(self, make_user):
        c, _ = make_user()
        resp = c.get(TASKS, params={"sort": "password"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_by_priority(self, make_user):
        c, _ = make_user()
        _create(c, "a", priority="high")
        _create(c, "b", priority="low")

        resp = c.get(f"{TASKS}/priority/high").json()
        assert resp["count"] == 1
        assert resp["data"][0]["text"] == "a"

    def test_by_invalid_priority(self, make_user):
        c, _ = make_user()
        resp = c.get(f"{TASKS}/priority/urgent")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid priority. Must be low, medium, or high"


class TestStatsAndBulkDelete:
    def test_stats(self, make_user):
        c, _ = make_user()
        _create(c, "pending high", priority="high")
        _create(c, "pending low", priority="low")
        _create(c, "done", priority="medium", completed=True)

        stats = c.get(f"{TASKS}/stats").json()["data"]
        assert stats == {"total": 3, "completed": 1, "pending": 2, "highPriority": 1, "overdue": 0}

    def test_stats_empty(self, make_user):
        c, _ = make_user()
        stats = c.get(f"{TASKS}/stats").json()["data"]
        assert stats == {"total": 0, "completed": 0, "pending": 0, "highPriority": 0, "overdue": 0}

    def test_overdue(self, make_user):
        c, _ = make_user()
        past = (datetime.utcnow() - timedelta(days=2)).isoformat()
        future = (datetime.utcnow() + timedelta(days=2)).isoformat()
        late = _create(c, "late", dueDate=past)
        _create(c, "on time", dueDate=future)
        _create(c, "late but done", dueDate=past, completed=True)

        assert late["isOverdue"] is True
        assert c.get(f"{TASKS}/stats").json()["data"]["overdue"] == 1

    def test_delete_single(self, make_user):
        c, _ = make_user()
        task = _create(c)
        resp = c.delete(f"{TASKS}/{task['id']}")
        assert resp.status_code == 200
        assert resp.json()["data"] == {}
        assert c.get(f"{TASKS}/{task['id']}").status_code == 404

    def test_delete_completed(self, make_user):
        c, _ = make_user()
        _create(c, "keep me")
        _create(c, "done 1", completed=True)
        _create(c, "done 2", completed=True)

        resp = c.delete(f"{TASKS}/completed")
        assert resp.status_code == 200
        assert resp.json()["data"]["deletedCount"] == 2
        assert resp.json()["message"] == "2 completed task(s) deleted"

        remaining = [t["text"] for t in c.get(TASKS).json()["data"]]
        assert remaining == ["keep me"]
        stats = c.get(f"{TASKS}/stats").json()["data"]
        assert stats["total"] == 1 and stats["completed"] == 0 and stats["pending"] == 1
