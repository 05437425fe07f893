import json
import re
from datetime import date

import httpx
import pytest

from leet_tracker.api import ProblemsApi
from leet_tracker.models import Difficulty, Problem, Status
from leet_tracker.schedule import is_review_due


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_prefs.db")
    return db_path


def make_problem(id=1, **overrides) -> Problem:
    fields = dict(
        id=id,
        problem_number=id,
        title=f"Problem {id}",
        difficulty=Difficulty.EASY,
        status=Status.NEW,
        pattern="Array",
        date_attempted=date(2025, 1, 1),
    )
    fields.update(overrides)
    return Problem(**fields)


@pytest.fixture
def problem_factory():
    return make_problem


class FakeServer:
    """In-memory stand-in for the problems API, served through httpx.MockTransport."""

    ADVANCE = {
        "first-review": (1, 2, "first_review_date"),
        "second-review": (2, 3, "second_review_date"),
        "master-review": (3, 4, "final_review_date"),
    }

    def __init__(self, today="2025-01-04"):
        self.today = today
        self.rows = {}
        self.next_id = 1
        self.requests = []
        self.fail = set()

    def add(self, **fields):
        row = {
            "id": self.next_id,
            "problem_number": fields.get("problem_number", self.next_id),
            "title": fields.get("title", f"Problem {self.next_id}"),
            "difficulty": fields.get("difficulty", 1),
            "status": fields.get("status", 1),
            "pattern": fields.get("pattern", "Array"),
            "notes": fields.get("notes", ""),
            "date_attempted": fields.get("date_attempted", "2025-01-01"),
            "first_review_date": fields.get("first_review_date"),
            "second_review_date": fields.get("second_review_date"),
            "final_review_date": fields.get("final_review_date"),
            "created_at": "2025-01-01T09:00:00",
            "updated_at": "2025-01-01T09:00:00",
        }
        self.rows[row["id"]] = row
        self.next_id += 1
        return row

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        self.requests.append((request.method, path))
        if (request.method, path) in self.fail:
            return httpx.Response(500, text="boom")

        if request.method == "GET" and path == "/problems":
            return httpx.Response(200, json=list(self.rows.values()))
        if request.method == "GET" and path == "/problems/stats":
            rows = list(self.rows.values())
            return httpx.Response(200, json={
                "total_problems": len(rows),
                "mastered_count": sum(1 for r in rows if r["status"] == 4),
                "new_count": sum(1 for r in rows if r["status"] == 1),
            })
        if request.method == "GET" and path == "/problems/reviews":
            today = date.fromisoformat(self.today)
            due = [r for r in self.rows.values() if is_review_due(Problem.from_api(r), today)]
            return httpx.Response(200, json=due)
        if request.method == "GET" and path == "/problems/today":
            return httpx.Response(200, json=[r for r in self.rows.values() if r["date_attempted"] == self.today])
        if request.method == "POST" and path == "/problems":
            body = json.loads(request.content)
            row = self.add(date_attempted=self.today, **body)
            return httpx.Response(201, json={"id": row["id"]})

        match = re.fullmatch(r"/problems/(\d+)(?:/([a-z-]+))?", path)
        if not match:
            return httpx.Response(404, text="not found")
        problem_id, action = int(match.group(1)), match.group(2)
        row = self.rows.get(problem_id)
        if row is None:
            return httpx.Response(404, text="Problem not found")

        if request.method == "GET" and action is None:
            return httpx.Response(200, json=row)
        if request.method == "DELETE" and action is None:
            del self.rows[problem_id]
            return httpx.Response(204)
        if request.method == "PUT" and action in self.ADVANCE:
            expected, new_status, stamp = self.ADVANCE[action]
            if row["status"] != expected:
                return httpx.Response(409, text="wrong status")
            row["status"] = new_status
            row[stamp] = row[stamp] or self.today
            return httpx.Response(200, json={"message": f"Problem updated ({action})"})
        if request.method == "PUT" and action == "reset-timer":
            row["status"] = max(1, row["status"] - 1)
            return httpx.Response(200, json={"message": "Review timer reset"})
        if request.method == "PUT" and action == "notes":
            row["notes"] = json.loads(request.content)["notes"]
            return httpx.Response(200, json={"message": "Notes updated"})
        return httpx.Response(405)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def api(server):
    client = ProblemsApi("http://testserver/api", transport=httpx.MockTransport(server))
    yield client
    client.close()
