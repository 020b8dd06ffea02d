import asyncio
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from app.core.config import Settings
from app.core.session import AdminSession
from app.models.student import Student
from app.services.api_client import ConsoleApiClient
from app.services.moderation import ModerationEngine
from app.services.record_source import RecordSource
from app.services.selection import SelectionTracker

BASE_URL = "http://platform.test"
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def student_payload(
    student_id: str,
    status: str = "pending",
    created_at: datetime | None = None,
    **overrides,
) -> dict:
    """Camel-cased student record as served by the learning platform."""
    payload = {
        "id": student_id,
        "fullName": f"Student {student_id}",
        "email": f"{student_id.lower()}@example.com",
        "phoneNumber": "0123456789",
        "studentId": f"S-{student_id}",
        "program": None,
        "yearOfStudy": None,
        "status": status,
        "createdAt": (created_at or NOW).isoformat(),
    }
    payload.update(overrides)
    return payload


def make_student(student_id: str, status: str = "pending", **overrides) -> Student:
    return Student.model_validate(student_payload(student_id, status, **overrides))


def activity_payload(
    activity_id: str,
    activity_type: str = "login",
    created_at: datetime | None = None,
    user: dict | None = None,
    **overrides,
) -> dict:
    payload = {
        "id": activity_id,
        "userId": (user or {}).get("id", "u1"),
        "activityType": activity_type,
        "action": f"{activity_type} action",
        "title": None,
        "description": None,
        "score": None,
        "metadata": None,
        "createdAt": (created_at or NOW).isoformat(),
        "user": user
        or {
            "id": "u1",
            "fullName": "Jane Smith",
            "email": "jane@example.com",
            "studentId": "S-001",
        },
    }
    payload.update(overrides)
    return payload


class FakePlatform:
    """
    In-memory stand-in for the learning platform API, served via httpx.MockTransport.

    Set `failures[(method, path)]` to an httpx.Response to make one route fail (or
    to an httpx.TransportError to make it unreachable), or
    `hold` to an asyncio.Event to park every GET until the event is set.
    """

    def __init__(self, students=()):
        self.students = {s["id"]: dict(s) for s in students}
        self.activities: list[dict] = []
        self.activity_stats = {"total": 0, "byType": {}, "today": 0, "thisWeek": 0}
        self.leaderboard = {"success": True, "data": []}
        self.progress: list[dict] = []
        self.reasons: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], httpx.Response | httpx.TransportError] = {}
        self.hold: asyncio.Event | None = None

    def statuses(self) -> dict[str, str]:
        return {sid: s["status"] for sid, s in self.students.items()}

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path

        failure = self.failures.get((method, path))
        if isinstance(failure, httpx.TransportError):
            raise failure
        if failure is not None:
            return failure

        if method == "GET":
            if self.hold is not None:
                await self.hold.wait()
            return self._read(request, path)
        return self._write(request, path)

    def _read(self, request: httpx.Request, path: str) -> httpx.Response:
        if path == "/api/auth/admin/all-students":
            return httpx.Response(200, json=list(self.students.values()))
        if path == "/api/admin/activities":
            params = request.url.params
            logs = [
                a
                for a in self.activities
                if ("type" not in params or a["activityType"] == params["type"])
                and ("userId" not in params or a["userId"] == params["userId"])
            ]
            return httpx.Response(200, json=logs[: int(params.get("limit", 100))])
        if path == "/api/admin/activity-stats":
            return httpx.Response(200, json=self.activity_stats)
        if path == "/api/admin/leaderboard":
            return httpx.Response(200, json=self.leaderboard)
        if path == "/api/admin/progress/students":
            return httpx.Response(200, json=self.progress)
        return httpx.Response(404, json={"message": "Not found"})

    def _write(self, request: httpx.Request, path: str) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        if path == "/api/auth/admin/bulk-approve":
            for sid in body["userIds"]:
                self.students[sid]["status"] = "approved"
            return httpx.Response(200, json={"success": True})

        action, _, student_id = path.rpartition("/")
        if student_id not in self.students:
            return httpx.Response(404, json={"message": "Student not found"})
        if action.endswith("/approve"):
            self.students[student_id]["status"] = "approved"
        elif action.endswith("/reject"):
            self.students[student_id]["status"] = "rejected"
            self.reasons[student_id] = body
        else:
            return httpx.Response(404, json={"message": "Not found"})
        return httpx.Response(200, json={"success": True})


@pytest.fixture(scope="function")
def test_settings():
    """Provide test settings pointing at the fake platform."""
    return Settings(API_BASE_URL=BASE_URL)


@pytest.fixture
def platform():
    return FakePlatform(
        [
            student_payload("A", "pending", fullName="Jane Smith", email="j@x.com"),
            student_payload("B", "pending", fullName="John Doe"),
            student_payload(
                "C", "approved", created_at=NOW - timedelta(days=10)
            ),
        ]
    )


@pytest.fixture
def admin_session():
    return AdminSession(token="test-token")


@pytest.fixture
def api_client(platform, admin_session, test_settings):
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(platform), base_url=BASE_URL
    )
    return ConsoleApiClient(admin_session, settings=test_settings, http_client=http_client)


@pytest.fixture
def record_source(api_client):
    return RecordSource(api_client)


@pytest.fixture
def selection():
    return SelectionTracker()


@pytest.fixture
def engine(api_client, selection):
    return ModerationEngine(api_client, selection)


@pytest.fixture(name="now")
def now_fixture() -> datetime:
    """Fixed reference instant shared by the records built in tests."""
    return NOW


@pytest.fixture(name="student_payload_factory")
def student_payload_factory_fixture():
    return student_payload


@pytest.fixture(name="student_factory")
def student_factory_fixture():
    """Factory producing validated Student models: student_factory("A", "approved", ...)."""
    return make_student


@pytest.fixture(name="activity_payload_factory")
def activity_payload_factory_fixture():
    return activity_payload
