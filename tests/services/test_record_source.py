import asyncio

import httpx
import pytest

from app.core.events import EventTypes
from app.exceptions import RequestRejectedError
from app.models.enums import ResourceKind, StudentStatus
from app.models.leaderboard import LeaderboardEntry
from app.services.record_source import RecordSource, Snapshot


@pytest.mark.asyncio
async def test_students_snapshot(record_source: RecordSource):
    snapshot = await record_source.students()

    assert isinstance(snapshot, Snapshot)
    assert snapshot.kind is ResourceKind.STUDENTS
    assert [s.id for s in snapshot] == ["A", "B", "C"]
    assert snapshot.records[0].full_name == "Jane Smith"
    assert snapshot.records[2].status is StudentStatus.APPROVED
    assert snapshot.fetched_at.tzinfo is not None


@pytest.mark.asyncio
async def test_second_read_is_served_from_cache(record_source, platform):
    first = await record_source.students()
    second = await record_source.students()

    assert first is second
    assert len(platform.requests) == 1


@pytest.mark.asyncio
async def test_fetch_bypasses_and_refreshes_the_cache(record_source, platform):
    first = await record_source.students()
    platform.students["A"]["status"] = "approved"

    fresh = await record_source.fetch(ResourceKind.STUDENTS)

    assert fresh is not first
    assert record_source.cached(ResourceKind.STUDENTS) is fresh
    assert fresh.records[0].status is StudentStatus.APPROVED
    # Earlier snapshots are never mutated
    assert first.records[0].status is StudentStatus.PENDING


@pytest.mark.asyncio
async def test_students_changed_invalidates_snapshots(record_source, admin_session):
    await record_source.students()

    await admin_session.events.publish(
        EventTypes.STUDENTS_CHANGED, {"student_ids": ["A"]}
    )

    assert record_source.cached(ResourceKind.STUDENTS) is None


@pytest.mark.asyncio
async def test_session_end_drops_every_snapshot(record_source, admin_session):
    await record_source.students()
    await record_source.progress_summaries()

    await admin_session.logout()

    assert record_source.cached(ResourceKind.STUDENTS) is None
    assert record_source.cached(ResourceKind.PROGRESS_SUMMARIES) is None


@pytest.mark.asyncio
async def test_activity_logs_params(record_source, platform, activity_payload_factory):
    platform.activities = [
        activity_payload_factory("1", "login"),
        activity_payload_factory("2", "quiz_completed"),
    ]

    everything = await record_source.activity_logs("all")
    quizzes = await record_source.activity_logs("quiz_completed", user_id="u1")

    assert dict(platform.requests[0].url.params) == {"limit": "100"}
    assert dict(platform.requests[1].url.params) == {
        "type": "quiz_completed",
        "userId": "u1",
        "limit": "100",
    }
    assert [a.id for a in everything] == ["1", "2"]
    assert [a.id for a in quizzes] == ["2"]
    assert quizzes.records[0].user.full_name == "Jane Smith"


@pytest.mark.asyncio
async def test_snapshots_are_cached_per_params(record_source, platform):
    await record_source.activity_logs("login")
    await record_source.activity_logs("quiz_completed")
    await record_source.activity_logs("login")

    assert len(platform.requests) == 2


@pytest.mark.asyncio
async def test_unknown_activity_types_survive(record_source, platform, activity_payload_factory):
    platform.activities = [activity_payload_factory("1", "badge_earned")]

    logs = await record_source.activity_logs()

    assert logs.records[0].activity_type == "badge_earned"


@pytest.mark.asyncio
async def test_activity_stats(record_source, platform):
    platform.activity_stats = {
        "total": 12,
        "byType": {"login": 9, "quiz_completed": 3},
        "today": 2,
        "thisWeek": 7,
    }

    stats = await record_source.activity_stats()

    assert stats.total == 12
    assert stats.by_type == {"login": 9, "quiz_completed": 3}
    assert (stats.today, stats.this_week) == (2, 7)


@pytest.mark.asyncio
async def test_leaderboard_envelope_is_unwrapped(record_source, platform):
    platform.leaderboard = {
        "success": True,
        "data": [
            {"rank": 1, "userId": "u1", "name": "Ada", "avgProgress": 91.5},
            {"rank": 2, "userId": "u2", "name": "Bob", "avgProgress": 80},
        ],
    }

    board = await record_source.leaderboard()

    assert board.records == (
        LeaderboardEntry(rank=1, user_id="u1", name="Ada", avg_progress=91.5),
        LeaderboardEntry(rank=2, user_id="u2", name="Bob", avg_progress=80),
    )
    assert dict(platform.requests[0].url.params) == {"limit": "50"}


@pytest.mark.asyncio
async def test_failed_leaderboard_envelope(record_source, platform):
    platform.leaderboard = {"success": False, "message": "Leaderboard unavailable"}

    with pytest.raises(RequestRejectedError) as exc_info:
        await record_source.leaderboard()

    assert exc_info.value.message == "Leaderboard unavailable"
    assert exc_info.value.status_code is None
    assert record_source.cached(ResourceKind.LEADERBOARD, {"limit": 50}) is None


@pytest.mark.asyncio
async def test_failed_leaderboard_envelope_without_message(record_source, platform):
    platform.leaderboard = {"success": False}

    with pytest.raises(RequestRejectedError) as exc_info:
        await record_source.leaderboard(limit=10)

    assert exc_info.value.message == "Unexpected response from server"


@pytest.mark.asyncio
async def test_malformed_records_are_rejected(record_source, platform):
    platform.students = {"X": {"id": "X", "status": "pending"}}

    with pytest.raises(RequestRejectedError):
        await record_source.students()


@pytest.mark.asyncio
async def test_non_list_body_is_rejected(record_source, platform):
    platform.failures[("GET", "/api/admin/progress/students")] = httpx.Response(
        200, json={"students": []}
    )

    with pytest.raises(RequestRejectedError):
        await record_source.progress_summaries()


@pytest.mark.asyncio
async def test_failed_fetch_keeps_previous_snapshot(record_source, platform):
    good = await record_source.students()
    platform.failures[("GET", "/api/auth/admin/all-students")] = httpx.Response(
        500, json={"message": "Database down"}
    )

    with pytest.raises(RequestRejectedError) as exc_info:
        await record_source.fetch(ResourceKind.STUDENTS)

    assert exc_info.value.message == "Database down"
    assert record_source.cached(ResourceKind.STUDENTS) is good


async def _parked(platform, count=1):
    """Yield until `count` requests have reached the fake platform."""
    while len(platform.requests) < count:
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_read_started_before_invalidation_is_not_cached(record_source, platform):
    platform.hold = asyncio.Event()
    in_flight = asyncio.create_task(record_source.students())
    await _parked(platform)

    record_source.invalidate(ResourceKind.STUDENTS)
    platform.hold.set()
    snapshot = await in_flight

    assert len(snapshot) == 3
    assert record_source.cached(ResourceKind.STUDENTS) is None


@pytest.mark.asyncio
async def test_later_read_wins_over_slower_earlier_read(record_source, platform):
    slow_gate = platform.hold = asyncio.Event()
    slow = asyncio.create_task(record_source.fetch(ResourceKind.STUDENTS))
    await _parked(platform)

    platform.hold = None
    platform.students["A"]["status"] = "approved"
    fast = await record_source.fetch(ResourceKind.STUDENTS)
    assert record_source.cached(ResourceKind.STUDENTS) is fast

    slow_gate.set()
    await slow

    assert record_source.cached(ResourceKind.STUDENTS) is fast


@pytest.mark.asyncio
async def test_cancelled_fetch_propagates_and_caches_nothing(record_source, platform):
    platform.hold = asyncio.Event()
    task = asyncio.create_task(record_source.students())
    await _parked(platform)

    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert record_source.cached(ResourceKind.STUDENTS) is None
