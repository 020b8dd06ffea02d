"""Shared fixtures for benchmark tests."""

from datetime import datetime, timedelta, timezone

import pytest

from app.models.activity import ActivityLog
from app.models.student import Student

BENCH_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
STATUSES = ("pending", "approved", "rejected")
PROGRAMS = ("Computer Science", "Data Science", "Mathematics", None)
ACTIVITY_TYPES = ("login", "video_watched", "quiz_completed", "material_viewed")


@pytest.fixture(name="bench_now")
def bench_now_fixture() -> datetime:
    return BENCH_NOW


@pytest.fixture(name="student_cohort")
def student_cohort_fixture() -> list[Student]:
    """
    Build a synthetic cohort of 5,000 students.

    Statuses, programs and years rotate deterministically and registrations are
    spread one hour apart going back from BENCH_NOW, so every window and
    grouping has members.
    """
    return [
        Student(
            id=f"s{i}",
            full_name=f"Student {i}",
            email=f"student{i}@example.com",
            student_id=f"STU-{i:05d}",
            program=PROGRAMS[i % len(PROGRAMS)],
            year_of_study=str(i % 4 + 1),
            status=STATUSES[i % len(STATUSES)],
            created_at=BENCH_NOW - timedelta(hours=i),
        )
        for i in range(5000)
    ]


@pytest.fixture(name="activity_feed")
def activity_feed_fixture() -> list[ActivityLog]:
    return [
        ActivityLog.model_validate(
            {
                "id": f"a{i}",
                "userId": f"s{i % 500}",
                "activityType": ACTIVITY_TYPES[i % len(ACTIVITY_TYPES)],
                "action": "Viewed lesson",
                "title": f"Lesson {i % 40}",
                "createdAt": (BENCH_NOW - timedelta(minutes=17 * i)).isoformat(),
                "user": {
                    "id": f"s{i % 500}",
                    "fullName": f"Student {i % 500}",
                    "email": f"student{i % 500}@example.com",
                },
            }
        )
        for i in range(5000)
    ]
