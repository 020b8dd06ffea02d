"""Analytics service for admin dashboard statistics.

Every function here is a pure read of record snapshots. Statistics are
recomputed from the whole collection on each call and never cached across a
changed snapshot.
"""

import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Iterable, Sequence

from app.models.activity import ActivityLog, ActivityStats
from app.models.analytics import (
    AnalyticsSnapshot,
    LanguageBar,
    LeaderboardRow,
    ProgressOverview,
    StudentProgressRow,
)
from app.models.enums import StudentStatus
from app.models.leaderboard import LeaderboardEntry
from app.models.progress import ProgressSummary
from app.models.student import Student

RECENT_REGISTRATIONS = 5
WEEK = timedelta(days=7)
MONTH = timedelta(days=30)


def _aware(moment: datetime) -> datetime:
    # Naive timestamps from the API are UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _now(now: datetime | None) -> datetime:
    return _aware(now) if now is not None else datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return math.floor(value + 0.5)


def clamp_percentage(value: float) -> float:
    return max(0.0, min(100.0, value))


def approval_rate(approved: int, total: int) -> str:
    """
    Percentage of approved students with one decimal place.

    Returns:
        str: "0" when there are no students at all, e.g. "50.0" otherwise.
    """
    if total == 0:
        return "0"
    # Ties round up at one decimal: 1/16 reads "6.3"
    return f"{round_half_up(approved * 1000 / total) / 10:.1f}"


def student_analytics(
    students: Iterable[Student], now: datetime | None = None
) -> AnalyticsSnapshot:
    """
    Get dashboard statistics for a Student collection.

    Args:
        students: The Student snapshot to aggregate.
        now: Reference instant for the trailing windows; sampled once when omitted
             so the whole pass shares one cutoff.

    Returns:
        AnalyticsSnapshot: Counts by status, approval rate, 7/30-day registration
            counts (boundary inclusive), program/year groupings and the five most
            recent registrations.
    """
    students = list(students)
    now = _now(now)
    week_cutoff = now - WEEK
    month_cutoff = now - MONTH

    by_status = Counter(s.status for s in students)
    # Absent or empty grouping keys are skipped, never bucketed
    by_program = Counter(s.program for s in students if s.program)
    by_year = Counter(s.year_of_study for s in students if s.year_of_study)

    last_7_days = 0
    last_30_days = 0
    for student in students:
        created_at = _aware(student.created_at)
        if created_at >= week_cutoff:
            last_7_days += 1
        if created_at >= month_cutoff:
            last_30_days += 1

    recent = sorted(students, key=lambda s: _aware(s.created_at), reverse=True)

    approved = by_status[StudentStatus.APPROVED]
    return AnalyticsSnapshot(
        total=len(students),
        approved=approved,
        pending=by_status[StudentStatus.PENDING],
        rejected=by_status[StudentStatus.REJECTED],
        approval_rate=approval_rate(approved, len(students)),
        last_7_days=last_7_days,
        last_30_days=last_30_days,
        by_program=dict(by_program),
        by_year=dict(by_year),
        recent_registrations=tuple(recent[:RECENT_REGISTRATIONS]),
        generated_at=now,
    )


def pending_ids(students: Iterable[Student]) -> list[str]:
    """Candidate set for bulk selection: ids of pending students, in source order."""
    return [s.id for s in students if s.status == StudentStatus.PENDING]


def activity_statistics(
    logs: Iterable[ActivityLog], now: datetime | None = None
) -> ActivityStats:
    """
    Derive activity counts from a log snapshot.

    `today` counts logs on the same calendar day as `now` (in `now`'s timezone);
    `this_week` uses the same inclusive trailing 7-day cutoff as registrations.
    """
    logs = list(logs)
    now = _now(now)
    week_cutoff = now - WEEK

    today = 0
    this_week = 0
    for log in logs:
        created_at = _aware(log.created_at)
        if created_at.astimezone(now.tzinfo).date() == now.date():
            today += 1
        if created_at >= week_cutoff:
            this_week += 1

    return ActivityStats(
        total=len(logs),
        by_type=dict(Counter(log.activity_type for log in logs)),
        today=today,
        this_week=this_week,
    )


def leaderboard_rows(entries: Iterable[LeaderboardEntry]) -> list[LeaderboardRow]:
    """
    Prepare leaderboard entries for display.

    Ranks come from the backend and are passed through untouched. The shown
    percentage is rounded but not clamped; only the bar width is clamped.
    """
    return [
        LeaderboardRow(
            rank=entry.rank,
            user_id=entry.user_id,
            name=entry.name,
            avg_progress=entry.avg_progress,
            display_progress=round_half_up(entry.avg_progress),
            bar_width=clamp_percentage(entry.avg_progress),
        )
        for entry in entries
    ]


def progress_overview(summaries: Sequence[ProgressSummary]) -> ProgressOverview:
    """
    Cohort figures for the progress page.

    Per-student values (completions, streaks, language progress) are backend
    computed and passed through unchanged. The cohort average of overall
    progress is rounded to the nearest integer, 0 for an empty cohort.
    """
    rows = tuple(
        StudentProgressRow(
            id=s.id,
            name=s.name,
            email=s.email,
            overall_progress=s.overall_progress,
            courses_completed=s.courses_completed,
            videos_watched=s.videos_watched,
            quizzes_completed=s.quizzes_completed,
            current_streak=s.current_streak,
            languages=tuple(
                LanguageBar(
                    name=lang.name,
                    progress=lang.progress,
                    bar_width=clamp_percentage(lang.progress),
                )
                for lang in s.languages
            ),
        )
        for s in summaries
    )
    average = (
        round_half_up(sum(s.overall_progress or 0 for s in summaries) / len(summaries))
        if summaries
        else 0
    )
    return ProgressOverview(
        student_count=len(summaries), average_progress=average, students=rows
    )
