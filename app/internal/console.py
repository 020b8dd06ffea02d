from datetime import datetime, timezone
from typing import Annotated, Literal

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse

from app.core.dependencies import get_moderation_engine, get_record_source
from app.models.activity import ActivityLog, ActivityStats
from app.models.analytics import AnalyticsSnapshot, LeaderboardRow, ProgressOverview
from app.models.console import ActivityList, ActivityRow, StudentList, StudentRow
from app.models.enums import StudentStatus
from app.models.moderation import BulkApproveRequest, ModerationOutcome, RejectRequest
from app.models.student import Student
from app.services import analytics as analytics_service
from app.services import filtering
from app.services.moderation import ModerationEngine
from app.services.record_source import RecordSource
from app.utils.formatting import activity_type_label, format_time_ago, group_label

router = APIRouter(prefix="/console", tags=["Admin Console"])

Source = Annotated[RecordSource, Depends(get_record_source)]
Engine = Annotated[ModerationEngine, Depends(get_moderation_engine)]


def _student_row(student: Student, now: datetime) -> StudentRow:
    return StudentRow(
        **student.model_dump(),
        program_label=group_label(student.program),
        year_label=group_label(student.year_of_study),
        registered_ago=format_time_ago(student.created_at, now),
    )


def _activity_row(log: ActivityLog, now: datetime) -> ActivityRow:
    return ActivityRow(
        **log.model_dump(),
        type_label=activity_type_label(log.activity_type),
        time_ago=format_time_ago(log.created_at, now),
    )


def _outcome_response(outcome: ModerationOutcome) -> ModerationOutcome | JSONResponse:
    """Successful outcomes are returned as-is; failed ones keep the body with an error status."""
    if outcome.succeeded:
        return outcome
    if outcome.status_code == status.HTTP_401_UNAUTHORIZED:
        status_code = status.HTTP_401_UNAUTHORIZED
    elif outcome.status_code is not None:
        status_code = status.HTTP_502_BAD_GATEWAY
    else:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(
        status_code=status_code,
        content=outcome.model_dump(mode="json", by_alias=True),
    )


@router.get("/dashboard", response_model=AnalyticsSnapshot)
async def read_dashboard(source: Source):
    students = await source.students()
    return analytics_service.student_analytics(students)


@router.get("/students", response_model=StudentList)
async def list_students(
    source: Source,
    q: str = "",
    student_status: Annotated[
        StudentStatus | Literal["all"] | None, Query(alias="status")
    ] = None,
):
    students = await source.students()
    matches = filtering.filter_students(students, q, student_status)
    now = datetime.now(timezone.utc)
    return StudentList(
        total=len(students),
        matched=len(matches),
        students=tuple(_student_row(s, now) for s in matches),
        pending_ids=tuple(analytics_service.pending_ids(matches)),
    )


@router.post("/students/bulk-approve", response_model=ModerationOutcome)
async def bulk_approve_students(
    engine: Engine,
    request: Annotated[BulkApproveRequest, Body()],
):
    return _outcome_response(await engine.bulk_approve(request.user_ids))


@router.post("/students/{student_id}/approve", response_model=ModerationOutcome)
async def approve_student(student_id: str, engine: Engine):
    return _outcome_response(await engine.approve(student_id))


@router.post("/students/{student_id}/reject", response_model=ModerationOutcome)
async def reject_student(
    student_id: str,
    engine: Engine,
    request: Annotated[RejectRequest | None, Body()] = None,
):
    reason = request.reason if request is not None else None
    return _outcome_response(await engine.reject(student_id, reason))


@router.get("/activity", response_model=ActivityList)
async def list_activity(
    source: Source,
    q: str = "",
    activity_type: Annotated[str | None, Query(alias="type")] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
):
    logs = await source.activity_logs(activity_type, user_id, limit)
    # Type is filtered server-side; only the free-text search runs here
    matches = filtering.filter_activity_logs(logs, q)
    now = datetime.now(timezone.utc)
    return ActivityList(
        total=len(logs),
        matched=len(matches),
        activities=tuple(_activity_row(log, now) for log in matches),
        stats=analytics_service.activity_statistics(logs, now=now),
    )


@router.get("/activity/stats", response_model=ActivityStats)
async def read_activity_stats(source: Source):
    return await source.activity_stats()


@router.get("/leaderboard", response_model=list[LeaderboardRow])
async def read_leaderboard(
    source: Source, limit: Annotated[int | None, Query(ge=1)] = None
):
    return analytics_service.leaderboard_rows(await source.leaderboard(limit))


@router.get("/progress", response_model=ProgressOverview)
async def read_progress(source: Source):
    summaries = await source.progress_summaries()
    return analytics_service.progress_overview(summaries.records)
