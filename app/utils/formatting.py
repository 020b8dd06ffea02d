"""Display helpers shared by the console views."""

from datetime import datetime, timezone

from app.models.enums import ActivityType

NOT_SPECIFIED = "Not specified"

ACTIVITY_TYPE_LABELS: dict[str, str] = {
    ActivityType.COURSE_ACCESSED: "Course Accessed",
    ActivityType.VIDEO_WATCHED: "Video Watched",
    ActivityType.QUIZ_COMPLETED: "Quiz Completed",
    ActivityType.QUIZ_STARTED: "Quiz Started",
    ActivityType.MATERIAL_VIEWED: "Material Viewed",
    ActivityType.LOGIN: "Login",
    ActivityType.DASHBOARD_ACCESSED: "Dashboard Accessed",
}


def group_label(key: str | None) -> str:
    """Label for a program/year grouping key; absent keys read "Not specified"."""
    return key if key else NOT_SPECIFIED


def activity_type_label(activity_type: str) -> str:
    # Unknown tags are shown as sent
    return ACTIVITY_TYPE_LABELS.get(activity_type, activity_type)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''} ago"


def format_time_ago(moment: datetime, now: datetime | None = None) -> str:
    """
    Humanize how long ago `moment` was.

    Returns "Just now" under a minute, then minutes, hours and days; anything
    a week or older is shown as its date.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = int((now - moment).total_seconds())
    if seconds < 60:
        return "Just now"
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    days = hours // 24
    if days < 7:
        return _plural(days, "day")
    return moment.date().isoformat()
