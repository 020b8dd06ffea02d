from datetime import datetime
from typing import Any

from .base import WireModel


class ActivityOwner(WireModel):
    """Denormalized summary of the user an activity log belongs to."""

    id: str
    full_name: str
    email: str
    student_id: str | None = None


class ActivityLog(WireModel):
    id: str
    user_id: str
    # Kept as a plain string so tags unknown to ActivityType survive a fetch
    activity_type: str
    action: str
    title: str | None = None
    description: str | None = None
    score: float | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime
    user: ActivityOwner


class ActivityStats(WireModel):
    """Activity counts, as served by the API or derived from a log snapshot."""

    total: int
    by_type: dict[str, int]
    today: int
    this_week: int
