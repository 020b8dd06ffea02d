"""Analytics and statistics models for the admin dashboard."""

from datetime import datetime

from .base import WireModel
from .student import Student


class AnalyticsSnapshot(WireModel):
    """Dashboard statistics derived from one Student snapshot."""

    total: int
    approved: int
    pending: int
    rejected: int
    approval_rate: str
    last_7_days: int
    last_30_days: int
    by_program: dict[str, int]
    by_year: dict[str, int]
    recent_registrations: tuple[Student, ...]
    generated_at: datetime


class LeaderboardRow(WireModel):
    """Leaderboard entry ready for display."""

    rank: int
    user_id: str
    name: str
    avg_progress: float
    display_progress: int  # rounded, not clamped
    bar_width: float  # clamped to [0, 100]


class LanguageBar(WireModel):
    name: str
    progress: float
    bar_width: float


class StudentProgressRow(WireModel):
    id: str
    name: str
    email: str
    overall_progress: float | None
    courses_completed: int
    videos_watched: int
    quizzes_completed: int
    current_streak: int
    languages: tuple[LanguageBar, ...]


class ProgressOverview(WireModel):
    """Cohort-level progress figures plus the per-student rows."""

    student_count: int
    average_progress: int
    students: tuple[StudentProgressRow, ...]
