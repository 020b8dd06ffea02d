from .base import WireModel


class LanguageProgress(WireModel):
    name: str
    progress: float


class ProgressSummary(WireModel):
    """Per-student progress roll-up; every figure is computed by the backend."""

    id: str
    name: str
    email: str
    overall_progress: float | None = 0
    courses_completed: int = 0
    videos_watched: int = 0
    quizzes_completed: int = 0
    current_streak: int = 0
    languages: tuple[LanguageProgress, ...] = ()
