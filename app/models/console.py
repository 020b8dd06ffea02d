"""Response bodies of the console HTTP surface."""

from .activity import ActivityLog, ActivityStats
from .base import WireModel
from .student import Student


class StudentRow(Student):
    """Student as listed in the moderation table, with its display labels."""

    program_label: str
    year_label: str
    registered_ago: str


class ActivityRow(ActivityLog):
    type_label: str
    time_ago: str


class StudentList(WireModel):
    total: int
    matched: int
    students: tuple[StudentRow, ...]
    # Pending ids among the matches: the candidate set for "select all"
    pending_ids: tuple[str, ...]


class ActivityList(WireModel):
    total: int
    matched: int
    activities: tuple[ActivityRow, ...]
    stats: ActivityStats  # derived from the fetched logs
