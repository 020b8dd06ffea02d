"""Filter/Search Engine for record collections shown in the console.

A record matches when the query is a case-insensitive substring of any of its
searchable fields AND it equals every active categorical filter. Results keep
source order and never alias the source collection.
"""

from typing import Any, Callable, Iterable, Sequence, TypeVar

from app.models.activity import ActivityLog
from app.models.student import Student

T = TypeVar("T")

FieldGetter = Callable[[Any], str | None]

STUDENT_SEARCH_FIELDS: tuple[FieldGetter, ...] = (
    lambda s: s.full_name,
    lambda s: s.email,
    lambda s: s.student_id,
)

ACTIVITY_SEARCH_FIELDS: tuple[FieldGetter, ...] = (
    lambda a: a.user.full_name,
    lambda a: a.user.email,
    lambda a: a.user.student_id,
    lambda a: a.title,
    lambda a: a.action,
)

ALL = "all"


def _is_active(value: Any) -> bool:
    return value is not None and value != ALL and value != ""


def matches_query(record: Any, query: str, fields: Sequence[FieldGetter]) -> bool:
    """True when `query` is a case-insensitive substring of any non-empty field."""
    needle = query.lower()
    if not needle:
        return True
    for get in fields:
        value = get(record)
        if value and needle in value.lower():
            return True
    return False


def filter_records(
    records: Iterable[T],
    query: str,
    fields: Sequence[FieldGetter],
    **equals: Any,
) -> tuple[T, ...]:
    """
    Apply free-text search plus equality filters.

    Args:
        records: Source collection; left untouched.
        query: Free text; empty matches everything.
        fields: Getters for the searchable fields of this entity.
        **equals: Attribute name to required value. None or "all" disables a filter.

    Returns:
        tuple: Matching records in source order.
    """
    active = {name: value for name, value in equals.items() if _is_active(value)}
    return tuple(
        record
        for record in records
        if matches_query(record, query or "", fields)
        and all(getattr(record, name) == value for name, value in active.items())
    )


def filter_students(
    students: Iterable[Student], query: str = "", status: str | None = None
) -> tuple[Student, ...]:
    """Search name, email and student id; optionally keep one status only."""
    return filter_records(students, query, STUDENT_SEARCH_FIELDS, status=status)


def filter_activity_logs(
    logs: Iterable[ActivityLog], query: str = "", activity_type: str | None = None
) -> tuple[ActivityLog, ...]:
    """Search owner name/email/student id, title and action; optionally one type."""
    return filter_records(
        logs, query, ACTIVITY_SEARCH_FIELDS, activity_type=activity_type
    )
