"""Selection Tracker: pending students checked for a bulk action."""

from typing import Iterable, Iterator


class SelectionTracker:
    """
    The set of student ids currently selected in the moderation view.

    The tracker does not know student statuses. Callers pass the current
    candidate set (the pending students on display) to `select_all` and
    `retain`; `toggle` takes whatever id it is given.
    """

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: set[str] = set(ids)

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    def toggle(self, student_id: str) -> bool:
        """Flip membership of one id. Returns True when the id is now selected."""
        if student_id in self._ids:
            self._ids.discard(student_id)
            return False
        self._ids.add(student_id)
        return True

    def select_all(self, candidate_ids: Iterable[str]) -> None:
        """
        Toggle between "all candidates selected" and "nothing selected".

        If the selection already equals the candidate set it is cleared,
        otherwise it becomes exactly the candidate set.
        """
        candidates = set(candidate_ids)
        if self._ids == candidates:
            self._ids.clear()
        else:
            self._ids = candidates

    def all_selected(self, candidate_ids: Iterable[str]) -> bool:
        candidates = set(candidate_ids)
        return bool(candidates) and self._ids == candidates

    def retain(self, candidate_ids: Iterable[str]) -> set[str]:
        """Drop ids that are no longer candidates; returns the dropped ids."""
        dropped = self._ids.difference(candidate_ids)
        self._ids -= dropped
        return dropped

    def clear(self) -> None:
        self._ids.clear()

    def __contains__(self, student_id: object) -> bool:
        return student_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))

    def __bool__(self) -> bool:
        return bool(self._ids)
