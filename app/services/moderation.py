"""
Moderation Engine Module.

Drives student approval state transitions against the learning platform API.
The engine never mutates local records: a successful call publishes
`students.changed`, the Record Source Adapter drops its Student snapshots, and
the next read shows the backend's truth. A failed call changes nothing.

Key Responsibilities:
- approve / reject one student, bulk-approve a selection in one request.
- Reject an empty bulk selection locally, before any network call.
- Report one outcome per call, as a return value and as an event.
- Track in-flight calls per action without serializing unrelated calls.
"""

import logging
from collections import Counter
from typing import Any, Iterable

from app.core.events import EventTypes
from app.exceptions import NoSelectionError, RemoteError
from app.models.enums import ModerationAction
from app.models.moderation import BulkApproveRequest, ModerationOutcome, RejectRequest
from app.services.api_client import ConsoleApiClient
from app.services.selection import SelectionTracker

logger = logging.getLogger(__name__)

APPROVE_PATH = "/api/auth/admin/approve/{student_id}"
REJECT_PATH = "/api/auth/admin/reject/{student_id}"
BULK_APPROVE_PATH = "/api/auth/admin/bulk-approve"

SUCCESS_TITLES = {
    ModerationAction.APPROVE: "Student approved!",
    ModerationAction.REJECT: "Student rejected",
    ModerationAction.BULK_APPROVE: "Students approved!",
}

FAILURE_TITLES = {
    ModerationAction.APPROVE: "Approval failed",
    ModerationAction.REJECT: "Rejection failed",
    ModerationAction.BULK_APPROVE: "Approval failed",
}

# Used when the server gives no reason of its own
FAILURE_FALLBACKS = {
    ModerationAction.APPROVE: "Failed to approve student",
    ModerationAction.REJECT: "Failed to reject student",
    ModerationAction.BULK_APPROVE: "Failed to approve students",
}


SUCCESS_MESSAGES = {
    ModerationAction.APPROVE: "The student has been approved successfully",
    ModerationAction.REJECT: "The student has been rejected",
    ModerationAction.BULK_APPROVE: "{count} student(s) have been approved successfully",
}


class ModerationEngine:
    """
    Service layer for student moderation.

    Attributes:
        api (ConsoleApiClient): Client used to submit moderation requests.
        selection (SelectionTracker): Selection cleared by a successful bulk approval.
    """

    def __init__(self, api: ConsoleApiClient, selection: SelectionTracker | None = None):
        self.api = api
        self.events = api.session.events
        self.selection = selection if selection is not None else SelectionTracker()
        self._in_flight: Counter[ModerationAction] = Counter()

    def is_pending(self, action: ModerationAction) -> bool:
        """True while at least one call of `action` awaits its response."""
        return self._in_flight[action] > 0

    async def approve(self, student_id: str) -> ModerationOutcome:
        """Transition one student from pending to approved."""
        return await self._submit(
            ModerationAction.APPROVE,
            (student_id,),
            APPROVE_PATH.format(student_id=student_id),
            None,
        )

    async def reject(self, student_id: str, reason: str | None = None) -> ModerationOutcome:
        """
        Transition one student from pending to rejected.

        Parameters:
            student_id (str): The student to reject.
            reason (str | None): Free-text reason, forwarded verbatim when given.
        """
        body = RejectRequest(reason=reason).model_dump(by_alias=True, exclude_none=True)
        return await self._submit(
            ModerationAction.REJECT,
            (student_id,),
            REJECT_PATH.format(student_id=student_id),
            body,
        )

    async def bulk_approve(
        self, student_ids: Iterable[str] | None = None
    ) -> ModerationOutcome:
        """
        Approve every given student in a single request.

        The batch is all-or-nothing from the caller's side: no per-id retry or
        partial bookkeeping happens here. On success the selection is cleared.

        Parameters:
            student_ids (Iterable[str] | None): Ids to approve; defaults to the
                current selection.

        Raises:
            NoSelectionError: If there is nothing to approve. No request is sent.
        """
        source = self.selection if student_ids is None else student_ids
        ids = tuple(dict.fromkeys(source))
        if not ids:
            raise NoSelectionError()

        body = BulkApproveRequest(user_ids=list(ids)).model_dump(by_alias=True)
        outcome = await self._submit(
            ModerationAction.BULK_APPROVE, ids, BULK_APPROVE_PATH, body
        )
        if outcome.succeeded:
            self.selection.clear()
        return outcome

    async def _submit(
        self,
        action: ModerationAction,
        student_ids: tuple[str, ...],
        path: str,
        body: dict[str, Any] | None,
    ) -> ModerationOutcome:
        self._in_flight[action] += 1
        try:
            await self.api.post(path, json=body)
        except RemoteError as e:
            outcome = ModerationOutcome(
                action=action,
                student_ids=student_ids,
                succeeded=False,
                title=FAILURE_TITLES[action],
                message=e.server_message or FAILURE_FALLBACKS[action],
                status_code=getattr(e, "status_code", None),
            )
            logger.warning(
                "%s of %s failed: %s", action.value, ", ".join(student_ids), e.message
            )
            await self.events.publish(
                EventTypes.MODERATION_FAILED, outcome.model_dump(mode="json")
            )
            return outcome
        finally:
            self._in_flight[action] -= 1

        outcome = ModerationOutcome(
            action=action,
            student_ids=student_ids,
            succeeded=True,
            title=SUCCESS_TITLES[action],
            message=SUCCESS_MESSAGES[action].format(count=len(student_ids)),
        )
        logger.info("%s succeeded for %s", action.value, ", ".join(student_ids))
        await self.events.publish(
            EventTypes.STUDENTS_CHANGED, {"student_ids": list(student_ids)}
        )
        await self.events.publish(
            EventTypes.MODERATION_SUCCEEDED, outcome.model_dump(mode="json")
        )
        return outcome
