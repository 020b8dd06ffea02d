"""Request and outcome models for student moderation."""

from pydantic import Field

from .base import WireModel
from .enums import ModerationAction


class RejectRequest(WireModel):
    reason: str | None = None


class BulkApproveRequest(WireModel):
    user_ids: list[str] = Field(default_factory=list)


class ModerationOutcome(WireModel):
    """Result of one moderation call, as reported to the presentation layer."""

    action: ModerationAction
    student_ids: tuple[str, ...]
    succeeded: bool
    title: str
    message: str
    status_code: int | None = None  # upstream HTTP status of a failed call
