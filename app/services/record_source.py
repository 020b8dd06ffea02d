"""Record Source Adapter: read-only snapshots of learning platform records.

Every successful fetch yields an immutable `Snapshot` tagged with the moment
it was fetched. Snapshots are cached per (kind, params); the only way to
refresh one is to drop it and fetch again. Invalidation is driven by events
published on the admin session's bus, never by callers poking the cache.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from app.core.events import EventData, EventTypes
from app.exceptions import RequestRejectedError
from app.models.activity import ActivityLog, ActivityStats
from app.models.enums import ResourceKind
from app.models.leaderboard import LeaderboardEntry, LeaderboardEnvelope
from app.models.progress import ProgressSummary
from app.models.student import Student
from app.services.api_client import ConsoleApiClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

ParamsKey = tuple[tuple[str, Any], ...]

ENDPOINTS: dict[ResourceKind, str] = {
    ResourceKind.STUDENTS: "/api/auth/admin/all-students",
    ResourceKind.ACTIVITY_LOGS: "/api/admin/activities",
    ResourceKind.ACTIVITY_STATS: "/api/admin/activity-stats",
    ResourceKind.LEADERBOARD: "/api/admin/leaderboard",
    ResourceKind.PROGRESS_SUMMARIES: "/api/admin/progress/students",
}

RECORD_MODELS: dict[ResourceKind, type[BaseModel]] = {
    ResourceKind.STUDENTS: Student,
    ResourceKind.ACTIVITY_LOGS: ActivityLog,
    ResourceKind.ACTIVITY_STATS: ActivityStats,
    ResourceKind.LEADERBOARD: LeaderboardEntry,
    ResourceKind.PROGRESS_SUMMARIES: ProgressSummary,
}

UNEXPECTED_RESPONSE = "Unexpected response from server"


@dataclass(frozen=True)
class Snapshot(Generic[T]):
    """Immutable point-in-time result of one fetch."""

    kind: ResourceKind
    params: ParamsKey
    records: tuple[T, ...]
    fetched_at: datetime

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


def _params_key(params: Mapping[str, Any] | None) -> ParamsKey:
    if not params:
        return ()
    return tuple(sorted((k, v) for k, v in params.items() if v is not None))


class RecordSource:
    """
    Fetches record collections and owns their per-query snapshot cache.

    Only this class mutates the cache. Other components hold the snapshots it
    hands out, which are read-only.
    """

    def __init__(self, api: ConsoleApiClient):
        self.api = api
        self.session = api.session
        self._cache: dict[tuple[ResourceKind, ParamsKey], Snapshot] = {}
        # Ticket of the read that produced the cached snapshot, per key
        self._stored_ticket: dict[tuple[ResourceKind, ParamsKey], int] = {}
        self._next_ticket = 0
        # Bumped on every invalidation; reads started before it are not cached
        self._epoch: dict[ResourceKind, int] = {kind: 0 for kind in ResourceKind}

        self.session.events.subscribe(
            EventTypes.STUDENTS_CHANGED, self._on_students_changed
        )
        self.session.events.subscribe(EventTypes.SESSION_ENDED, self._on_session_ended)

    async def fetch(
        self, kind: ResourceKind, params: Mapping[str, Any] | None = None
    ) -> Snapshot:
        """
        Fetch a fresh snapshot, bypassing (and then refreshing) the cache.

        Args:
            kind (ResourceKind): Which collection to read.
            params (Optional[Mapping]): Query parameters, in the API's own names.

        Returns:
            Snapshot: The parsed, immutable records.

        Raises:
            NotAuthenticatedError: If the session has no credential.
            RequestRejectedError: If the API refuses the read or answers with a
                body that does not describe the expected records.
            TransportError: If no response was received.
        """
        key = (kind, _params_key(params))
        self._next_ticket += 1
        ticket = self._next_ticket
        epoch = self._epoch[kind]

        try:
            body = await self.api.get(ENDPOINTS[kind], params=dict(key[1]) or None)
        except asyncio.CancelledError:
            logger.debug("Fetch of %s cancelled", kind.value)
            raise

        snapshot = Snapshot(
            kind=kind,
            params=key[1],
            records=self._parse(kind, body),
            fetched_at=datetime.now(timezone.utc),
        )

        if self._epoch[kind] == epoch and ticket > self._stored_ticket.get(key, 0):
            self._cache[key] = snapshot
            self._stored_ticket[key] = ticket
        return snapshot

    async def get(
        self, kind: ResourceKind, params: Mapping[str, Any] | None = None
    ) -> Snapshot:
        """Return the cached snapshot for (kind, params), fetching it on a miss."""
        cached = self._cache.get((kind, _params_key(params)))
        if cached is not None:
            return cached
        return await self.fetch(kind, params)

    def cached(
        self, kind: ResourceKind, params: Mapping[str, Any] | None = None
    ) -> Snapshot | None:
        return self._cache.get((kind, _params_key(params)))

    def invalidate(self, kind: ResourceKind) -> None:
        """Discard every cached snapshot of `kind`; the next read re-fetches."""
        self._epoch[kind] += 1
        for key in [key for key in self._cache if key[0] == kind]:
            del self._cache[key]
        logger.debug("Invalidated %s snapshots", kind.value)

    def invalidate_all(self) -> None:
        for kind in ResourceKind:
            self.invalidate(kind)

    # Convenience readers

    async def students(self) -> Snapshot[Student]:
        return await self.get(ResourceKind.STUDENTS)

    async def activity_logs(
        self,
        activity_type: str | None = None,
        user_id: str | None = None,
        limit: int | None = None,
    ) -> Snapshot[ActivityLog]:
        if activity_type == "all":
            activity_type = None
        params = {
            "type": activity_type,
            "userId": user_id or None,
            "limit": limit or self.api.settings.ACTIVITY_FETCH_LIMIT,
        }
        return await self.get(ResourceKind.ACTIVITY_LOGS, params)

    async def activity_stats(self) -> ActivityStats:
        snapshot = await self.get(ResourceKind.ACTIVITY_STATS)
        return snapshot.records[0]

    async def leaderboard(self, limit: int | None = None) -> Snapshot[LeaderboardEntry]:
        params = {"limit": limit or self.api.settings.LEADERBOARD_LIMIT}
        return await self.get(ResourceKind.LEADERBOARD, params)

    async def progress_summaries(self) -> Snapshot[ProgressSummary]:
        return await self.get(ResourceKind.PROGRESS_SUMMARIES)

    # Internals

    def _parse(self, kind: ResourceKind, body: Any) -> tuple:
        if kind is ResourceKind.LEADERBOARD:
            return tuple(self._unwrap_leaderboard(body))
        if kind is ResourceKind.ACTIVITY_STATS:
            body = [body]
        if body is None:
            body = []
        if not isinstance(body, list):
            logger.error("Expected a list for %s, got %s", kind.value, type(body).__name__)
            raise RequestRejectedError(UNEXPECTED_RESPONSE)

        model = RECORD_MODELS[kind]
        try:
            return tuple(model.model_validate(item) for item in body)
        except SchemaError as e:
            logger.error("Malformed %s record: %s", kind.value, e)
            raise RequestRejectedError(UNEXPECTED_RESPONSE) from e

    @staticmethod
    def _unwrap_leaderboard(body: Any) -> list[LeaderboardEntry]:
        try:
            envelope = LeaderboardEnvelope.model_validate(body)
        except SchemaError as e:
            raise RequestRejectedError(UNEXPECTED_RESPONSE) from e
        if not envelope.success:
            raise RequestRejectedError(
                envelope.message or UNEXPECTED_RESPONSE,
                server_message=envelope.message,
            )
        return envelope.data or []

    async def _on_students_changed(self, event: EventData) -> None:
        self.invalidate(ResourceKind.STUDENTS)

    async def _on_session_ended(self, event: EventData) -> None:
        self.invalidate_all()
