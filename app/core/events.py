"""In-memory event bus linking the moderation workflow to its dependents.

The Moderation Engine publishes what happened; the Record Source Adapter
and the admin session subscribe to what they care about. Nothing is keyed
by a shared cache convention: a snapshot is invalidated because an event
said so.

Example:
    bus = EventBus()
    bus.subscribe(EventTypes.STUDENTS_CHANGED, on_students_changed)
    await bus.publish(EventTypes.STUDENTS_CHANGED, {"student_ids": ["a1"]})
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable
from uuid import uuid4

logger = logging.getLogger(__name__)


class EventTypes:
    """Event type constants published inside the console core."""

    STUDENTS_CHANGED = "students.changed"
    MODERATION_SUCCEEDED = "moderation.succeeded"
    MODERATION_FAILED = "moderation.failed"
    SESSION_ENDED = "session.ended"
    REAUTHENTICATION_REQUIRED = "session.reauthentication_required"


@dataclass
class EventData:
    """Container for event data with metadata.

    Attributes:
        event_type: The event type string.
        payload: The event payload data.
        event_id: Unique event identifier.
        timestamp: When the event was published.
    """

    event_type: str
    payload: dict[str, Any]
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventHandler = Callable[[EventData], Awaitable[None]]


class EventBus:
    """Async publish/subscribe on exact event type strings.

    Designed for single-threaded asyncio use; one bus belongs to one admin
    console session.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._event_count = 0

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Register an async handler for one event type."""
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug("Subscribed handler to: %s", event_type)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """Remove a handler; returns False when it was not subscribed."""
        handlers = self._handlers.get(event_type)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        if not handlers:
            del self._handlers[event_type]
        return True

    async def publish(self, event_type: str, payload: dict[str, Any]) -> EventData:
        """Publish an event to every subscriber of its type.

        Handlers run concurrently. A failing handler is logged and does not
        prevent the others from running or the publisher from continuing.

        Returns:
            The published EventData.
        """
        event = EventData(event_type=event_type, payload=payload)
        self._event_count += 1

        handlers = list(self._handlers.get(event_type, ()))
        if not handlers:
            logger.debug("No handlers for event: %s", event_type)
            return event

        async def safe_call(handler: EventHandler) -> None:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "Handler error for event %s: %s", event_type, e, exc_info=True
                )

        await asyncio.gather(*(safe_call(handler) for handler in handlers))
        return event

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._handlers.clear()

    def get_stats(self) -> dict[str, Any]:
        return {
            "event_types": list(self._handlers.keys()),
            "total_handlers": sum(len(h) for h in self._handlers.values()),
            "events_published": self._event_count,
        }
