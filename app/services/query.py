"""Loading/error/data state for one cancellable read.

A presentation layer holds one `RecordQuery` per view (students table,
leaderboard, ...). Starting a new load cancels the previous one. A cancelled
load is not a failure: the loading flag clears and no error is recorded.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

from app.exceptions import AppException

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordQuery(Generic[T]):
    """
    Tracks the state of a read issued through the Record Source Adapter.

    Attributes:
        data: The last successfully loaded value, kept across later failures.
        error: Display message of the last failed load, None otherwise.
        is_loading: True while a load is in flight.
    """

    def __init__(self, loader: Callable[[], Awaitable[T]], name: str = "query"):
        self._loader = loader
        self.name = name
        self.data: T | None = None
        self.error: str | None = None
        self.is_loading = False
        self._task: asyncio.Task | None = None

    def start(self) -> asyncio.Task:
        """Begin a load in the background, cancelling any load still in flight."""
        self.cancel()
        self.is_loading = True
        self.error = None
        self._task = asyncio.create_task(self._run())
        return self._task

    async def refresh(self) -> T | None:
        """
        Load and wait for the result.

        Returns:
            The loaded value, or None when the load failed or was aborted through
            `cancel()`. Cancellation of the caller itself still propagates.
        """
        task = self.start()
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            return None

    def cancel(self) -> bool:
        """Abort the in-flight load, if any. Returns True when one was aborted."""
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        self.is_loading = False
        return True

    async def _run(self) -> T | None:
        try:
            self.data = await self._loader()
        except asyncio.CancelledError:
            logger.debug("%s cancelled", self.name)
            raise
        except AppException as e:
            self.error = e.message
        finally:
            if self._task is asyncio.current_task():
                self.is_loading = False
        return self.data if self.error is None else None
