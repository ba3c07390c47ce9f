"""Debounced, cancellable fetches where only the latest request may win."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, Hashable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LatestRequestGuard(Generic[T]):
    """Guards one expensive fetch against repeated and stale triggers.

    * A trigger with the same parameters as the fetch in flight joins it
      instead of starting another one.
    * A trigger with different parameters cancels the pending fetch and
      starts a new one after ``delay`` seconds.
    * A superseded or cancelled fetch resolves to ``None`` for its callers
      and its result is never handed out.
    """

    def __init__(self, delay: float = 0.5):
        self.delay = delay
        self._params: Optional[Hashable] = None
        self._task: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self, params: Hashable, fetch: Callable[[], Awaitable[T]]) -> Optional[T]:
        if self.in_flight and params == self._params:
            task = self._task
            generation = self._generation
        else:
            if self.in_flight:
                logger.debug(f"Cancelling stale fetch for {self._params!r}")
                self._task.cancel()
            self._generation += 1
            generation = self._generation
            self._params = params
            task = asyncio.create_task(self._delayed(fetch))
            self._task = task

        await asyncio.wait({task})

        if task.cancelled():
            logger.debug(f"Fetch for {params!r} was cancelled")
            return None
        if generation != self._generation:
            if task.exception() is not None:
                logger.debug(f"Stale fetch for {params!r} failed: {task.exception()}")
            else:
                logger.debug(f"Discarding stale result for {params!r}")
            return None
        return task.result()

    def cancel(self) -> None:
        """Cancel whatever is in flight; its callers receive ``None``."""
        if self.in_flight:
            self._task.cancel()
        self._generation += 1
        self._params = None

    async def _delayed(self, fetch: Callable[[], Awaitable[Any]]) -> Any:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        return await fetch()
