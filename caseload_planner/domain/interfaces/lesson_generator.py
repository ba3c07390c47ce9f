"""Lesson generator protocol."""

from typing import Callable, Optional, Protocol, runtime_checkable

from ..entities.lesson import LessonRequest, LessonResult

RetryCallback = Callable[[int, int], None]


@runtime_checkable
class LessonGenerator(Protocol):
    """Protocol for lesson content generators."""

    async def generate(
        self,
        request: LessonRequest,
        idempotency_key: str,
        on_retry: Optional[RetryCallback] = None,
    ) -> LessonResult:
        """Generate one lesson.

        Args:
            request: The generation request.
            idempotency_key: Stable key identifying the logical request.
            on_retry: Called with (attempt, max_retries) before each retry.

        Returns:
            LessonResult: The outcome for the request.
        """
        ...

    async def generate_batch(
        self,
        requests: list[LessonRequest],
        idempotency_key: str,
        on_retry: Optional[RetryCallback] = None,
    ) -> list[LessonResult]:
        """Generate several lessons in one call.

        Returns:
            list[LessonResult]: One result per request, in request order.
        """
        ...
