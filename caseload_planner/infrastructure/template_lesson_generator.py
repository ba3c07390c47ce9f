"""Local lesson generator producing deterministic template content."""

import logging
from typing import Optional

from ..domain.entities.lesson import LessonContent, LessonRequest, LessonResult
from ..domain.interfaces.lesson_generator import LessonGenerator, RetryCallback

logger = logging.getLogger(__name__)


class TemplateLessonGenerator(LessonGenerator):
    """Builds a structured lesson from the request alone.

    Used for local development and tests when no lesson API is configured.
    Calls are recorded by idempotency key, and a repeated key returns the
    first result.
    """

    def __init__(self):
        self._results: dict[str, LessonResult] = {}
        self.calls: list[str] = []

    async def generate(
        self,
        request: LessonRequest,
        idempotency_key: str,
        on_retry: Optional[RetryCallback] = None,
    ) -> LessonResult:
        self.calls.append(idempotency_key)
        if idempotency_key in self._results:
            logger.info(f"Replaying lesson for idempotency key {idempotency_key}")
            return self._results[idempotency_key]

        result = LessonResult(success=True, lesson=self._content(request))
        self._results[idempotency_key] = result
        return result

    async def generate_batch(
        self,
        requests: list[LessonRequest],
        idempotency_key: str,
        on_retry: Optional[RetryCallback] = None,
    ) -> list[LessonResult]:
        self.calls.append(idempotency_key)
        return [LessonResult(success=True, lesson=self._content(r)) for r in requests]

    @staticmethod
    def _content(request: LessonRequest) -> LessonContent:
        initials = ", ".join(s.initials for s in request.students) or "the group"
        topic = request.topic or f"{request.subject} skills review"
        return LessonContent(
            objectives=[f"Students ({initials}) practice {topic}."],
            materials=["Whiteboard", "Leveled practice sheet"],
            activities=[
                {"name": "Warm-up", "duration": 5},
                {"name": "Guided practice", "duration": max(request.duration - 10, 5)},
                {"name": "Exit ticket", "duration": 5},
            ],
            assessment="Exit ticket: 3 items scored for accuracy.",
        )
