"""HTTP client for the external lesson generation API."""

import asyncio
import logging
import random
from typing import Any, Optional

import httpx

from ..domain.entities.lesson import LessonContent, LessonRequest, LessonResult
from ..domain.interfaces.lesson_generator import LessonGenerator, RetryCallback

logger = logging.getLogger(__name__)


class LessonGenerationError(Exception):
    """The lesson API could not be reached or kept failing after retries."""


class HttpLessonGenerator(LessonGenerator):
    """Calls ``POST {base_url}/api/lessons/generate`` with retry and backoff.

    Server errors (5xx), timeouts and transport errors are retried up to
    ``max_retries`` times with exponential backoff and jitter; client errors
    (4xx) are returned immediately. Every request carries an
    ``Idempotency-Key`` header so a retried call is recognised server-side.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 115.0,
        max_retries: int = 2,
        retry_base_delay: float = 1.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._client = client

    async def generate(
        self,
        request: LessonRequest,
        idempotency_key: str,
        on_retry: Optional[RetryCallback] = None,
    ) -> LessonResult:
        response = await self._post(request.to_payload(), idempotency_key, on_retry)
        body = self._json(response)
        if response.is_error:
            return LessonResult(success=False, error=body.get("error") or f"HTTP {response.status_code}")
        return self._parse_result(body)

    async def generate_batch(
        self,
        requests: list[LessonRequest],
        idempotency_key: str,
        on_retry: Optional[RetryCallback] = None,
    ) -> list[LessonResult]:
        payload = {"batch": [r.to_payload() for r in requests]}
        response = await self._post(payload, idempotency_key, on_retry)
        body = self._json(response)
        if response.is_error:
            error = body.get("error") or f"HTTP {response.status_code}"
            return [LessonResult(success=False, error=error) for _ in requests]
        lessons = body.get("lessons")
        if not isinstance(lessons, list):
            logger.error(f"Malformed batch response from lesson API: {body}")
            return [LessonResult(success=False, error="Malformed response from lesson API") for _ in requests]
        return [self._parse_result(item) for item in lessons]

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait before retry number ``attempt + 1``."""
        return (2 ** (attempt + 1)) * self.retry_base_delay + random.random() * 0.25 * self.retry_base_delay

    async def _post(
        self,
        payload: dict[str, Any],
        idempotency_key: str,
        on_retry: Optional[RetryCallback],
    ) -> httpx.Response:
        url = f"{self.base_url}/api/lessons/generate"
        headers = {"Content-Type": "application/json", "Idempotency-Key": idempotency_key}

        client = self._client or httpx.AsyncClient(timeout=self.timeout)
        try:
            for attempt in range(self.max_retries + 1):
                try:
                    response = await client.post(url, json=payload, headers=headers, timeout=self.timeout)
                except (httpx.TimeoutException, httpx.TransportError) as e:
                    if attempt >= self.max_retries:
                        raise LessonGenerationError(
                            "Request timed out or the connection failed. Please try again."
                        ) from e
                    logger.warning(f"Lesson API request failed ({e}), retrying... (attempt {attempt + 1}/{self.max_retries})")
                    await self._before_retry(attempt, on_retry)
                    continue

                if response.status_code >= 500 and attempt < self.max_retries:
                    logger.warning(
                        f"Server error ({response.status_code}), retrying... (attempt {attempt + 1}/{self.max_retries})"
                    )
                    await self._before_retry(attempt, on_retry)
                    continue

                return response
        finally:
            if self._client is None:
                await client.aclose()

        raise LessonGenerationError("Failed to connect to server after multiple attempts")

    async def _before_retry(self, attempt: int, on_retry: Optional[RetryCallback]) -> None:
        if on_retry is not None:
            on_retry(attempt + 1, self.max_retries)
        await asyncio.sleep(self.backoff_delay(attempt))

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _parse_result(item: dict[str, Any]) -> LessonResult:
        if not item.get("success"):
            return LessonResult(success=False, error=item.get("details") or item.get("error") or "Generation failed")
        lesson = item.get("lesson")
        return LessonResult(
            success=True,
            lesson=LessonContent.model_validate(lesson) if isinstance(lesson, dict) else LessonContent(),
            lesson_id=item.get("lessonId"),
        )
