import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)

from policy_summarizer.analysis.base import BaseAnalyzer
from policy_summarizer.analysis.exceptions import AnalysisTimeoutError, AnalysisUpstreamError
from policy_summarizer.analysis.models import StructuredResult, TextChunk
from policy_summarizer.logging.logger import Log

T = TypeVar("T")

MIN_ATTEMPTS = 2


class RetryingAnalyzer:
    """Runs analyzer calls under a per-attempt deadline with backoff retries.

    Timeouts and upstream errors are retried; parse errors are raised at once.
    After the last attempt the last error propagates unchanged.
    """

    def __init__(
        self,
        analyzer: BaseAnalyzer,
        *,
        timeout_seconds: float,
        max_attempts: int,
        delay_seconds: float,
        exponential_backoff: bool = True,
    ) -> None:
        self._analyzer = analyzer
        self._timeout_seconds = timeout_seconds
        self._max_attempts = max(MIN_ATTEMPTS, max_attempts)
        self._delay_seconds = delay_seconds
        self._exponential_backoff = exponential_backoff

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def analyze_chunk(self, chunk: TextChunk) -> StructuredResult:
        label = f"chunk {chunk.index + 1}/{chunk.total_chunks}"
        return await self._call(
            lambda: self._analyzer.analyze(
                chunk.content,
                chunk_index=chunk.index,
                total_chunks=chunk.total_chunks,
            ),
            label,
        )

    async def summarize(
        self,
        result: StructuredResult,
        *,
        instructions: str,
        max_tokens: int,
    ) -> str:
        return await self._call(
            lambda: self._analyzer.summarize(
                result, instructions=instructions, max_tokens=max_tokens
            ),
            "summary",
        )

    async def _call(self, factory: Callable[[], Awaitable[T]], label: str) -> T:
        if self._exponential_backoff:
            wait = wait_exponential(multiplier=self._delay_seconds)
        else:
            wait = wait_fixed(self._delay_seconds)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait,
            retry=retry_if_exception_type((AnalysisTimeoutError, AnalysisUpstreamError)),
            before_sleep=lambda state: self._log_retry(state, label),
            reraise=True,
        )
        return await retrying(self._attempt, factory, label)

    async def _attempt(self, factory: Callable[[], Awaitable[T]], label: str) -> T:
        try:
            return await asyncio.wait_for(factory(), timeout=self._timeout_seconds)
        except TimeoutError as exc:
            raise AnalysisTimeoutError(
                f"Analyzer call timed out after {self._timeout_seconds}s ({label})"
            ) from exc

    def _log_retry(self, state: RetryCallState, label: str) -> None:
        error = state.outcome.exception() if state.outcome else None
        delay = state.next_action.sleep if state.next_action else 0.0
        Log.warning(
            f"Analyzer attempt {state.attempt_number}/{self._max_attempts} failed: {error}",
            call=label,
            retry_in=f"{delay:.1f}s",
        )
