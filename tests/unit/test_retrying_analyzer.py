import asyncio
from unittest.mock import AsyncMock

import pytest

from policy_summarizer.analysis.base import BaseAnalyzer
from policy_summarizer.analysis.exceptions import (
    AnalysisParseError,
    AnalysisTimeoutError,
    AnalysisUpstreamError,
)
from policy_summarizer.analysis.models import StructuredResult, TextChunk
from policy_summarizer.analysis.retrying import RetryingAnalyzer

_CHUNK = TextChunk(index=0, total_chunks=1, content="policy text")


def _make(analyzer: BaseAnalyzer | AsyncMock, max_attempts: int = 3, **kwargs: object) -> RetryingAnalyzer:
    values: dict[str, object] = {
        "timeout_seconds": 1.0,
        "max_attempts": max_attempts,
        "delay_seconds": 0.0,
    }
    values.update(kwargs)
    return RetryingAnalyzer(analyzer, **values)  # type: ignore[arg-type]


def _mock_analyzer() -> AsyncMock:
    analyzer = AsyncMock(spec=BaseAnalyzer)
    analyzer.analyze.return_value = StructuredResult(policy_type="Travel")
    analyzer.summarize.return_value = "Summary."
    return analyzer


class SlowAnalyzer(BaseAnalyzer):
    def __init__(self) -> None:
        self.calls = 0

    async def analyze(self, text: str, *, chunk_index: int = 0, total_chunks: int = 1) -> StructuredResult:
        self.calls += 1
        await asyncio.sleep(10)
        return StructuredResult()

    async def summarize(self, result: StructuredResult, *, instructions: str, max_tokens: int) -> str:
        self.calls += 1
        await asyncio.sleep(10)
        return ""


class TestRetryingAnalyzer:
    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self) -> None:
        analyzer = _mock_analyzer()
        result = await _make(analyzer).analyze_chunk(_CHUNK)
        assert result.policy_type == "Travel"
        analyzer.analyze.assert_awaited_once_with("policy text", chunk_index=0, total_chunks=1)

    @pytest.mark.asyncio
    async def test_always_timing_out_is_called_max_attempts_times(self) -> None:
        analyzer = _mock_analyzer()
        analyzer.analyze.side_effect = AnalysisTimeoutError("slow")
        with pytest.raises(AnalysisTimeoutError):
            await _make(analyzer, max_attempts=3).analyze_chunk(_CHUNK)
        assert analyzer.analyze.await_count == 3

    @pytest.mark.asyncio
    async def test_per_attempt_deadline_cancels_slow_call(self) -> None:
        analyzer = SlowAnalyzer()
        with pytest.raises(AnalysisTimeoutError, match="timed out"):
            await _make(analyzer, max_attempts=2, timeout_seconds=0.01).analyze_chunk(_CHUNK)
        assert analyzer.calls == 2

    @pytest.mark.asyncio
    async def test_upstream_error_retried_then_succeeds(self) -> None:
        analyzer = _mock_analyzer()
        analyzer.analyze.side_effect = [
            AnalysisUpstreamError("503"),
            StructuredResult(insurer="Acme"),
        ]
        result = await _make(analyzer).analyze_chunk(_CHUNK)
        assert result.insurer == "Acme"
        assert analyzer.analyze.await_count == 2

    @pytest.mark.asyncio
    async def test_parse_error_not_retried(self) -> None:
        analyzer = _mock_analyzer()
        analyzer.analyze.side_effect = AnalysisParseError("bad json")
        with pytest.raises(AnalysisParseError):
            await _make(analyzer).analyze_chunk(_CHUNK)
        assert analyzer.analyze.await_count == 1

    @pytest.mark.asyncio
    async def test_last_error_is_raised(self) -> None:
        analyzer = _mock_analyzer()
        analyzer.analyze.side_effect = [AnalysisTimeoutError("first"), AnalysisUpstreamError("last")]
        with pytest.raises(AnalysisUpstreamError, match="last"):
            await _make(analyzer, max_attempts=2).analyze_chunk(_CHUNK)

    @pytest.mark.asyncio
    async def test_at_least_one_retry_always_happens(self) -> None:
        analyzer = _mock_analyzer()
        analyzer.analyze.side_effect = AnalysisUpstreamError("down")
        retrying = _make(analyzer, max_attempts=1)
        with pytest.raises(AnalysisUpstreamError):
            await retrying.analyze_chunk(_CHUNK)
        assert retrying.max_attempts == 2
        assert analyzer.analyze.await_count == 2

    @pytest.mark.asyncio
    async def test_summarize_is_retried(self) -> None:
        analyzer = _mock_analyzer()
        analyzer.summarize.side_effect = [AnalysisTimeoutError("slow"), "Summary."]
        text = await _make(analyzer).summarize(
            StructuredResult(), instructions="write", max_tokens=10
        )
        assert text == "Summary."
        assert analyzer.summarize.await_count == 2

    @pytest.mark.asyncio
    async def test_fixed_delay_is_used_without_backoff(self) -> None:
        analyzer = _mock_analyzer()
        analyzer.analyze.side_effect = AnalysisTimeoutError("slow")
        retrying = _make(analyzer, max_attempts=3, delay_seconds=0.01, exponential_backoff=False)
        loop = asyncio.get_running_loop()
        started = loop.time()
        with pytest.raises(AnalysisTimeoutError):
            await retrying.analyze_chunk(_CHUNK)
        assert loop.time() - started >= 0.015
