import asyncio
from collections.abc import Mapping, Sequence

from policy_summarizer.extraction.base import BaseExtractionStrategy
from policy_summarizer.extraction.cancellation import CancelToken
from policy_summarizer.extraction.cleaner import TextCleaner
from policy_summarizer.extraction.exceptions import ExtractionError, UnsupportedMediaTypeError
from policy_summarizer.extraction.models import ExtractedText, SourceDocument, StrategyOutput
from policy_summarizer.logging.logger import Log


class ExtractionCascade:
    """Runs extraction strategies in order and keeps the first acceptable result.

    Each strategy runs in a worker thread under its own timeout. A strategy that
    raises, times out, or yields fewer than ``min_length`` characters is logged
    and skipped; only exhaustion of the whole list is an error.

    A strategy that is abandoned, by its own timeout or by cancellation of the
    surrounding job, is told to stop and given ``cleanup_grace_seconds`` to
    release its temp files and subprocesses before control returns.
    """

    def __init__(
        self,
        strategies: Mapping[str, Sequence[BaseExtractionStrategy]],
        cleaner: TextCleaner | None = None,
        min_length: int = 20,
        cleanup_grace_seconds: float = 5.0,
    ) -> None:
        self._strategies = strategies
        self._cleaner = cleaner or TextCleaner()
        self._min_length = min_length
        self._cleanup_grace_seconds = cleanup_grace_seconds

    async def extract(self, document: SourceDocument) -> ExtractedText:
        """Extract cleaned text from the document.

        Raises:
            UnsupportedMediaTypeError: if no strategy handles the media type.
            ExtractionError: if every strategy was exhausted.
        """
        strategies = self._strategies.get(document.media_type)
        if not strategies:
            raise UnsupportedMediaTypeError(
                f"Unsupported file format: {document.media_type}. "
                "Only PDF and DOCX files are supported."
            )

        attempts = len(strategies)
        for position, strategy in enumerate(strategies, start=1):
            Log.info(
                f"Trying extraction strategy {position}/{attempts}",
                strategy=strategy.name,
                filename=document.filename,
            )
            output = await self._run_strategy(strategy, document)
            if output is None:
                continue
            text = self._cleaner.clean(output.text)
            if not self._is_acceptable(strategy, output, text):
                Log.info(
                    f"Strategy produced insufficient text ({len(text)} chars)",
                    strategy=strategy.name,
                )
                continue
            Log.info(
                f"Strategy succeeded, extracted {len(text)} characters",
                strategy=strategy.name,
                pages=f"{output.pages_recovered}/{output.total_pages}",
            )
            return ExtractedText(
                text=text,
                strategy_used=strategy.name,
                pages_recovered=output.pages_recovered,
                total_pages=output.total_pages,
            )

        raise ExtractionError(
            "Document appears to be image-based or contains no readable text. "
            "This may be a scanned or corrupted document that requires OCR processing."
        )

    async def _run_strategy(
        self,
        strategy: BaseExtractionStrategy,
        document: SourceDocument,
    ) -> StrategyOutput | None:
        token = CancelToken()
        attempt = asyncio.ensure_future(asyncio.to_thread(strategy.extract, document, token))
        try:
            done, _ = await asyncio.wait({attempt}, timeout=strategy.timeout_seconds)
            if not done:
                Log.warning(
                    f"Strategy timed out after {strategy.timeout_seconds}s",
                    strategy=strategy.name,
                )
                return None
            return attempt.result()
        except Exception as exc:
            Log.warning(f"Strategy failed: {exc}", strategy=strategy.name)
            return None
        finally:
            if not attempt.done():
                token.cancel()
                await self._wait_for_cleanup(strategy, attempt)

    async def _wait_for_cleanup(
        self,
        strategy: BaseExtractionStrategy,
        attempt: asyncio.Future[StrategyOutput],
    ) -> None:
        """Wait for a cancelled strategy thread to release its resources."""
        attempt.add_done_callback(_discard_outcome)
        done, _ = await asyncio.wait({attempt}, timeout=self._cleanup_grace_seconds)
        if not done:
            Log.warning(
                f"Strategy still running {self._cleanup_grace_seconds}s after cancel",
                strategy=strategy.name,
            )

    def _is_acceptable(
        self,
        strategy: BaseExtractionStrategy,
        output: StrategyOutput,
        cleaned: str,
    ) -> bool:
        if not cleaned:
            return False
        if len(cleaned) >= self._min_length:
            return True
        return strategy.accepts_below_threshold(output)


def _discard_outcome(attempt: asyncio.Future[StrategyOutput]) -> None:
    if not attempt.cancelled():
        attempt.exception()
