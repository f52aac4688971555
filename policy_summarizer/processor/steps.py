import asyncio
from dataclasses import replace

from policy_summarizer.analysis.chunker import plan_chunks
from policy_summarizer.analysis.exceptions import AnalysisError
from policy_summarizer.analysis.merger import merge_results
from policy_summarizer.analysis.models import StructuredResult
from policy_summarizer.analysis.retrying import RetryingAnalyzer
from policy_summarizer.extraction.cascade import ExtractionCascade
from policy_summarizer.logging.logger import Log
from policy_summarizer.processor.pipeline import PipelineContext, PipelineStep
from policy_summarizer.summary.generator import SummaryGenerator


class ExtractTextStep(PipelineStep):
    def __init__(self, cascade: ExtractionCascade) -> None:
        self._cascade = cascade

    async def run(self, context: PipelineContext) -> PipelineContext:
        context.extracted = await self._cascade.extract(context.source)
        Log.info(
            f"Extracted {len(context.extracted.text)} chars",
            document=context.document_id,
            strategy=context.extracted.strategy_used,
        )
        return context


class ChunkTextStep(PipelineStep):
    def __init__(self, max_input_characters: int, chunk_size: int) -> None:
        self._max_input_characters = max_input_characters
        self._chunk_size = chunk_size

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.extracted is None:
            raise ValueError("PipelineContext.extracted must be set before chunking")
        context.chunks = plan_chunks(
            context.extracted.text,
            max_input_characters=self._max_input_characters,
            chunk_size=self._chunk_size,
        )
        if len(context.chunks) > 1:
            Log.info(
                f"Text exceeds {self._max_input_characters} chars, "
                f"split into {len(context.chunks)} chunks",
                document=context.document_id,
            )
        return context


class AnalyzeChunksStep(PipelineStep):
    """Analyzes chunks concurrently, keeping results in chunk order.

    A chunk that still fails after retries is skipped and reported as a
    warning on the merged result. In strict mode the first failure (by chunk
    index) is raised instead.
    """

    def __init__(
        self,
        analyzer: RetryingAnalyzer,
        concurrency: int = 1,
        strict: bool = False,
    ) -> None:
        self._analyzer = analyzer
        self._concurrency = max(1, concurrency)
        self._strict = strict

    async def run(self, context: PipelineContext) -> PipelineContext:
        semaphore = asyncio.Semaphore(self._concurrency)
        outcomes: list[StructuredResult | AnalysisError | None] = [None] * len(context.chunks)

        async def analyze(position: int) -> None:
            chunk = context.chunks[position]
            async with semaphore:
                try:
                    outcomes[position] = await self._analyzer.analyze_chunk(chunk)
                except AnalysisError as exc:
                    Log.error(
                        f"Chunk {chunk.index + 1}/{chunk.total_chunks} failed: {exc}",
                        document=context.document_id,
                        kind=exc.kind.value,
                    )
                    outcomes[position] = exc

        async with asyncio.TaskGroup() as group:
            for position in range(len(context.chunks)):
                group.create_task(analyze(position))

        failures = [o for o in outcomes if isinstance(o, AnalysisError)]
        if failures and self._strict:
            raise failures[0]

        context.chunk_results = [o for o in outcomes if isinstance(o, StructuredResult)]
        context.chunk_warnings = [
            f"Part {chunk.index + 1} of {chunk.total_chunks} could not be analyzed: {outcome}"
            for chunk, outcome in zip(context.chunks, outcomes)
            if isinstance(outcome, AnalysisError)
        ]
        return context


class MergeResultsStep(PipelineStep):
    async def run(self, context: PipelineContext) -> PipelineContext:
        merged = merge_results(context.chunk_results)
        if context.chunk_warnings:
            merged = replace(merged, warnings=[*merged.warnings, *context.chunk_warnings])
        context.structured_result = merged
        Log.info(
            f"Merged {len(context.chunk_results)}/{len(context.chunks)} chunk results",
            document=context.document_id,
        )
        return context


class SummarizeStep(PipelineStep):
    def __init__(self, generator: SummaryGenerator) -> None:
        self._generator = generator

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.structured_result is None:
            raise ValueError("PipelineContext.structured_result must be set before summary")
        context.summary = await self._generator.generate(
            context.structured_result,
            context.options.summary_length,
        )
        return context
