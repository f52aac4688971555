from policy_summarizer.analysis.client_base import BaseAnalyzerClient
from policy_summarizer.analysis.factory import AnalyzerFactory
from policy_summarizer.analysis.models import StructuredResult
from policy_summarizer.analysis.retrying import RetryingAnalyzer
from policy_summarizer.config.settings import Settings
from policy_summarizer.extraction.cascade import ExtractionCascade
from policy_summarizer.extraction.factory import ExtractionCascadeFactory
from policy_summarizer.extraction.models import SourceDocument
from policy_summarizer.logging.logger import Log
from policy_summarizer.processor.pipeline import PipelineContext, PipelineStep, ProcessingOptions
from policy_summarizer.processor.steps import (
    AnalyzeChunksStep,
    ChunkTextStep,
    ExtractTextStep,
    MergeResultsStep,
    SummarizeStep,
)
from policy_summarizer.summary.generator import GeneratedSummary, SummaryGenerator


class Processor:
    """Orchestrates the document processing pipeline.

    Pipeline: extract -> chunk -> analyze (per chunk) -> merge -> summarize.
    Persistence is left to the caller.
    """

    def __init__(
        self,
        cascade: ExtractionCascade,
        analyzer: RetryingAnalyzer,
        summary_generator: SummaryGenerator,
        *,
        max_input_characters: int,
        chunk_size: int,
        chunk_concurrency: int = 1,
        analysis_strict: bool = False,
    ) -> None:
        self._summary_generator = summary_generator
        self._steps: list[PipelineStep] = [
            ExtractTextStep(cascade),
            ChunkTextStep(max_input_characters, chunk_size),
            AnalyzeChunksStep(analyzer, chunk_concurrency, analysis_strict),
            MergeResultsStep(),
            SummarizeStep(summary_generator),
        ]

    async def process(
        self,
        document_id: str,
        source: SourceDocument,
        options: ProcessingOptions | None = None,
    ) -> PipelineContext:
        """Run every step for one document and return the filled context."""
        Log.info(f"Processing {source.filename} ({source.size} bytes)", document=document_id)
        context = PipelineContext(
            document_id=document_id,
            source=source,
            options=options or ProcessingOptions(),
        )
        for step in self._steps:
            context = await step.run(context)
        return context

    async def summarize(self, result: StructuredResult, length: str) -> GeneratedSummary:
        return await self._summary_generator.generate(result, length)


def build_processor(
    settings: Settings,
    client: BaseAnalyzerClient | None = None,
    cascade: ExtractionCascade | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    analyzer = AnalyzerFactory.create(settings, client=client)
    return Processor(
        cascade=cascade or ExtractionCascadeFactory.create(settings),
        analyzer=analyzer,
        summary_generator=SummaryGenerator(analyzer),
        max_input_characters=settings.max_input_characters,
        chunk_size=settings.chunk_size,
        chunk_concurrency=settings.chunk_concurrency,
        analysis_strict=settings.analysis_strict,
    )
