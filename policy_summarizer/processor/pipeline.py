from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from policy_summarizer.analysis.models import StructuredResult, TextChunk
from policy_summarizer.extraction.models import ExtractedText, SourceDocument
from policy_summarizer.summary.generator import GeneratedSummary


@dataclass(frozen=True)
class ProcessingOptions:
    summary_length: str = "detailed"


@dataclass(slots=True)
class PipelineContext:
    document_id: str
    source: SourceDocument
    options: ProcessingOptions = field(default_factory=ProcessingOptions)
    extracted: ExtractedText | None = None
    chunks: list[TextChunk] = field(default_factory=list)
    chunk_results: list[StructuredResult] = field(default_factory=list)
    chunk_warnings: list[str] = field(default_factory=list)
    structured_result: StructuredResult | None = None
    summary: GeneratedSummary | None = None


class PipelineStep(ABC):
    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
