from abc import ABC, abstractmethod

from policy_summarizer.analysis.models import StructuredResult


class BaseAnalyzer(ABC):
    """Contract for the policy analysis capability."""

    @abstractmethod
    async def analyze(
        self,
        text: str,
        *,
        chunk_index: int = 0,
        total_chunks: int = 1,
    ) -> StructuredResult:
        """Extract structured policy data from document text.

        Args:
            text: Cleaned document text, or one chunk of it.
            chunk_index: Zero-based position of the chunk in the document.
            total_chunks: Number of chunks the document was split into.

        Returns:
            A validated StructuredResult.

        Raises:
            AnalysisTimeoutError, AnalysisUpstreamError: on provider failures.
            AnalysisParseError: if the response does not match the schema.
        """

    @abstractmethod
    async def summarize(
        self,
        result: StructuredResult,
        *,
        instructions: str,
        max_tokens: int,
    ) -> str:
        """Write a narrative summary of a structured result.

        Raises:
            AnalysisTimeoutError, AnalysisUpstreamError: on provider failures.
        """
