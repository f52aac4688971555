from abc import ABC, abstractmethod
from typing import ClassVar

from policy_summarizer.extraction.cancellation import CancelToken
from policy_summarizer.extraction.models import SourceDocument, StrategyOutput


class BaseExtractionStrategy(ABC):
    """Contract for one self-contained way of turning document bytes into text."""

    name: ClassVar[str]

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds

    @abstractmethod
    def extract(self, document: SourceDocument, token: CancelToken) -> StrategyOutput:
        """Extract raw text from the document.

        Runs in a worker thread; implementations must call
        ``token.raise_if_cancelled()`` between units of work (pages).

        Raises:
            StrategyError: if the strategy cannot produce anything.
        """

    def accepts_below_threshold(self, output: StrategyOutput) -> bool:
        """Whether output shorter than the cascade minimum is still acceptable."""
        return False
