from policy_summarizer.exceptions import ErrorKind, PipelineError


class ExtractionError(PipelineError):
    """Raised when no strategy could recover usable text from a document."""

    kind = ErrorKind.UNEXTRACTABLE


class UnsupportedMediaTypeError(ExtractionError):
    """Raised when no strategy is registered for the document's media type."""


class StrategyError(Exception):
    """Raised by a single strategy; absorbed by the cascade."""


class ExtractionCancelledError(StrategyError):
    """Raised inside a strategy once its cancel token has been triggered."""
