from policy_summarizer.exceptions import ErrorKind, PipelineError


class JobTimeoutError(PipelineError):
    """Raised when a job exceeds its overall deadline."""

    kind = ErrorKind.JOB_TIMEOUT


class InvalidTransitionError(Exception):
    """Raised when a job leaves a terminal state."""


class UploadRejectedError(Exception):
    """Raised when an upload fails the size or media-type checks."""


class ResultNotReadyError(Exception):
    """Raised when a result is requested before the job succeeded."""
