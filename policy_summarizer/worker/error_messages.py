from policy_summarizer.analysis.exceptions import (
    AnalysisParseError,
    AnalysisTimeoutError,
    AnalysisUpstreamError,
)
from policy_summarizer.exceptions import ErrorKind
from policy_summarizer.extraction.exceptions import ExtractionError, UnsupportedMediaTypeError
from policy_summarizer.worker.exceptions import JobTimeoutError


def describe_failure(exc: BaseException, job_timeout_seconds: float) -> tuple[ErrorKind, str]:
    """Map a pipeline exception to its error kind and a message for the user."""
    if isinstance(exc, BaseExceptionGroup) and len(exc.exceptions) == 1:
        return describe_failure(exc.exceptions[0], job_timeout_seconds)

    if isinstance(exc, JobTimeoutError):
        return ErrorKind.JOB_TIMEOUT, (
            f"Processing timed out after {job_timeout_seconds:g} seconds. "
            "The document may be too large or complex. Try splitting it into smaller "
            "files, or retry later."
        )
    if isinstance(exc, UnsupportedMediaTypeError):
        return ErrorKind.UNEXTRACTABLE, str(exc)
    if isinstance(exc, ExtractionError):
        return ErrorKind.UNEXTRACTABLE, (
            f"{exc} Please upload a text-based PDF, or convert the file and try again."
        )
    if isinstance(exc, AnalysisTimeoutError):
        return ErrorKind.ANALYSIS_TIMEOUT, (
            "The analysis service did not respond in time. "
            "Please retry shortly or try a smaller file."
        )
    if isinstance(exc, AnalysisUpstreamError):
        return ErrorKind.ANALYSIS_UPSTREAM, (
            "The analysis service is temporarily unavailable. Please retry shortly."
        )
    if isinstance(exc, AnalysisParseError):
        return ErrorKind.ANALYSIS_PARSE, (
            "The analysis service returned an unexpected response. "
            "Please retry; if the problem persists, contact support."
        )
    return ErrorKind.INTERNAL, (
        "An unexpected error occurred while processing the document. Please try again."
    )
