from policy_summarizer.exceptions import ErrorKind, PipelineError


class AnalysisError(PipelineError):
    """Raised when the analysis service call fails."""

    kind = ErrorKind.ANALYSIS_UPSTREAM


class AnalysisTimeoutError(AnalysisError):
    """Raised when an analyzer call exceeds its deadline."""

    kind = ErrorKind.ANALYSIS_TIMEOUT


class AnalysisUpstreamError(AnalysisError):
    """Raised when the analyzer reports a transport or service error."""

    kind = ErrorKind.ANALYSIS_UPSTREAM


class AnalysisParseError(AnalysisError):
    """Raised when the analyzer response does not match the expected schema."""

    kind = ErrorKind.ANALYSIS_PARSE
