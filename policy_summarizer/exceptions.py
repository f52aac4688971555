from enum import Enum


class ErrorKind(str, Enum):
    """Classification of a failed job, persisted next to the error message."""

    UNEXTRACTABLE = "unextractable"
    ANALYSIS_TIMEOUT = "analysis_timeout"
    ANALYSIS_UPSTREAM = "analysis_upstream"
    ANALYSIS_PARSE = "analysis_parse"
    JOB_TIMEOUT = "job_timeout"
    INTERNAL = "internal"


class PipelineError(Exception):
    """Base exception for all document-processing errors."""

    kind: ErrorKind = ErrorKind.INTERNAL
