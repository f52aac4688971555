from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class DocumentRecord:
    """Represents a row from the policy_documents table."""

    id: str
    filename: str
    media_type: str
    size_bytes: int
    status: str = "pending"
    error_kind: str | None = None
    error_message: str | None = None
    extracted_text: str | None = None
    strategy_used: str | None = None
    pages_recovered: int | None = None
    total_pages: int | None = None
    structured_result: dict[str, Any] | None = None
    summary: str | None = None
    processing_options: dict[str, Any] = field(default_factory=dict)
    started_at: datetime | None = None
    finished_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class SummaryVersion:
    """Represents a row from the summary_versions table."""

    document_id: str
    version: int
    content: str
    length: str
    profile: str
    is_active: bool = False
    created_at: datetime | None = None


# Columns callers may change through update_document.
UPDATABLE_FIELDS = frozenset(
    {
        "status",
        "error_kind",
        "error_message",
        "extracted_text",
        "strategy_used",
        "pages_recovered",
        "total_pages",
        "structured_result",
        "summary",
        "processing_options",
        "started_at",
        "finished_at",
    }
)
