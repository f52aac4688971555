import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any

from policy_summarizer.config.settings import Settings
from policy_summarizer.extraction.models import DOCX_MEDIA_TYPE, PDF_MEDIA_TYPE, SourceDocument
from policy_summarizer.logging.logger import Log
from policy_summarizer.processor.pipeline import ProcessingOptions
from policy_summarizer.storage.base import BaseDocumentStore
from policy_summarizer.storage.models import DocumentRecord
from policy_summarizer.summary.profiles import PROFILES
from policy_summarizer.worker.exceptions import ResultNotReadyError, UploadRejectedError
from policy_summarizer.worker.job_runner import JobRunner
from policy_summarizer.worker.models import JobStatus, JobStatusView, ProcessingJob

ALLOWED_MEDIA_TYPES = frozenset({PDF_MEDIA_TYPE, DOCX_MEDIA_TYPE})


@dataclass(frozen=True)
class DocumentResult:
    """Everything a client sees once processing succeeded."""

    document_id: str
    filename: str
    extracted_text: str
    strategy_used: str | None
    pages_recovered: int | None
    total_pages: int | None
    structured_result: dict[str, Any]
    summary: str
    summary_version: int | None
    processing_options: dict[str, Any] = field(default_factory=dict)


class UploadService:
    """Accepts uploads, starts their jobs and answers status and result reads."""

    def __init__(self, runner: JobRunner, store: BaseDocumentStore, settings: Settings) -> None:
        self._runner = runner
        self._store = store
        self._settings = settings

    async def accept(
        self,
        content: bytes,
        filename: str,
        media_type: str,
        summary_length: str | None = None,
    ) -> ProcessingJob:
        """Validate the upload, store it as pending and start processing.

        Returns as soon as the job is submitted; clients poll get_status.

        Raises:
            UploadRejectedError: on an empty or oversized file, a media type
                outside the allow-list, or an unknown summary length.
        """
        length = summary_length or self._settings.summary_length
        self._validate(content, media_type, length)

        job = ProcessingJob(document_id=str(uuid.uuid4()))
        record = DocumentRecord(
            id=job.document_id,
            filename=filename,
            media_type=media_type,
            size_bytes=len(content),
            status=job.status.value,
            processing_options={"summary_length": length},
            started_at=job.started_at,
        )
        await asyncio.to_thread(self._store.create_document, record)
        self._runner.submit(
            job,
            SourceDocument(content=content, media_type=media_type, filename=filename),
            ProcessingOptions(summary_length=length),
        )
        Log.info(f"Upload accepted ({len(content)} bytes)", document=job.document_id)
        return job

    async def get_status(self, document_id: str) -> JobStatusView:
        record = await asyncio.to_thread(self._store.get_document, document_id)
        return JobStatusView(
            document_id=record.id,
            status=JobStatus(record.status),
            has_result=record.structured_result is not None,
            has_summary=bool(record.summary),
            error_kind=record.error_kind,
            error_message=record.error_message,
        )

    async def get_result(self, document_id: str) -> DocumentResult:
        """Raises:
            DocumentNotFoundError: if the document does not exist.
            ResultNotReadyError: while pending, or with the failure message.
        """
        record = await asyncio.to_thread(self._store.get_document, document_id)
        if record.status == JobStatus.PENDING.value:
            raise ResultNotReadyError("Document is still being processed")
        if record.status == JobStatus.FAILED.value or record.structured_result is None:
            raise ResultNotReadyError(record.error_message or "Processing failed")

        active = await asyncio.to_thread(self._store.get_active_summary, document_id)
        return DocumentResult(
            document_id=record.id,
            filename=record.filename,
            extracted_text=record.extracted_text or "",
            strategy_used=record.strategy_used,
            pages_recovered=record.pages_recovered,
            total_pages=record.total_pages,
            structured_result=record.structured_result,
            summary=active.content if active else record.summary or "",
            summary_version=active.version if active else None,
            processing_options=record.processing_options,
        )

    def _validate(self, content: bytes, media_type: str, length: str) -> None:
        if not content:
            raise UploadRejectedError("File is empty")
        if len(content) > self._settings.max_upload_bytes:
            raise UploadRejectedError(
                f"File is {len(content)} bytes; the limit is {self._settings.max_upload_bytes}"
            )
        if media_type not in ALLOWED_MEDIA_TYPES:
            raise UploadRejectedError(
                f"Unsupported file type '{media_type}'. Only PDF and DOCX files are supported."
            )
        if length not in PROFILES:
            raise UploadRejectedError(
                f"Unknown summary length '{length}'. Choose from: {sorted(PROFILES)}"
            )
