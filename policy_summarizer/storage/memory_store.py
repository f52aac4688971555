import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from policy_summarizer.storage.base import BaseDocumentStore, check_fields
from policy_summarizer.storage.exceptions import DocumentNotFoundError
from policy_summarizer.storage.models import DocumentRecord, SummaryVersion


class InMemoryDocumentStore(BaseDocumentStore):
    """Process-local store used by the CLI and tests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._documents: dict[str, DocumentRecord] = {}
        self._versions: dict[str, list[SummaryVersion]] = {}

    def create_document(self, record: DocumentRecord) -> DocumentRecord:
        now = datetime.now(timezone.utc)
        stored = replace(record, created_at=record.created_at or now, updated_at=now)
        with self._lock:
            if stored.id in self._documents:
                raise ValueError(f"Document {stored.id} already exists")
            self._documents[stored.id] = stored
            self._versions[stored.id] = []
        return stored

    def get_document(self, document_id: str) -> DocumentRecord:
        with self._lock:
            return self._require(document_id)

    def update_document(self, document_id: str, **fields: Any) -> None:
        check_fields(fields)
        with self._lock:
            record = self._require(document_id)
            self._documents[document_id] = replace(
                record, **fields, updated_at=datetime.now(timezone.utc)
            )

    def create_summary_version(
        self,
        document_id: str,
        content: str,
        *,
        length: str,
        profile: str,
        active: bool = True,
    ) -> SummaryVersion:
        with self._lock:
            self._require(document_id)
            versions = self._versions[document_id]
            if active:
                versions[:] = [replace(v, is_active=False) for v in versions]
            created = SummaryVersion(
                document_id=document_id,
                version=len(versions) + 1,
                content=content,
                length=length,
                profile=profile,
                is_active=active,
                created_at=datetime.now(timezone.utc),
            )
            versions.append(created)
            return created

    def get_summary_history(self, document_id: str) -> list[SummaryVersion]:
        with self._lock:
            self._require(document_id)
            return list(reversed(self._versions[document_id]))

    def set_active_summary(self, document_id: str, version: int) -> SummaryVersion:
        with self._lock:
            self._require(document_id)
            versions = self._versions[document_id]
            if not any(v.version == version for v in versions):
                raise DocumentNotFoundError(
                    f"Summary version {version} of document {document_id} not found"
                )
            versions[:] = [replace(v, is_active=v.version == version) for v in versions]
            return next(v for v in versions if v.version == version)

    def _require(self, document_id: str) -> DocumentRecord:
        record = self._documents.get(document_id)
        if record is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return record
