from abc import ABC, abstractmethod
from typing import Any

from policy_summarizer.storage.models import UPDATABLE_FIELDS, DocumentRecord, SummaryVersion


class BaseDocumentStore(ABC):
    """Contract for document and summary-version persistence.

    Every write touches rows of a single document only.
    """

    @abstractmethod
    def create_document(self, record: DocumentRecord) -> DocumentRecord:
        """Insert a new document row and return it as stored."""

    @abstractmethod
    def get_document(self, document_id: str) -> DocumentRecord:
        """Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """

    @abstractmethod
    def update_document(self, document_id: str, **fields: Any) -> None:
        """Update the given columns of one document.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
            ValueError: if a field is not in UPDATABLE_FIELDS.
        """

    @abstractmethod
    def create_summary_version(
        self,
        document_id: str,
        content: str,
        *,
        length: str,
        profile: str,
        active: bool = True,
    ) -> SummaryVersion:
        """Store the next summary version; an active version deactivates all others."""

    @abstractmethod
    def get_summary_history(self, document_id: str) -> list[SummaryVersion]:
        """Return all versions of a document, newest first."""

    @abstractmethod
    def set_active_summary(self, document_id: str, version: int) -> SummaryVersion:
        """Make ``version`` the only active summary of the document.

        Raises:
            DocumentNotFoundError: if the version does not exist.
        """

    def get_active_summary(self, document_id: str) -> SummaryVersion | None:
        for version in self.get_summary_history(document_id):
            if version.is_active:
                return version
        return None


def check_fields(fields: dict[str, Any]) -> None:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update document fields: {sorted(unknown)}")
