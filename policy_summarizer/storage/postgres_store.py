from typing import Any

from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from policy_summarizer.storage.base import BaseDocumentStore, check_fields
from policy_summarizer.storage.connection import get_connection
from policy_summarizer.storage.exceptions import DocumentNotFoundError
from policy_summarizer.storage.models import DocumentRecord, SummaryVersion

_JSON_FIELDS = frozenset({"structured_result", "processing_options"})

_DOCUMENT_COLUMNS = """
    id, filename, media_type, size_bytes, status, error_kind, error_message,
    extracted_text, strategy_used, pages_recovered, total_pages,
    structured_result, summary, processing_options,
    started_at, finished_at, created_at, updated_at
"""

_VERSION_COLUMNS = "document_id, version, content, length, profile, is_active, created_at"


class PostgresDocumentStore(BaseDocumentStore):
    """Database operations for the policy_documents and summary_versions tables."""

    def create_document(self, record: DocumentRecord) -> DocumentRecord:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO policy_documents
                        (id, filename, media_type, size_bytes, status, processing_options,
                         started_at)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_DOCUMENT_COLUMNS}
                    """,
                    (
                        record.id,
                        record.filename,
                        record.media_type,
                        record.size_bytes,
                        record.status,
                        Jsonb(record.processing_options),
                        record.started_at,
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        return _to_document(row)

    def get_document(self, document_id: str) -> DocumentRecord:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_DOCUMENT_COLUMNS} FROM policy_documents WHERE id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return _to_document(row)

    def update_document(self, document_id: str, **fields: Any) -> None:
        check_fields(fields)
        if not fields:
            return
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = {}").format(sql.Identifier(name), sql.Placeholder())
            for name in fields
        )
        query = sql.SQL(
            "UPDATE policy_documents SET {assignments}, updated_at = NOW() WHERE id = {id}"
        ).format(assignments=assignments, id=sql.Placeholder())
        values = [
            Jsonb(value) if name in _JSON_FIELDS and value is not None else value
            for name, value in fields.items()
        ]
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, (*values, document_id))
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def create_summary_version(
        self,
        document_id: str,
        content: str,
        *,
        length: str,
        profile: str,
        active: bool = True,
    ) -> SummaryVersion:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                # Row lock serialises version numbering per document.
                cur.execute(
                    "SELECT id FROM policy_documents WHERE id = %s FOR UPDATE",
                    (document_id,),
                )
                if cur.fetchone() is None:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
                if active:
                    cur.execute(
                        "UPDATE summary_versions SET is_active = FALSE WHERE document_id = %s",
                        (document_id,),
                    )
                cur.execute(
                    f"""
                    INSERT INTO summary_versions
                        (document_id, version, content, length, profile, is_active)
                    SELECT %s, COALESCE(MAX(version), 0) + 1, %s, %s, %s, %s
                    FROM summary_versions
                    WHERE document_id = %s
                    RETURNING {_VERSION_COLUMNS}
                    """,
                    (document_id, content, length, profile, active, document_id),
                )
                row = cur.fetchone()
            conn.commit()
        return _to_version(row)

    def get_summary_history(self, document_id: str) -> list[SummaryVersion]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_VERSION_COLUMNS}
                    FROM summary_versions
                    WHERE document_id = %s
                    ORDER BY version DESC
                    """,
                    (document_id,),
                )
                rows = cur.fetchall()
        return [_to_version(row) for row in rows]

    def set_active_summary(self, document_id: str, version: int) -> SummaryVersion:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT 1 FROM summary_versions WHERE document_id = %s AND version = %s",
                    (document_id, version),
                )
                if cur.fetchone() is None:
                    raise DocumentNotFoundError(
                        f"Summary version {version} of document {document_id} not found"
                    )
                cur.execute(
                    """
                    UPDATE summary_versions SET is_active = FALSE
                    WHERE document_id = %s AND is_active
                    """,
                    (document_id,),
                )
                cur.execute(
                    f"""
                    UPDATE summary_versions SET is_active = TRUE
                    WHERE document_id = %s AND version = %s
                    RETURNING {_VERSION_COLUMNS}
                    """,
                    (document_id, version),
                )
                row = cur.fetchone()
            conn.commit()
        return _to_version(row)


def _to_document(row: dict[str, Any]) -> DocumentRecord:
    return DocumentRecord(
        id=str(row["id"]),
        filename=row["filename"],
        media_type=row["media_type"],
        size_bytes=row["size_bytes"],
        status=row["status"],
        error_kind=row["error_kind"],
        error_message=row["error_message"],
        extracted_text=row["extracted_text"],
        strategy_used=row["strategy_used"],
        pages_recovered=row["pages_recovered"],
        total_pages=row["total_pages"],
        structured_result=row["structured_result"],
        summary=row["summary"],
        processing_options=row["processing_options"] or {},
        started_at=row["started_at"],
        finished_at=row["finished_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _to_version(row: dict[str, Any]) -> SummaryVersion:
    return SummaryVersion(
        document_id=str(row["document_id"]),
        version=row["version"],
        content=row["content"],
        length=row["length"],
        profile=row["profile"],
        is_active=row["is_active"],
        created_at=row["created_at"],
    )
