import os
import uuid
from collections.abc import Generator
from pathlib import Path

import pytest

from policy_summarizer.config.settings import Settings
from policy_summarizer.storage.connection import close_pool, get_connection, init_pool
from policy_summarizer.storage.models import DocumentRecord
from policy_summarizer.storage.postgres_store import PostgresDocumentStore

SCHEMA_PATH = Path(__file__).parents[2] / "policy_summarizer" / "storage" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "policy_summarizer_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def postgres_store(integration_pool: None) -> PostgresDocumentStore:
    return PostgresDocumentStore()


@pytest.fixture
def seed_document(postgres_store: PostgresDocumentStore) -> Generator[str, None, None]:
    document_id = str(uuid.uuid4())
    postgres_store.create_document(
        DocumentRecord(
            id=document_id,
            filename="policy.pdf",
            media_type="application/pdf",
            size_bytes=1024,
            processing_options={"summary_length": "detailed"},
        )
    )
    yield document_id
    with get_connection() as conn:
        conn.execute("DELETE FROM policy_documents WHERE id = %s", (document_id,))
        conn.commit()
