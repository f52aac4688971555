from policy_summarizer.config.settings import Settings
from policy_summarizer.storage.base import BaseDocumentStore
from policy_summarizer.storage.connection import init_pool
from policy_summarizer.storage.memory_store import InMemoryDocumentStore
from policy_summarizer.storage.postgres_store import PostgresDocumentStore


class DocumentStoreFactory:
    """Creates the configured document store."""

    @classmethod
    def create(cls, settings: Settings) -> BaseDocumentStore:
        backend = settings.storage_backend.lower()
        if backend == "memory":
            return InMemoryDocumentStore()
        if backend == "postgres":
            init_pool(settings)
            return PostgresDocumentStore()
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: ['memory', 'postgres']"
        )
