import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class DocumentLocks:
    """One asyncio.Lock per document id; unused locks are dropped."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, document_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(document_id, asyncio.Lock())
        self._waiters[document_id] = self._waiters.get(document_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[document_id] -= 1
            if self._waiters[document_id] == 0:
                del self._waiters[document_id]
                del self._locks[document_id]

    def is_locked(self, document_id: str) -> bool:
        lock = self._locks.get(document_id)
        return lock is not None and lock.locked()
