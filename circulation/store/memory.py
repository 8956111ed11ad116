"""In-process document store."""
from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, Optional

from circulation.core.exceptions import WriteConflictError
from circulation.store.base import ABSENT, Document, DocumentStore, Key


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store with versioned documents.

    Reads yield to the event loop like a remote round-trip would, so
    concurrent units of work really interleave.
    """

    def __init__(self, max_retries: Optional[int] = None, retry_backoff: Optional[float] = None):
        super().__init__(max_retries=max_retries, retry_backoff=retry_backoff)
        self._documents: dict[str, dict[str, Document]] = defaultdict(dict)
        self._lock = asyncio.Lock()

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        await asyncio.sleep(0)
        return self._documents[collection].get(doc_id)

    async def list(self, collection: str) -> list[Document]:
        await asyncio.sleep(0)
        return list(self._documents[collection].values())

    def _version(self, key: Key) -> int:
        collection, doc_id = key
        document = self._documents[collection].get(doc_id)
        return document.version if document else ABSENT

    async def _apply(
        self,
        reads: dict[Key, int],
        writes: dict[Key, Optional[dict[str, Any]]],
    ) -> None:
        async with self._lock:
            stale = [
                f"{collection}/{doc_id}"
                for (collection, doc_id), version in reads.items()
                if self._version((collection, doc_id)) != version
            ]
            if stale:
                raise WriteConflictError(stale)
            for key, data in writes.items():
                collection, doc_id = key
                if data is None:
                    self._documents[collection].pop(doc_id, None)
                    continue
                self._documents[collection][doc_id] = Document(
                    collection=collection,
                    id=doc_id,
                    data=dict(data),
                    version=self._version(key) + 1,
                )
