"""Document store contract shared by every backend.

Each engine operation runs as one unit of work: documents are read through a
``StoreTransaction`` which remembers the version it saw, writes are staged in
memory, and ``commit`` applies them only if none of those versions moved in
the meantime. A version mismatch raises ``WriteConflictError`` and
``DocumentStore.run_transaction`` replays the whole unit against fresh data.
Business exceptions raised inside the unit abort it before anything is
written. Listeners are told about a unit only after it is committed, and a
failure while notifying them never reaches the caller.
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar

from circulation.config import settings
from circulation.core.exceptions import StoreUnavailableError, WriteConflictError
from circulation.core.logging import get_logger
from circulation.core.utils import new_id

logger = get_logger("store")

T = TypeVar("T")
Key = tuple[str, str]
SnapshotCallback = Callable[[list["Document"]], None]

# Version recorded for a document that did not exist when it was read
ABSENT = 0


@dataclass(frozen=True)
class Document:
    """A stored document and the version it was read at."""

    collection: str
    id: str
    data: dict[str, Any] = field(default_factory=dict)
    version: int = 1


class Subscription:
    """Handle returned by ``DocumentStore.subscribe``."""

    def __init__(self, store: "DocumentStore", collection: str, callback: SnapshotCallback):
        self.store = store
        self.collection = collection
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self.store._unsubscribe(self)


class StoreTransaction:
    """Unit of work over a ``DocumentStore``."""

    def __init__(self, store: "DocumentStore"):
        self._store = store
        self._reads: dict[Key, int] = {}
        self._writes: dict[Key, Optional[dict[str, Any]]] = {}
        self._committed = False

    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Read a document's data, seeing this unit's own staged writes."""
        key = (collection, doc_id)
        if key in self._writes:
            staged = self._writes[key]
            return None if staged is None else dict(staged)
        document = await self._store.get(collection, doc_id)
        self._reads.setdefault(key, document.version if document else ABSENT)
        return dict(document.data) if document else None

    def create(self, collection: str, data: dict[str, Any], doc_id: Optional[str] = None) -> str:
        """Stage a new document; the commit fails if the id is already taken."""
        doc_id = doc_id or new_id()
        key = (collection, doc_id)
        self._reads.setdefault(key, ABSENT)
        self._writes[key] = dict(data)
        return doc_id

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Stage a full replacement of a document."""
        self._writes[(collection, doc_id)] = dict(data)

    def delete(self, collection: str, doc_id: str) -> None:
        self._writes[(collection, doc_id)] = None

    async def apply(self) -> set[str]:
        """Commit the staged writes without notifying listeners.

        Returns the collections written.
        """
        if self._committed:
            raise RuntimeError("Transaction already committed")
        self._committed = True
        if not self._writes:
            return set()
        await self._store._apply(dict(self._reads), dict(self._writes))
        return {collection for collection, _ in self._writes}

    async def commit(self) -> None:
        await self._store._notify(await self.apply())


class DocumentStore(ABC):
    """Abstract document store with optimistic transactions and listeners."""

    def __init__(
        self,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
    ):
        self.max_retries = settings.store_max_retries if max_retries is None else max_retries
        self.retry_backoff = (
            settings.store_retry_backoff if retry_backoff is None else retry_backoff
        )
        self._subscriptions: dict[str, list[Subscription]] = defaultdict(list)
        self._notify_lock = asyncio.Lock()

    # Backend primitives

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Fetch one document or ``None``."""

    @abstractmethod
    async def list(self, collection: str) -> list[Document]:
        """Fetch every document of a collection."""

    @abstractmethod
    async def _apply(
        self,
        reads: dict[Key, int],
        writes: dict[Key, Optional[dict[str, Any]]],
    ) -> None:
        """Atomically validate ``reads`` and apply ``writes``.

        Must raise ``WriteConflictError`` without writing anything when a read
        version no longer matches.
        """

    async def close(self) -> None:
        """Release backend resources."""

    # Transactions

    def transaction(self) -> StoreTransaction:
        return StoreTransaction(self)

    async def run_transaction(self, fn: Callable[[StoreTransaction], Awaitable[T]]) -> T:
        """Run ``fn`` in a fresh unit of work and commit it.

        Write conflicts and transient store failures replay ``fn`` with
        exponential backoff; any other exception propagates at once.
        """
        attempts = max(1, self.max_retries)
        for attempt in range(1, attempts + 1):
            txn = self.transaction()
            try:
                result = await fn(txn)
                written = await txn.apply()
            except (WriteConflictError, StoreUnavailableError) as exc:
                if attempt == attempts:
                    logger.error(
                        "Giving up after %d attempts: %s", attempts, exc.message
                    )
                    raise StoreUnavailableError(
                        f"Store operation failed after {attempts} attempts: {exc.message}",
                        attempts=attempts,
                    ) from exc
                delay = self.retry_backoff * (2 ** (attempt - 1))
                logger.warning(
                    "%s on attempt %d/%d, retrying in %.2fs",
                    exc.error_code,
                    attempt,
                    attempts,
                    delay,
                )
                await asyncio.sleep(delay)
                continue
            # Committed: from here on nothing may replay the unit
            await self._notify(written)
            return result
        raise AssertionError("unreachable")

    # Listeners

    async def subscribe(self, collection: str, callback: SnapshotCallback) -> Subscription:
        """Deliver the collection's snapshot now and after every commit touching it."""
        subscription = Subscription(self, collection, callback)
        async with self._notify_lock:
            self._subscriptions[collection].append(subscription)
            self._deliver(subscription, await self.list(collection))
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        listeners = self._subscriptions.get(subscription.collection, [])
        if subscription in listeners:
            listeners.remove(subscription)

    async def _notify(self, collections: set[str]) -> None:
        # Serialized so the last snapshot delivered is never older than the last commit
        async with self._notify_lock:
            for collection in sorted(collections):
                listeners = list(self._subscriptions.get(collection, []))
                if not listeners:
                    continue
                try:
                    snapshot = await self.list(collection)
                except Exception:
                    logger.exception("Could not load %s snapshot for listeners", collection)
                    continue
                for subscription in listeners:
                    self._deliver(subscription, snapshot)

    @staticmethod
    def _deliver(subscription: Subscription, snapshot: list[Document]) -> None:
        if not subscription.active:
            return
        try:
            subscription.callback(snapshot)
        except Exception:
            logger.exception("Listener on %s failed", subscription.collection)
