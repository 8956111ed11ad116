"""Member book requests: pending, accepted, rejected."""
from datetime import timedelta
from typing import Optional

from circulation.config import settings
from circulation.core.exceptions import (
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from circulation.core.logging import get_logger
from circulation.core.utils import Clock, new_id, utcnow
from circulation.models.book import Book
from circulation.models.request import BookRequest, RequestStatus, RequestWindow
from circulation.services.inventory_service import InventoryStore
from circulation.store.base import DocumentStore, StoreTransaction

logger = get_logger("requests")


class RequestProcessor:
    """State machine for ``BookRequest`` records.

    Accepting a request reserves a copy in the same unit of work that flips
    the status, so either both happen or neither does.
    """

    def __init__(
        self,
        store: DocumentStore,
        inventory: InventoryStore,
        clock: Clock = utcnow,
        max_window_days: Optional[int] = None,
    ):
        self._store = store
        self._inventory = inventory
        self._clock = clock
        self._max_window_days = (
            settings.max_request_window_days if max_window_days is None else max_window_days
        )

    async def load(self, txn: StoreTransaction, request_id: str) -> BookRequest:
        data = await txn.get(BookRequest.collection, request_id)
        if data is None:
            raise NotFoundError("BookRequest", request_id)
        return BookRequest.from_document(request_id, data)

    @staticmethod
    def save(txn: StoreTransaction, request: BookRequest) -> None:
        txn.set(BookRequest.collection, request.id, request.to_document())

    @staticmethod
    def ensure_transition(request: BookRequest, target: RequestStatus, action: str) -> None:
        if not request.can_transition(target):
            logger.warning(
                "Refused to %s request %s in status %s", action, request.id, request.status.value
            )
            raise InvalidStateTransitionError(
                "BookRequest", request.id, request.status.value, action
            )

    def transition(self, request: BookRequest, target: RequestStatus) -> BookRequest:
        """Move ``request`` to ``target`` and stamp it; the caller saves it."""
        now = self._clock()
        request.status = target
        request.updated_at = now
        if target == RequestStatus.ACCEPTED:
            request.accepted_at = now
        return request

    def _validate_window(self, window: RequestWindow) -> None:
        if window.end_date < window.start_date:
            raise ValidationError("End date must not be before start date", field="end_date")
        if window.end_date - window.start_date > timedelta(days=self._max_window_days):
            raise ValidationError(
                f"Borrowing window may not exceed {self._max_window_days} days",
                field="end_date",
            )

    async def submit(
        self,
        member_id: str,
        book_id: str,
        window: Optional[RequestWindow] = None,
    ) -> BookRequest:
        """Create a pending request. Inventory is untouched until it is accepted."""
        if window is not None:
            self._validate_window(window)

        async def _submit(txn: StoreTransaction) -> BookRequest:
            if await txn.get(Book.collection, book_id) is None:
                raise NotFoundError("Book", book_id)
            now = self._clock()
            request = BookRequest(
                id=new_id(),
                member_id=member_id,
                book_id=book_id,
                start_date=window.start_date if window else None,
                end_date=window.end_date if window else None,
                created_at=now,
                updated_at=now,
            )
            txn.create(BookRequest.collection, request.to_document(), doc_id=request.id)
            return request

        request = await self._store.run_transaction(_submit)
        logger.info("Member %s requested %s (request %s)", member_id, book_id, request.id)
        return request

    async def accept(self, request_id: str) -> BookRequest:
        """Reserve a copy and accept a pending request.

        If no copy is left the request stays pending and
        ``InventoryExhaustedError`` is raised.
        """

        async def _accept(txn: StoreTransaction) -> BookRequest:
            request = await self.load(txn, request_id)
            self.ensure_transition(request, RequestStatus.ACCEPTED, "accept")
            await self._inventory.reserve_copy(request.book_id, txn)
            self.transition(request, RequestStatus.ACCEPTED)
            self.save(txn, request)
            return request

        request = await self._store.run_transaction(_accept)
        logger.info("Accepted request %s for %s", request.id, request.book_id)
        return request

    async def reject(self, request_id: str) -> BookRequest:
        """Reject a pending request. Nothing was reserved, so nothing is released."""

        async def _reject(txn: StoreTransaction) -> BookRequest:
            request = await self.load(txn, request_id)
            self.ensure_transition(request, RequestStatus.REJECTED, "reject")
            self.transition(request, RequestStatus.REJECTED)
            self.save(txn, request)
            return request

        request = await self._store.run_transaction(_reject)
        logger.info("Rejected request %s for %s", request.id, request.book_id)
        return request

    async def get_request(self, request_id: str) -> BookRequest:
        document = await self._store.get(BookRequest.collection, request_id)
        if document is None:
            raise NotFoundError("BookRequest", request_id)
        return BookRequest.from_document(document.id, document.data)

    async def list_requests(
        self,
        status: Optional[RequestStatus] = None,
        member_id: Optional[str] = None,
    ) -> list[BookRequest]:
        """Requests, oldest first, optionally filtered."""
        documents = await self._store.list(BookRequest.collection)
        requests = [BookRequest.from_document(d.id, d.data) for d in documents]
        if status is not None:
            requests = [r for r in requests if r.status == status]
        if member_id is not None:
            requests = [r for r in requests if r.member_id == member_id]
        return sorted(requests, key=lambda r: r.created_at)
