"""Facade wiring the store and services behind the circulation operations."""
from datetime import datetime
from typing import Callable, Optional

from circulation.config import Settings, settings as default_settings
from circulation.core.utils import Clock, utcnow
from circulation.models import (
    Book,
    BookRequest,
    Fine,
    LibrarySettings,
    Loan,
    RequestWindow,
)
from circulation.services import (
    FineEngine,
    InventoryStore,
    IssueBatch,
    LendingLedger,
    LibraryProjections,
    RequestProcessor,
    SettingsProvider,
)
from circulation.store import DocumentStore, Subscription, build_store


class LendingEngine:
    """Compact API over the lending lifecycle."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock = utcnow,
        max_window_days: Optional[int] = None,
    ):
        self.store = store
        self.clock = clock

        self.settings = SettingsProvider(store, clock=clock)
        self.inventory = InventoryStore(store)
        self.requests = RequestProcessor(
            store, self.inventory, clock=clock, max_window_days=max_window_days
        )
        self.fines = FineEngine(store, clock=clock)
        self.ledger = LendingLedger(
            store, self.inventory, self.requests, self.fines, self.settings, clock=clock
        )
        self.projections = LibraryProjections(store, clock=clock)

    @classmethod
    async def from_settings(cls, config: Optional[Settings] = None) -> "LendingEngine":
        config = config or default_settings
        store = await build_store(config)
        return cls(store, max_window_days=config.max_request_window_days)

    async def start(self) -> None:
        """Open the snapshot subscriptions behind the dashboard counts."""
        await self.settings.watch()
        await self.projections.start()

    async def close(self) -> None:
        self.projections.stop()
        self.settings.unwatch()
        await self.store.close()

    # ---- requests
    async def submit_request(
        self, member_id: str, book_id: str, window: Optional[RequestWindow] = None
    ) -> BookRequest:
        return await self.requests.submit(member_id, book_id, window)

    async def accept_request(self, request_id: str) -> BookRequest:
        return await self.requests.accept(request_id)

    async def reject_request(self, request_id: str) -> BookRequest:
        return await self.requests.reject(request_id)

    # ---- loans
    async def issue(self, request_id: str) -> Loan:
        return await self.ledger.issue(request_id)

    async def issue_all(self, member_id: str) -> IssueBatch:
        return await self.ledger.issue_all_for_member(member_id)

    async def return_loan(self, loan_id: str) -> Loan:
        return await self.ledger.return_loan(loan_id)

    async def mark_damaged(self, loan_id: str, replace_copy: bool = False) -> Loan:
        return await self.ledger.mark_damaged(loan_id, replace_copy=replace_copy)

    async def mark_lost(self, loan_id: str) -> Loan:
        return await self.ledger.mark_lost(loan_id)

    # ---- fines
    async def toggle_fine(self, fine_id: str) -> Fine:
        return await self.fines.toggle_status(fine_id)

    # ---- inventory
    async def add_book(self, isbn: str, **fields) -> Book:
        return await self.inventory.add_book(isbn, **fields)

    async def mark_unavailable(self, isbn: str, count: int) -> Book:
        return await self.inventory.mark_unavailable(isbn, count)

    async def mark_available(self, isbn: str, count: int) -> Book:
        return await self.inventory.mark_available(isbn, count)

    # ---- settings
    async def current_settings(self) -> LibrarySettings:
        return await self.settings.current()

    async def save_settings(self, new_settings: LibrarySettings) -> LibrarySettings:
        return await self.settings.save(new_settings)

    # ---- projections
    async def subscribe(self, model: type, on_change: Callable[[list], None]) -> Subscription:
        return await self.projections.subscribe(model, on_change)

    @property
    def issued_count(self) -> int:
        return self.projections.issued_count

    def overdue_count(self, now: Optional[datetime] = None) -> int:
        return self.projections.overdue_count(now)

    @property
    def pending_fines_count(self) -> int:
        return self.projections.pending_fines_count
