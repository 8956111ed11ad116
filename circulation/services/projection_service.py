"""Read-only dashboard figures computed from live snapshots."""
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Callable, Optional, TypeVar

from circulation.core.logging import get_logger
from circulation.core.utils import Clock, to_date, utcnow
from circulation.models.base import DocumentModel
from circulation.models.fine import Fine, FineStatus
from circulation.models.loan import Loan, LoanStatus
from circulation.models.request import BookRequest, RequestStatus
from circulation.store.base import Document, DocumentStore, Subscription

logger = get_logger("projections")

M = TypeVar("M", bound=DocumentModel)


class LibraryProjections:
    """Keeps the latest loan, fine and request snapshots and derives counts.

    Nothing here is shared module state: each instance owns its snapshots,
    fed only by the subscriptions it opened in ``start()``.
    """

    def __init__(self, store: DocumentStore, clock: Clock = utcnow):
        self._store = store
        self._clock = clock
        self._loans: list[Loan] = []
        self._fines: list[Fine] = []
        self._requests: list[BookRequest] = []
        self._subscriptions: list[Subscription] = []

    async def subscribe(
        self,
        model: type[M],
        on_change: Callable[[list[M]], None],
    ) -> Subscription:
        """Call ``on_change`` with typed records whenever ``model``'s collection changes."""

        def _typed(documents: list[Document]) -> None:
            on_change([model.from_document(d.id, d.data) for d in documents])

        return await self._store.subscribe(model.collection, _typed)

    async def start(self) -> None:
        if self._subscriptions:
            return
        self._subscriptions = [
            await self.subscribe(Loan, self._set_loans),
            await self.subscribe(Fine, self._set_fines),
            await self.subscribe(BookRequest, self._set_requests),
        ]
        logger.debug("Projections subscribed")

    def stop(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []

    def _set_loans(self, loans: list[Loan]) -> None:
        self._loans = loans

    def _set_fines(self, fines: list[Fine]) -> None:
        self._fines = fines

    def _set_requests(self, requests: list[BookRequest]) -> None:
        self._requests = requests

    @property
    def issued_count(self) -> int:
        return sum(1 for loan in self._loans if loan.status == LoanStatus.ISSUED)

    def overdue_count(self, now: Optional[datetime] = None) -> int:
        now = now or self._clock()
        return sum(1 for loan in self._loans if loan.is_overdue(now))

    @property
    def pending_fines_count(self) -> int:
        return sum(1 for fine in self._fines if fine.status == FineStatus.PENDING)

    @property
    def pending_requests_count(self) -> int:
        return sum(1 for request in self._requests if request.status == RequestStatus.PENDING)

    def active_members(self) -> dict[str, int]:
        """Member id to number of books currently borrowed."""
        return dict(
            Counter(loan.member_id for loan in self._loans if loan.status == LoanStatus.ISSUED)
        )

    def issued_per_day(self, days: int = 7, now: Optional[datetime] = None) -> list[tuple[date, int]]:
        """``(date, count)`` of loans issued on each of the last ``days`` days, oldest first."""
        today = to_date(now or self._clock())
        window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
        counts = Counter(to_date(loan.issue_date) for loan in self._loans)
        return [(day, counts.get(day, 0)) for day in window]
