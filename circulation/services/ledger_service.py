"""Loan lifecycle: issue, then return, damage or loss."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from circulation.core.exceptions import AppException, InvalidStateTransitionError, NotFoundError
from circulation.core.logging import get_logger
from circulation.core.utils import Clock, new_id, utcnow, whole_days_between
from circulation.models.fine import FineReason
from circulation.models.loan import CLOSED_STATUSES, Loan, LoanStatus
from circulation.models.request import RequestStatus
from circulation.services.fine_service import FineEngine
from circulation.services.inventory_service import InventoryStore
from circulation.services.request_service import RequestProcessor
from circulation.services.settings_service import SettingsProvider
from circulation.store.base import DocumentStore, StoreTransaction

logger = get_logger("ledger")


@dataclass
class IssueBatch:
    """Outcome of issuing every accepted request of a member."""

    loans: list[Loan] = field(default_factory=list)
    failures: dict[str, AppException] = field(default_factory=dict)


class LendingLedger:
    """Issues and closes loans.

    Each operation is a single unit of work: the loan status, the copy
    counts and any fine are committed together or not at all.
    """

    def __init__(
        self,
        store: DocumentStore,
        inventory: InventoryStore,
        requests: RequestProcessor,
        fines: FineEngine,
        settings_provider: SettingsProvider,
        clock: Clock = utcnow,
    ):
        self._store = store
        self._inventory = inventory
        self._requests = requests
        self._fines = fines
        self._settings = settings_provider
        self._clock = clock

    async def _load(self, txn: StoreTransaction, loan_id: str) -> Loan:
        data = await txn.get(Loan.collection, loan_id)
        if data is None:
            raise NotFoundError("Transaction", loan_id)
        return Loan.from_document(loan_id, data)

    @staticmethod
    def _save(txn: StoreTransaction, loan: Loan) -> None:
        txn.set(Loan.collection, loan.id, loan.to_document())

    @staticmethod
    def _ensure_open(loan: Loan, action: str) -> None:
        if not loan.is_open:
            logger.warning("Refused to %s loan %s in status %s", action, loan.id, loan.status.value)
            raise InvalidStateTransitionError("Transaction", loan.id, loan.status.value, action)

    def _close(self, loan: Loan, status: LoanStatus) -> datetime:
        now = self._clock()
        loan.status = status
        loan.return_date = now
        return now

    async def issue(self, request_id: str) -> Loan:
        """Turn an accepted request into a loan due after the borrowing period.

        The copy was reserved when the request was accepted; issuing only
        checks the title is still catalogued and does not take another copy.
        """

        async def _issue(txn: StoreTransaction) -> Loan:
            request = await self._requests.load(txn, request_id)
            self._requests.ensure_transition(request, RequestStatus.ISSUED, "issue")
            await self._inventory.load(txn, request.book_id)
            policy = await self._settings.current(txn)

            now = self._clock()
            loan = Loan(
                id=new_id(),
                member_id=request.member_id,
                book_id=request.book_id,
                request_id=request.id,
                issue_date=now,
                due_date=now + policy.borrowing_period,
            )
            txn.create(Loan.collection, loan.to_document(), doc_id=loan.id)
            self._requests.transition(request, RequestStatus.ISSUED)
            self._requests.save(txn, request)
            return loan

        loan = await self._store.run_transaction(_issue)
        logger.info(
            "Issued %s to member %s, due %s", loan.book_id, loan.member_id, loan.due_date.date()
        )
        return loan

    async def issue_all_for_member(self, member_id: str) -> IssueBatch:
        """Issue each accepted request of ``member_id`` as its own unit."""
        batch = IssueBatch()
        accepted = await self._requests.list_requests(
            status=RequestStatus.ACCEPTED, member_id=member_id
        )
        for request in accepted:
            try:
                batch.loans.append(await self.issue(request.id))
            except AppException as exc:
                logger.warning("Could not issue request %s: %s", request.id, exc.message)
                batch.failures[request.id] = exc
        return batch

    async def return_loan(self, loan_id: str) -> Loan:
        """Close a loan as returned, charging a late fine for each whole day past due."""

        async def _return(txn: StoreTransaction) -> Loan:
            loan = await self._load(txn, loan_id)
            self._ensure_open(loan, "return")
            await self._inventory.release_copy(loan.book_id, txn)
            returned_at = self._close(loan, LoanStatus.RETURNED)
            self._save(txn, loan)

            days_late = max(0, whole_days_between(loan.due_date, returned_at))
            if days_late > 0:
                policy = await self._settings.current(txn)
                amount = self._fines.compute_amount(FineReason.LATE, policy, days_late=days_late)
                await self._fines.record(loan.member_id, loan.id, amount, FineReason.LATE, txn)
            return await self._load(txn, loan.id)

        loan = await self._store.run_transaction(_return)
        logger.info("Loan %s returned", loan.id)
        return loan

    async def mark_damaged(self, loan_id: str, replace_copy: bool = False) -> Loan:
        """Close a loan whose copy came back damaged.

        The damaged copy always counts as unavailable. With ``replace_copy``
        a replacement copy also enters circulation.
        """

        async def _damaged(txn: StoreTransaction) -> Loan:
            loan = await self._load(txn, loan_id)
            self._ensure_open(loan, "mark damaged")
            book = await self._inventory.retire_copy(loan.book_id, txn)
            if replace_copy:
                await self._inventory.release_copy(loan.book_id, txn)
            self._close(loan, LoanStatus.DAMAGED)
            self._save(txn, loan)

            policy = await self._settings.current(txn)
            amount = self._fines.compute_amount(FineReason.DAMAGED, policy, cost=book.cost)
            await self._fines.record(loan.member_id, loan.id, amount, FineReason.DAMAGED, txn)
            return await self._load(txn, loan.id)

        loan = await self._store.run_transaction(_damaged)
        logger.info("Loan %s closed as damaged (replaced=%s)", loan.id, replace_copy)
        return loan

    async def mark_lost(self, loan_id: str) -> Loan:
        """Close a loan whose copy is gone for good."""

        async def _lost(txn: StoreTransaction) -> Loan:
            loan = await self._load(txn, loan_id)
            self._ensure_open(loan, "mark lost")
            book = await self._inventory.retire_copy(loan.book_id, txn)
            self._close(loan, LoanStatus.LOST)
            self._save(txn, loan)

            policy = await self._settings.current(txn)
            amount = self._fines.compute_amount(FineReason.LOST, policy, cost=book.cost)
            await self._fines.record(loan.member_id, loan.id, amount, FineReason.LOST, txn)
            return await self._load(txn, loan.id)

        loan = await self._store.run_transaction(_lost)
        logger.info("Loan %s closed as lost", loan.id)
        return loan

    async def get_loan(self, loan_id: str) -> Loan:
        document = await self._store.get(Loan.collection, loan_id)
        if document is None:
            raise NotFoundError("Transaction", loan_id)
        return Loan.from_document(document.id, document.data)

    async def list_loans(
        self,
        status: Optional[LoanStatus] = None,
        member_id: Optional[str] = None,
    ) -> list[Loan]:
        documents = await self._store.list(Loan.collection)
        loans = [Loan.from_document(d.id, d.data) for d in documents]
        if status is not None:
            loans = [loan for loan in loans if loan.status == status]
        if member_id is not None:
            loans = [loan for loan in loans if loan.member_id == member_id]
        return loans

    async def borrowed_loans(self, member_id: str) -> list[Loan]:
        """Open loans of a member, soonest due first."""
        loans = await self.list_loans(status=LoanStatus.ISSUED, member_id=member_id)
        return sorted(loans, key=lambda loan: loan.due_date)

    async def completed_loans(self, member_id: str) -> list[Loan]:
        """Closed loans of a member, most recently closed first."""
        loans = [
            loan
            for loan in await self.list_loans(member_id=member_id)
            if loan.status in CLOSED_STATUSES
        ]
        return sorted(loans, key=lambda loan: loan.return_date, reverse=True)
