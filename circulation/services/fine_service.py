"""Fine computation and settlement."""
from typing import Optional

from circulation.core.exceptions import NotFoundError
from circulation.core.logging import get_logger
from circulation.core.utils import Clock, new_id, utcnow
from circulation.models.fine import Fine, FineReason, FineStatus
from circulation.models.library_settings import LibrarySettings
from circulation.models.loan import Loan
from circulation.store.base import DocumentStore, StoreTransaction

logger = get_logger("fines")


class FineEngine:
    """Creates fines for abnormal loan closures and toggles their payment."""

    def __init__(self, store: DocumentStore, clock: Clock = utcnow):
        self._store = store
        self._clock = clock

    @staticmethod
    def compute_amount(
        reason: FineReason,
        policy: LibrarySettings,
        days_late: int = 0,
        cost: float = 0.0,
    ) -> float:
        """Amount owed under ``policy``.

        Late fines are charged per whole day; damaged and lost fines are a
        percentage of the book's cost.
        """
        if reason == FineReason.LATE:
            amount = max(0, days_late) * policy.late_return_fine
        elif reason == FineReason.DAMAGED:
            amount = cost * policy.damaged_book_percentage / 100.0
        else:
            amount = cost * policy.lost_book_percentage / 100.0
        return round(amount, 2)

    async def record(
        self,
        member_id: str,
        transaction_id: str,
        amount: float,
        reason: FineReason,
        txn: Optional[StoreTransaction] = None,
    ) -> Fine:
        """Create a pending fine and link it to its loan."""
        if txn is None:
            return await self._store.run_transaction(
                lambda t: self.record(member_id, transaction_id, amount, reason, t)
            )
        data = await txn.get(Loan.collection, transaction_id)
        if data is None:
            raise NotFoundError("Transaction", transaction_id)
        loan = Loan.from_document(transaction_id, data)

        fine = Fine(
            id=new_id(),
            member_id=member_id,
            transaction_id=transaction_id,
            amount=amount,
            reason=reason,
            created_at=self._clock(),
        )
        txn.create(Fine.collection, fine.to_document(), doc_id=fine.id)
        loan.fine_id = fine.id
        txn.set(Loan.collection, loan.id, loan.to_document())
        logger.info(
            "Fined member %s %.2f (%s) on loan %s", member_id, amount, reason.value, transaction_id
        )
        return fine

    async def toggle_status(self, fine_id: str) -> Fine:
        """Flip a fine between pending and paid."""

        async def _toggle(txn: StoreTransaction) -> Fine:
            data = await txn.get(Fine.collection, fine_id)
            if data is None:
                raise NotFoundError("Fine", fine_id)
            fine = Fine.from_document(fine_id, data)
            if fine.status == FineStatus.PENDING:
                fine.status = FineStatus.PAID
                fine.paid_at = self._clock()
            else:
                fine.status = FineStatus.PENDING
                fine.paid_at = None
            txn.set(Fine.collection, fine.id, fine.to_document())
            return fine

        fine = await self._store.run_transaction(_toggle)
        logger.info("Fine %s is now %s", fine.id, fine.status.value)
        return fine

    async def get_fine(self, fine_id: str) -> Fine:
        document = await self._store.get(Fine.collection, fine_id)
        if document is None:
            raise NotFoundError("Fine", fine_id)
        return Fine.from_document(document.id, document.data)

    async def list_fines(
        self,
        status: Optional[FineStatus] = None,
        member_id: Optional[str] = None,
    ) -> list[Fine]:
        documents = await self._store.list(Fine.collection)
        fines = [Fine.from_document(d.id, d.data) for d in documents]
        if status is not None:
            fines = [f for f in fines if f.status == status]
        if member_id is not None:
            fines = [f for f in fines if f.member_id == member_id]
        return sorted(fines, key=lambda f: f.created_at)
