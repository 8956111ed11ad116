"""Copy counts per title."""
from typing import Optional

from circulation.core.exceptions import (
    ConflictError,
    InvalidCountError,
    InventoryExhaustedError,
    NotFoundError,
)
from circulation.core.logging import get_logger
from circulation.models.book import Book
from circulation.store.base import DocumentStore, StoreTransaction

logger = get_logger("inventory")


class InventoryStore:
    """Single source of truth for how many copies of a title can circulate.

    Every mutation takes an optional ``txn``: without one it runs as its own
    atomic unit, with one it stages its change inside the caller's unit so
    the copy count moves together with the loan or request that caused it.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    async def load(self, txn: StoreTransaction, isbn: str) -> Book:
        data = await txn.get(Book.collection, isbn)
        if data is None:
            raise NotFoundError("Book", isbn)
        return Book.from_document(isbn, data)

    @staticmethod
    def _save(txn: StoreTransaction, book: Book) -> None:
        txn.set(Book.collection, book.isbn, book.to_document())

    async def add_book(
        self,
        isbn: str,
        title: str = "",
        author: str = "",
        total_copies: int = 0,
        cost: float = 20.0,
        unavailable_copies: int = 0,
    ) -> Book:
        """Register a catalog entry."""
        book = Book(
            isbn=isbn.strip(),
            title=title,
            author=author,
            total_copies=total_copies,
            unavailable_copies=unavailable_copies,
            cost=cost,
        )

        async def _add(txn: StoreTransaction) -> Book:
            if await txn.get(Book.collection, book.isbn) is not None:
                raise ConflictError(f"Book with ISBN {book.isbn} already exists")
            txn.create(Book.collection, book.to_document(), doc_id=book.isbn)
            return book

        created = await self._store.run_transaction(_add)
        logger.info("Added %s with %d copies", created.isbn, created.total_copies)
        return created

    async def get_book(self, isbn: str) -> Book:
        document = await self._store.get(Book.collection, isbn)
        if document is None:
            raise NotFoundError("Book", isbn)
        return Book.from_document(document.id, document.data)

    async def list_books(self) -> list[Book]:
        documents = await self._store.list(Book.collection)
        return sorted(
            (Book.from_document(d.id, d.data) for d in documents),
            key=lambda b: (b.title, b.isbn),
        )

    async def unavailable_books(self) -> list[Book]:
        """Titles with at least one copy pulled from circulation."""
        return [b for b in await self.list_books() if b.unavailable_copies >= 1]

    async def reserve_copy(self, isbn: str, txn: Optional[StoreTransaction] = None) -> Book:
        """Take one available copy out of circulation for a request."""
        if txn is None:
            return await self._store.run_transaction(lambda t: self.reserve_copy(isbn, t))
        book = await self.load(txn, isbn)
        if book.available_copies <= 0:
            logger.warning("No copies of %s left to reserve", isbn)
            raise InventoryExhaustedError(isbn)
        book.total_copies -= 1
        self._save(txn, book)
        return book

    async def release_copy(self, isbn: str, txn: Optional[StoreTransaction] = None) -> Book:
        """Put one physical copy back into circulation."""
        if txn is None:
            return await self._store.run_transaction(lambda t: self.release_copy(isbn, t))
        book = await self.load(txn, isbn)
        book.total_copies += 1
        self._save(txn, book)
        return book

    async def retire_copy(self, isbn: str, txn: Optional[StoreTransaction] = None) -> Book:
        """Count one copy as damaged or lost."""
        if txn is None:
            return await self._store.run_transaction(lambda t: self.retire_copy(isbn, t))
        book = await self.load(txn, isbn)
        book.unavailable_copies += 1
        self._save(txn, book)
        return book

    async def mark_unavailable(
        self, isbn: str, count: int, txn: Optional[StoreTransaction] = None
    ) -> Book:
        """Pull ``count`` available copies from circulation."""
        if txn is None:
            return await self._store.run_transaction(
                lambda t: self.mark_unavailable(isbn, count, t)
            )
        book = await self.load(txn, isbn)
        if count < 1 or count > book.available_copies:
            logger.warning("Rejected marking %d of %s unavailable", count, isbn)
            raise InvalidCountError(isbn, count, book.available_copies)
        book.unavailable_copies += count
        self._save(txn, book)
        logger.info("Marked %d copies of %s unavailable", count, isbn)
        return book

    async def mark_available(
        self, isbn: str, count: int, txn: Optional[StoreTransaction] = None
    ) -> Book:
        """Return ``count`` previously unavailable copies to circulation."""
        if txn is None:
            return await self._store.run_transaction(
                lambda t: self.mark_available(isbn, count, t)
            )
        book = await self.load(txn, isbn)
        if count < 1 or count > book.unavailable_copies:
            logger.warning("Rejected marking %d of %s available", count, isbn)
            raise InvalidCountError(isbn, count, book.unavailable_copies)
        book.unavailable_copies -= count
        self._save(txn, book)
        logger.info("Marked %d copies of %s available", count, isbn)
        return book
