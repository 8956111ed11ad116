"""Document store on a relational database via SQLAlchemy."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import Select, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from circulation.core.exceptions import StoreUnavailableError, WriteConflictError
from circulation.core.logging import get_logger
from circulation.database import (
    StoredDocument,
    close_db,
    create_engine,
    create_session_factory,
    init_db,
)
from circulation.store.base import ABSENT, Document, DocumentStore, Key

logger = get_logger("store.sql")


def _to_document(row: StoredDocument) -> Document:
    return Document(
        collection=row.collection,
        id=row.id,
        data=dict(row.data),
        version=row.version,
    )


def _label(key: Key) -> str:
    return f"{key[0]}/{key[1]}"


def version_query(key: Key, lock: bool = False) -> Select:
    """``SELECT version`` of one document, optionally ``FOR UPDATE``."""
    query = select(StoredDocument.version).where(
        StoredDocument.collection == key[0],
        StoredDocument.id == key[1],
    )
    return query.with_for_update() if lock else query


class SQLDocumentStore(DocumentStore):
    """Store keeping every collection in a single versioned ``documents`` table.

    A commit is one database transaction. Documents that were read are
    written with ``UPDATE ... WHERE version = :expected`` so a concurrent
    writer turns into a zero-row update and the unit is rejected.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
    ):
        super().__init__(max_retries=max_retries, retry_backoff=retry_backoff)
        self._engine = engine
        self._sessions = create_session_factory(engine)

    @classmethod
    async def connect(cls, database_url: Optional[str] = None, **kwargs: Any) -> "SQLDocumentStore":
        """Create the engine, make sure the table exists and return the store."""
        engine = create_engine(database_url)
        await init_db(engine)
        return cls(engine, **kwargs)

    async def close(self) -> None:
        await close_db(self._engine)

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessions() as session:
                yield session
        except (OperationalError, InterfaceError) as exc:
            logger.warning("Database error: %s", exc.orig)
            raise StoreUnavailableError(f"Database error: {exc.orig}") from exc

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        async with self._session() as session:
            row = await session.get(StoredDocument, (collection, doc_id))
            return _to_document(row) if row else None

    async def list(self, collection: str) -> list[Document]:
        async with self._session() as session:
            result = await session.execute(
                select(StoredDocument)
                .where(StoredDocument.collection == collection)
                .order_by(StoredDocument.id)
            )
            return [_to_document(row) for row in result.scalars().all()]

    async def _current_version(self, session: AsyncSession, key: Key, lock: bool = False) -> int:
        version = await session.scalar(version_query(key, lock=lock))
        return ABSENT if version is None else version

    async def _apply(
        self,
        reads: dict[Key, int],
        writes: dict[Key, Optional[dict[str, Any]]],
    ) -> None:
        async with self._session() as session:
            try:
                async with session.begin():
                    # Rows only read are locked until commit so they cannot move
                    # between this check and the writes below
                    stale = [
                        _label(key)
                        for key, expected in sorted(reads.items())
                        if key not in writes
                        and await self._current_version(session, key, lock=True) != expected
                    ]
                    if stale:
                        raise WriteConflictError(stale)

                    for key, data in writes.items():
                        expected = reads.get(key)
                        if expected is None:
                            expected = await self._current_version(session, key)
                        if not await self._write(session, key, data, expected):
                            stale.append(_label(key))
                    if stale:
                        # Raising inside begin() rolls the whole unit back
                        raise WriteConflictError(stale)
            except IntegrityError as exc:
                # Another writer created one of our new documents first
                raise WriteConflictError([_label(key) for key in writes]) from exc

    async def _write(
        self,
        session: AsyncSession,
        key: Key,
        data: Optional[dict[str, Any]],
        expected: int,
    ) -> bool:
        collection, doc_id = key
        match = (
            StoredDocument.collection == collection,
            StoredDocument.id == doc_id,
            StoredDocument.version == expected,
        )
        if data is None:
            if expected == ABSENT:
                return True
            result = await session.execute(delete(StoredDocument).where(*match))
            return result.rowcount == 1
        if expected == ABSENT:
            if await self._current_version(session, key) != ABSENT:
                return False
            await session.execute(
                insert(StoredDocument).values(
                    collection=collection, id=doc_id, data=data, version=1
                )
            )
            return True
        result = await session.execute(
            update(StoredDocument).where(*match).values(data=data, version=expected + 1)
        )
        return result.rowcount == 1
