"""Library policy settings."""
from typing import Optional

from circulation.core.logging import get_logger
from circulation.core.utils import Clock, utcnow
from circulation.models.library_settings import SETTINGS_DOCUMENT_ID, LibrarySettings
from circulation.store.base import Document, DocumentStore, StoreTransaction, Subscription

logger = get_logger("settings")


class SettingsProvider:
    """Reads the ``Settings/library`` document.

    Every ``current()`` call fetches the document again; the cached
    ``latest`` snapshot is only refreshed by fetches and by the store's
    change notifications after ``watch()``.
    """

    def __init__(self, store: DocumentStore, clock: Clock = utcnow):
        self._store = store
        self._clock = clock
        self._latest: Optional[LibrarySettings] = None
        self._subscription: Optional[Subscription] = None

    @property
    def latest(self) -> LibrarySettings:
        """Last snapshot seen, or the defaults if none was fetched yet."""
        return self._latest or LibrarySettings()

    async def current(self, txn: Optional[StoreTransaction] = None) -> LibrarySettings:
        """Fetch the settings in effect now.

        When ``txn`` is given the read joins that unit of work, so a
        concurrent settings change forces the unit to replay.
        """
        if txn is not None:
            data = await txn.get(LibrarySettings.collection, SETTINGS_DOCUMENT_ID)
        else:
            document = await self._store.get(LibrarySettings.collection, SETTINGS_DOCUMENT_ID)
            data = document.data if document else None
        snapshot = (
            LibrarySettings.from_document(SETTINGS_DOCUMENT_ID, data)
            if data is not None
            else LibrarySettings()
        )
        self._latest = snapshot
        return snapshot

    async def save(self, new_settings: LibrarySettings) -> LibrarySettings:
        """Replace the library settings.

        Existing loans and fines keep the values they were computed with.
        """
        snapshot = new_settings.model_copy(
            update={"id": SETTINGS_DOCUMENT_ID, "last_updated": self._clock()}
        )

        async def _save(txn: StoreTransaction) -> LibrarySettings:
            txn.set(LibrarySettings.collection, SETTINGS_DOCUMENT_ID, snapshot.to_document())
            return snapshot

        saved = await self._store.run_transaction(_save)
        self._latest = saved
        logger.info(
            "Library settings updated: %d days, fine %.2f/day, damaged %.0f%%, lost %.0f%%",
            saved.max_borrowing_days,
            saved.late_return_fine,
            saved.damaged_book_percentage,
            saved.lost_book_percentage,
        )
        return saved

    async def watch(self) -> Subscription:
        """Keep ``latest`` in step with the store."""
        if self._subscription is None:
            self._subscription = await self._store.subscribe(
                LibrarySettings.collection, self._on_snapshot
            )
        return self._subscription

    def unwatch(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def _on_snapshot(self, documents: list[Document]) -> None:
        for document in documents:
            if document.id == SETTINGS_DOCUMENT_ID:
                self._latest = LibrarySettings.from_document(document.id, document.data)
                return
        self._latest = None
