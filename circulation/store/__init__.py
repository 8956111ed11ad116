"""Document store backends."""
from typing import Optional

from circulation.config import Settings, settings as default_settings
from circulation.store.base import (
    Document,
    DocumentStore,
    StoreTransaction,
    Subscription,
)
from circulation.store.memory import InMemoryDocumentStore
from circulation.store.sql import SQLDocumentStore


async def build_store(config: Optional[Settings] = None) -> DocumentStore:
    """Create the store selected by ``store_backend``."""
    config = config or default_settings
    backend = config.store_backend.lower()
    if backend == "memory":
        return InMemoryDocumentStore(
            max_retries=config.store_max_retries,
            retry_backoff=config.store_retry_backoff,
        )
    if backend == "sql":
        return await SQLDocumentStore.connect(
            config.database_url,
            max_retries=config.store_max_retries,
            retry_backoff=config.store_retry_backoff,
        )
    raise ValueError(f"Unknown store backend: {config.store_backend}")


__all__ = [
    "Document",
    "DocumentStore",
    "StoreTransaction",
    "Subscription",
    "InMemoryDocumentStore",
    "SQLDocumentStore",
    "build_store",
]
