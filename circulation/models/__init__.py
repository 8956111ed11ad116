"""Entity records and their document mapping."""
from circulation.models.base import DocumentModel
from circulation.models.book import Book
from circulation.models.fine import Fine, FineReason, FineStatus
from circulation.models.library_settings import SETTINGS_DOCUMENT_ID, LibrarySettings
from circulation.models.loan import CLOSED_STATUSES, Loan, LoanStatus
from circulation.models.request import (
    REQUEST_TRANSITIONS,
    BookRequest,
    RequestStatus,
    RequestWindow,
)

__all__ = [
    "DocumentModel",
    # Book
    "Book",
    # Request
    "BookRequest",
    "RequestStatus",
    "REQUEST_TRANSITIONS",
    "RequestWindow",
    # Loan
    "Loan",
    "LoanStatus",
    "CLOSED_STATUSES",
    # Fine
    "Fine",
    "FineReason",
    "FineStatus",
    # Settings
    "LibrarySettings",
    "SETTINGS_DOCUMENT_ID",
]
