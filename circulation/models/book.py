"""Catalog entry model."""
from pydantic import Field, computed_field

from circulation.models.base import DocumentModel


class Book(DocumentModel):
    """A title in the catalog, keyed by ISBN.

    ``total_copies`` is the number of copies on hand for circulation: it drops
    when a copy is reserved for a request and rises when one comes back.
    ``unavailable_copies`` counts copies pulled from circulation (damaged,
    lost or withdrawn) that have not been replaced yet.
    """

    collection = "BooksCatalog"
    id_field = "isbn"

    isbn: str
    title: str = ""
    author: str = ""
    total_copies: int = Field(0, ge=0, alias="numberOfCopies")
    unavailable_copies: int = Field(0, ge=0, alias="unavailableCopies")
    cost: float = Field(20.0, ge=0)

    @property
    def available_copies(self) -> int:
        """Copies that can still be reserved."""
        return max(0, self.total_copies - self.unavailable_copies)

    @computed_field(alias="isAvailable")
    @property
    def is_available(self) -> bool:
        return self.available_copies > 0

    def __repr__(self) -> str:
        return (
            f"<Book(isbn={self.isbn}, total={self.total_copies}, "
            f"unavailable={self.unavailable_copies})>"
        )
