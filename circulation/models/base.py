"""Base class for records kept in the document store."""
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class DocumentModel(BaseModel):
    """Entity with a wire representation.

    Field aliases carry the store's camelCase names; Python code uses the
    snake_case attribute names.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    collection: ClassVar[str]
    id_field: ClassVar[str] = "id"

    def to_document(self) -> dict[str, Any]:
        """Serialize to the store's document payload (without the id)."""
        return self.model_dump(mode="json", by_alias=True, exclude={self.id_field})

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]):
        """Build the entity from a stored document."""
        return cls.model_validate({**data, cls.id_field: doc_id})
