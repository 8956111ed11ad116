"""Book Pydantic schemas."""
from pydantic import BaseModel, Field, field_validator

from circulation.schemas.common import BaseSchema


class BookCreate(BaseModel):
    """Schema for adding a catalog entry."""

    isbn: str = Field(..., min_length=1)
    title: str = ""
    author: str = ""
    total_copies: int = Field(0, ge=0)
    unavailable_copies: int = Field(0, ge=0)
    cost: float = Field(20.0, ge=0)

    @field_validator("isbn")
    @classmethod
    def strip_isbn(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("isbn must not be blank")
        return v


class CopyCount(BaseModel):
    """Number of copies to mark available or unavailable."""

    count: int


class BookResponse(BaseSchema):
    """Schema for book response."""

    isbn: str
    title: str
    author: str
    total_copies: int
    unavailable_copies: int
    available_copies: int
    is_available: bool
    cost: float
