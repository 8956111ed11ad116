"""Catalog inventory API routes."""
from fastapi import APIRouter, Depends, status

from circulation.dependencies import get_engine
from circulation.engine import LendingEngine
from circulation.schemas.book import BookCreate, BookResponse, CopyCount

router = APIRouter(prefix="/books", tags=["Books"])


@router.get("", response_model=list[BookResponse])
async def list_books(engine: LendingEngine = Depends(get_engine)) -> list[BookResponse]:
    books = await engine.inventory.list_books()
    return [BookResponse.model_validate(book) for book in books]


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def add_book(
    book_data: BookCreate,
    engine: LendingEngine = Depends(get_engine),
) -> BookResponse:
    """Register a title and its copy counts."""
    return BookResponse.model_validate(await engine.add_book(**book_data.model_dump()))


@router.get("/unavailable", response_model=list[BookResponse])
async def unavailable_books(engine: LendingEngine = Depends(get_engine)) -> list[BookResponse]:
    """Titles with copies pulled from circulation."""
    books = await engine.inventory.unavailable_books()
    return [BookResponse.model_validate(book) for book in books]


@router.get("/{isbn}", response_model=BookResponse)
async def get_book(
    isbn: str,
    engine: LendingEngine = Depends(get_engine),
) -> BookResponse:
    return BookResponse.model_validate(await engine.inventory.get_book(isbn))


@router.post("/{isbn}/unavailable", response_model=BookResponse)
async def mark_unavailable(
    isbn: str,
    body: CopyCount,
    engine: LendingEngine = Depends(get_engine),
) -> BookResponse:
    return BookResponse.model_validate(await engine.mark_unavailable(isbn, body.count))


@router.post("/{isbn}/available", response_model=BookResponse)
async def mark_available(
    isbn: str,
    body: CopyCount,
    engine: LendingEngine = Depends(get_engine),
) -> BookResponse:
    return BookResponse.model_validate(await engine.mark_available(isbn, body.count))
