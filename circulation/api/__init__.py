"""API routes."""
from fastapi import APIRouter

from circulation.api import books, fines, library_settings, loans, requests, stats

api_router = APIRouter(prefix="/api")
api_router.include_router(books.router)
api_router.include_router(requests.router)
api_router.include_router(loans.router)
api_router.include_router(fines.router)
api_router.include_router(library_settings.router)
api_router.include_router(stats.router)

__all__ = ["api_router"]
