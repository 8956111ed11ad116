"""Lending lifecycle engine for a library.

Turns member book requests into reservations, issued loans and closed
transactions, keeping copy counts and fines consistent under concurrent use.
"""
from circulation.engine import LendingEngine

__version__ = "1.0.0"

__all__ = ["LendingEngine", "__version__"]
