"""Tests for the library policy settings."""
from datetime import timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from circulation.models import LibrarySettings
from circulation.services import SettingsProvider


async def test_defaults_without_document(engine):
    current = await engine.current_settings()

    assert current.max_borrowing_days == 7
    assert current.late_return_fine == 5.0
    assert current.damaged_book_percentage == 60
    assert current.lost_book_percentage == 85
    assert current.reservation_period == timedelta(hours=12)
    assert current.last_updated is None


async def test_save_and_read_back(engine, clock):
    saved = await engine.save_settings(
        LibrarySettings(max_borrowing_days=10, late_return_fine=1.5)
    )
    assert saved.last_updated == clock.now

    current = await engine.current_settings()
    assert current.max_borrowing_days == 10
    assert current.late_return_fine == 1.5
    assert current.last_updated == clock.now


def test_settings_are_validated():
    with pytest.raises(PydanticValidationError):
        LibrarySettings(max_borrowing_days=0)
    with pytest.raises(PydanticValidationError):
        LibrarySettings(damaged_book_percentage=120)


async def test_change_does_not_touch_existing_loans(engine, loan, clock):
    await engine.save_settings(LibrarySettings(max_borrowing_days=30, late_return_fine=1.0))

    stored = await engine.ledger.get_loan(loan.id)
    assert stored.due_date == loan.due_date

    # Late fine uses the rate in effect at return time
    clock.advance(days=9)
    await engine.return_loan(loan.id)
    fines = await engine.fines.list_fines()
    assert fines[0].amount == 2.0


async def test_existing_fines_keep_their_amount(engine, loan):
    closed = await engine.mark_damaged(loan.id)
    await engine.save_settings(LibrarySettings(damaged_book_percentage=100))

    fine = await engine.fines.get_fine(closed.fine_id)
    assert fine.amount == 12.0


async def test_watch_follows_other_writers(engine, store):
    assert engine.settings.latest.max_borrowing_days == 7

    await SettingsProvider(store).save(LibrarySettings(max_borrowing_days=21))

    assert engine.settings.latest.max_borrowing_days == 21
