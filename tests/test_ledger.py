"""Tests for the loan lifecycle."""
from datetime import timedelta

import pytest

from circulation.core.exceptions import InvalidStateTransitionError, NotFoundError
from circulation.models import Book, FineReason, LoanStatus, RequestStatus


async def test_issue_creates_loan(engine, accepted_request, book, clock):
    clock.advance(hours=2)

    loan = await engine.issue(accepted_request.id)

    assert loan.status == LoanStatus.ISSUED
    assert loan.member_id == "member-1"
    assert loan.book_id == book.isbn
    assert loan.request_id == accepted_request.id
    assert loan.issue_date == clock.now
    assert loan.due_date == clock.now + timedelta(days=7)
    assert loan.return_date is None

    request = await engine.requests.get_request(accepted_request.id)
    assert request.status == RequestStatus.ISSUED
    # The copy was taken at accept time, issuing does not take another
    assert (await engine.inventory.get_book(book.isbn)).total_copies == 1


async def test_issue_pending_request_fails(engine, book):
    request = await engine.submit_request("member-1", book.isbn)
    with pytest.raises(InvalidStateTransitionError):
        await engine.issue(request.id)
    assert await engine.ledger.list_loans() == []


async def test_issue_twice_fails(engine, loan):
    with pytest.raises(InvalidStateTransitionError):
        await engine.issue(loan.request_id)
    assert len(await engine.ledger.list_loans()) == 1


async def test_issue_uses_current_borrowing_period(engine, accepted_request):
    current = await engine.current_settings()
    await engine.save_settings(current.model_copy(update={"max_borrowing_days": 14}))

    loan = await engine.issue(accepted_request.id)

    assert loan.due_date - loan.issue_date == timedelta(days=14)


async def test_return_on_time(engine, loan, book, clock):
    clock.advance(days=7)

    returned = await engine.return_loan(loan.id)

    assert returned.status == LoanStatus.RETURNED
    assert returned.return_date == clock.now
    assert returned.fine_id is None
    assert await engine.fines.list_fines() == []
    assert (await engine.inventory.get_book(book.isbn)).total_copies == 2


async def test_return_late_charges_per_whole_day(engine, loan, clock):
    clock.advance(days=10)

    returned = await engine.return_loan(loan.id)

    fines = await engine.fines.list_fines()
    assert len(fines) == 1
    assert fines[0].amount == 15.0
    assert fines[0].reason == FineReason.LATE
    assert fines[0].member_id == "member-1"
    assert fines[0].transaction_id == loan.id
    assert returned.fine_id == fines[0].id


async def test_return_partial_day_late_is_not_fined(engine, loan, clock):
    clock.advance(days=7, hours=23)

    await engine.return_loan(loan.id)

    assert await engine.fines.list_fines() == []


async def test_return_twice_fails(engine, loan, book):
    await engine.return_loan(loan.id)

    with pytest.raises(InvalidStateTransitionError):
        await engine.return_loan(loan.id)
    assert (await engine.inventory.get_book(book.isbn)).total_copies == 2


async def test_return_missing_loan(engine):
    with pytest.raises(NotFoundError):
        await engine.return_loan("missing")


@pytest.mark.parametrize("replace_copy, total_copies", [(False, 1), (True, 2)])
async def test_mark_damaged(engine, loan, book, replace_copy, total_copies):
    closed = await engine.mark_damaged(loan.id, replace_copy=replace_copy)

    assert closed.status == LoanStatus.DAMAGED
    assert closed.return_date is not None

    stored = await engine.inventory.get_book(book.isbn)
    assert stored.unavailable_copies == 1
    assert stored.total_copies == total_copies

    fine = await engine.fines.get_fine(closed.fine_id)
    assert fine.amount == 12.0
    assert fine.reason == FineReason.DAMAGED


async def test_mark_lost(engine, loan, book):
    closed = await engine.mark_lost(loan.id)

    assert closed.status == LoanStatus.LOST
    stored = await engine.inventory.get_book(book.isbn)
    assert stored.unavailable_copies == 1
    assert stored.total_copies == 1

    fine = await engine.fines.get_fine(closed.fine_id)
    assert fine.amount == 17.0
    assert fine.reason == FineReason.LOST


async def test_closing_operations_are_terminal(engine, loan):
    await engine.mark_lost(loan.id)

    with pytest.raises(InvalidStateTransitionError):
        await engine.mark_damaged(loan.id)
    with pytest.raises(InvalidStateTransitionError):
        await engine.return_loan(loan.id)
    with pytest.raises(InvalidStateTransitionError):
        await engine.mark_lost(loan.id)

    assert len(await engine.fines.list_fines()) == 1


async def test_issue_all_for_member(engine, book):
    other = await engine.add_book("other", title="Other", total_copies=1)
    first = await engine.submit_request("member-1", book.isbn)
    second = await engine.submit_request("member-1", other.isbn)
    pending = await engine.submit_request("member-1", book.isbn)
    someone_else = await engine.submit_request("member-2", book.isbn)
    for request in (first, second, someone_else):
        await engine.accept_request(request.id)

    batch = await engine.issue_all("member-1")

    assert batch.failures == {}
    assert {loan.request_id for loan in batch.loans} == {first.id, second.id}
    assert (await engine.requests.get_request(pending.id)).status == RequestStatus.PENDING
    assert (await engine.requests.get_request(someone_else.id)).status == RequestStatus.ACCEPTED


async def test_issue_all_reports_failures(engine, book, store):
    gone = await engine.add_book("gone", title="Gone", total_copies=1)
    kept = await engine.submit_request("member-1", book.isbn)
    dropped = await engine.submit_request("member-1", gone.isbn)
    await engine.accept_request(kept.id)
    await engine.accept_request(dropped.id)

    txn = store.transaction()
    txn.delete(Book.collection, gone.isbn)
    await txn.commit()

    batch = await engine.issue_all("member-1")

    assert [loan.request_id for loan in batch.loans] == [kept.id]
    assert isinstance(batch.failures[dropped.id], NotFoundError)
    assert (await engine.requests.get_request(dropped.id)).status == RequestStatus.ACCEPTED


async def test_member_views(engine, book, clock):
    await engine.add_book("other", title="Other", total_copies=1)
    loans = []
    for isbn in (book.isbn, "other", book.isbn):
        request = await engine.submit_request("member-1", isbn)
        await engine.accept_request(request.id)
        loans.append(await engine.issue(request.id))
        clock.advance(days=1)

    await engine.return_loan(loans[0].id)
    clock.advance(days=1)
    await engine.mark_lost(loans[2].id)

    borrowed = await engine.ledger.borrowed_loans("member-1")
    assert [loan.id for loan in borrowed] == [loans[1].id]

    completed = await engine.ledger.completed_loans("member-1")
    assert [loan.id for loan in completed] == [loans[2].id, loans[0].id]
    assert await engine.ledger.borrowed_loans("member-2") == []
