"""Tests for dashboard projections and snapshot subscriptions."""
from datetime import timedelta

from circulation.models import Book, Loan


async def _issue(engine, member_id, isbn):
    request = await engine.submit_request(member_id, isbn)
    await engine.accept_request(request.id)
    return await engine.issue(request.id)


async def test_counts_follow_commits(engine, book, clock):
    assert engine.issued_count == 0
    assert engine.projections.pending_requests_count == 0

    pending = await engine.submit_request("member-1", book.isbn)
    assert engine.projections.pending_requests_count == 1

    loan = await _issue(engine, "member-2", book.isbn)
    assert engine.issued_count == 1
    assert engine.projections.active_members() == {"member-2": 1}

    clock.advance(days=8)
    assert engine.overdue_count() == 1
    assert engine.overdue_count(loan.due_date) == 0

    await engine.return_loan(loan.id)
    assert engine.issued_count == 0
    assert engine.overdue_count() == 0
    assert engine.pending_fines_count == 1

    await engine.reject_request(pending.id)
    assert engine.projections.pending_requests_count == 0


async def test_pending_fines_count_follows_toggle(engine, loan):
    closed = await engine.mark_lost(loan.id)
    assert engine.pending_fines_count == 1

    await engine.toggle_fine(closed.fine_id)
    assert engine.pending_fines_count == 0


async def test_issued_per_day(engine, book, clock):
    await engine.add_book("other", title="Other", total_copies=3)
    await _issue(engine, "member-1", book.isbn)
    clock.advance(days=2)
    await _issue(engine, "member-1", "other")
    await _issue(engine, "member-2", "other")

    per_day = engine.projections.issued_per_day(days=3)

    today = clock.now.date()
    assert per_day == [
        (today - timedelta(days=2), 1),
        (today - timedelta(days=1), 0),
        (today, 2),
    ]


async def test_subscribe_delivers_typed_snapshots(engine, book):
    snapshots = []
    subscription = await engine.subscribe(Loan, snapshots.append)
    assert snapshots == [[]]

    loan = await _issue(engine, "member-1", book.isbn)
    assert [l.id for l in snapshots[-1]] == [loan.id]
    assert isinstance(snapshots[-1][0], Loan)

    subscription.cancel()
    delivered = len(snapshots)
    await engine.return_loan(loan.id)
    assert len(snapshots) == delivered


async def test_listener_failure_does_not_break_commit(engine, book):
    def broken(_books):
        raise RuntimeError("listener bug")

    await engine.subscribe(Book, lambda books: None)
    await engine.store.subscribe(Book.collection, broken)

    updated = await engine.mark_unavailable(book.isbn, 1)
    assert updated.unavailable_copies == 1
    assert (await engine.inventory.get_book(book.isbn)).unavailable_copies == 1
