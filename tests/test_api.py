"""API tests."""
import pytest
from httpx import ASGITransport, AsyncClient

from circulation.main import create_app


@pytest.fixture
async def client(engine):
    """Create test client bound to the test engine."""
    app = create_app(engine)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def isbn(client: AsyncClient) -> str:
    response = await client.post(
        "/api/books",
        json={"isbn": "9780201633610", "title": "Design Patterns", "total_copies": 1},
    )
    assert response.status_code == 201
    return response.json()["isbn"]


async def _issue(client: AsyncClient, isbn: str, member_id: str = "member-1") -> dict:
    response = await client.post("/api/requests", json={"member_id": member_id, "book_id": isbn})
    request_id = response.json()["id"]
    await client.post(f"/api/requests/{request_id}/accept")
    response = await client.post(f"/api/requests/{request_id}/issue")
    assert response.status_code == 201
    return response.json()


async def test_health_check(client: AsyncClient):
    """Test health check endpoint."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_root(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert "version" in data


async def test_add_and_get_book(client: AsyncClient, isbn: str):
    response = await client.get(f"/api/books/{isbn}")
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Design Patterns"
    assert data["available_copies"] == 1
    assert data["is_available"] is True
    assert data["cost"] == 20.0


async def test_duplicate_book(client: AsyncClient, isbn: str):
    response = await client.post("/api/books", json={"isbn": isbn})
    assert response.status_code == 409
    assert response.json()["error_code"] == "CONFLICT"


async def test_blank_isbn(client: AsyncClient):
    response = await client.post("/api/books", json={"isbn": "   "})
    assert response.status_code == 422


async def test_missing_book(client: AsyncClient):
    response = await client.get("/api/books/nope")
    assert response.status_code == 404
    data = response.json()
    assert data["error_code"] == "NOT_FOUND"
    assert data["details"] == {"resource": "Book", "id": "nope"}


async def test_mark_unavailable_bounds(client: AsyncClient, isbn: str):
    response = await client.post(f"/api/books/{isbn}/unavailable", json={"count": 2})
    assert response.status_code == 422
    assert response.json()["error_code"] == "INVALID_COUNT"

    response = await client.post(f"/api/books/{isbn}/unavailable", json={"count": 1})
    assert response.status_code == 200
    assert response.json()["is_available"] is False

    response = await client.get("/api/books/unavailable")
    assert [b["isbn"] for b in response.json()] == [isbn]

    response = await client.post(f"/api/books/{isbn}/available", json={"count": 1})
    assert response.json()["unavailable_copies"] == 0


async def test_request_lifecycle(client: AsyncClient, isbn: str):
    response = await client.post("/api/requests", json={"member_id": "member-1", "book_id": isbn})
    assert response.status_code == 201
    request = response.json()
    assert request["status"] == "pending"

    response = await client.post(f"/api/requests/{request['id']}/accept")
    assert response.status_code == 200
    assert response.json()["status"] == "accepted"

    response = await client.post(f"/api/requests/{request['id']}/reject")
    assert response.status_code == 409
    assert response.json()["error_code"] == "INVALID_STATE_TRANSITION"

    response = await client.get("/api/requests", params={"status": "accepted"})
    assert [r["id"] for r in response.json()] == [request["id"]]


async def test_accept_without_copies(client: AsyncClient, isbn: str):
    await _issue(client, isbn)
    response = await client.post("/api/requests", json={"member_id": "member-2", "book_id": isbn})

    response = await client.post(f"/api/requests/{response.json()['id']}/accept")
    assert response.status_code == 409
    assert response.json()["error_code"] == "INVENTORY_EXHAUSTED"


async def test_request_window_validation(client: AsyncClient, isbn: str):
    response = await client.post(
        "/api/requests",
        json={
            "member_id": "member-1",
            "book_id": isbn,
            "start_date": "2025-01-01T00:00:00Z",
            "end_date": "2025-01-20T00:00:00Z",
        },
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"

    response = await client.post(
        "/api/requests",
        json={"member_id": "member-1", "book_id": isbn, "start_date": "2025-01-01T00:00:00Z"},
    )
    assert response.status_code == 422


async def test_late_return_creates_fine(client: AsyncClient, isbn: str, clock):
    loan = await _issue(client, isbn)
    assert loan["status"] == "issued"

    clock.advance(days=10)
    response = await client.post(f"/api/loans/{loan['id']}/return")
    assert response.status_code == 200
    returned = response.json()
    assert returned["status"] == "returned"

    response = await client.get("/api/fines", params={"member_id": "member-1"})
    fines = response.json()
    assert len(fines) == 1
    assert fines[0]["amount"] == 15.0
    assert fines[0]["id"] == returned["fine_id"]

    response = await client.post(f"/api/fines/{fines[0]['id']}/toggle")
    assert response.json()["status"] == "paid"

    response = await client.post(f"/api/loans/{loan['id']}/return")
    assert response.status_code == 409


async def test_damaged_with_replacement(client: AsyncClient, isbn: str):
    loan = await _issue(client, isbn)

    response = await client.post(f"/api/loans/{loan['id']}/damaged", json={"replace_copy": True})
    assert response.status_code == 200
    assert response.json()["status"] == "damaged"

    book = (await client.get(f"/api/books/{isbn}")).json()
    assert book["unavailable_copies"] == 1
    assert book["total_copies"] == 1


async def test_lost(client: AsyncClient, isbn: str):
    loan = await _issue(client, isbn)

    response = await client.post(f"/api/loans/{loan['id']}/lost")
    assert response.status_code == 200

    fine = (await client.get(f"/api/fines/{response.json()['fine_id']}")).json()
    assert fine["amount"] == 17.0
    assert fine["reason"] == "lost"


async def test_member_views_and_bulk_issue(client: AsyncClient, isbn: str):
    response = await client.post("/api/requests", json={"member_id": "member-1", "book_id": isbn})
    await client.post(f"/api/requests/{response.json()['id']}/accept")

    response = await client.post("/api/loans/members/member-1/issue")
    assert response.status_code == 200
    batch = response.json()
    assert len(batch["loans"]) == 1
    assert batch["failures"] == {}

    borrowed = (await client.get("/api/loans/members/member-1/borrowed")).json()
    assert [l["id"] for l in borrowed] == [batch["loans"][0]["id"]]
    completed = (await client.get("/api/loans/members/member-1/completed")).json()
    assert completed == []


async def test_settings(client: AsyncClient, clock):
    response = await client.get("/api/settings")
    assert response.status_code == 200
    assert response.json()["max_borrowing_days"] == 7

    response = await client.put(
        "/api/settings",
        json={"max_borrowing_days": 14, "late_return_fine": 2.0},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["max_borrowing_days"] == 14
    assert data["damaged_book_percentage"] == 60
    assert data["last_updated"] is not None

    response = await client.put("/api/settings", json={"lost_book_percentage": 150})
    assert response.status_code == 422


async def test_stats(client: AsyncClient, isbn: str, clock):
    await _issue(client, isbn)
    clock.advance(days=8)

    response = await client.get("/api/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["issued_count"] == 1
    assert data["overdue_count"] == 1
    assert data["pending_fines_count"] == 0
    assert data["active_members"] == {"member-1": 1}
    assert len(data["issued_per_day"]) == 7
