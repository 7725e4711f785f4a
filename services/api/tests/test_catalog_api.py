from fastapi.testclient import TestClient
from sqlalchemy.orm import Session


def test_list_books_returns_active_catalog(client: TestClient) -> None:
    resp = client.get("/v1/books")
    assert resp.status_code == 200

    books = resp.json()["books"]
    assert [b["id"] for b in books] == [1, 2, 3, 4, 6, 13]
    assert books[0]["title"] == "Modern JavaScript Deep Dive"
    assert books[0]["price"] == 45000


def test_get_book(client: TestClient) -> None:
    resp = client.get("/v1/books/3")
    assert resp.status_code == 200
    assert resp.json()["price"] == 8100

    assert client.get("/v1/books/999").status_code == 404


def test_deactivated_book_disappears_and_cannot_be_bought(
    client: TestClient, seeded_db: Session, user_headers: dict[str, str]
) -> None:
    from services.api.app.services.catalog import deactivate_product

    deactivate_product(seeded_db, 3)

    assert client.get("/v1/books/3").status_code == 404

    body = {
        "paymentKey": "pk-1",
        "orderId": "order-1",
        "amount": 11100,
        "items": [{"bookId": 3, "quantity": 1, "price": 8100}],
    }
    resp = client.post("/v1/payments/confirm", json=body, headers=user_headers)
    assert resp.status_code == 400
    assert "does not exist" in resp.json()["detail"]
