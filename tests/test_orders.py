from decimal import Decimal

import pytest
from sqlalchemy import func, select

from bookstore.data.database import SessionLocal
from bookstore.data.models.book import BookModel
from bookstore.data.models.order import OrderModel
from bookstore.domain.errors import InsufficientStockError
from bookstore.domain.schemas import OrderCreate, OrderItemIn
from bookstore.repos.order_repo import OrderRepo
from bookstore.services.order_service import OrderService


def book_state(client, book_id):
    data = client.get(f"/api/books/{book_id}").json()["data"]
    return data["stock_quantity"], data["sold_number"]


def test_order_lifecycle(client, user, make_book, place_order):
    book = make_book(price="100000", stock=50)

    res = place_order(user, [(book["id"], 2)])
    assert res.status_code == 201
    order = res.json()["data"]

    assert order["status"] == "pending"
    assert Decimal(order["total_amount"]) == Decimal("200000")
    assert book_state(client, book["id"]) == (48, 2)

    res = client.put(f"/api/orders/{order['id']}/cancel", headers=user["headers"])
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "canceled"
    assert book_state(client, book["id"]) == (50, 0)


def test_order_lines_snapshot_price_and_totals(client, admin, user, make_book, place_order):
    a = make_book(title="A", price="15000")
    b = make_book(title="B", price="20000")

    order = place_order(user, [(a["id"], 3), (b["id"], 1)]).json()["data"]

    lines = {i["book_title"]: i for i in order["items"]}
    assert Decimal(lines["A"]["price_at_time"]) == Decimal("15000")
    assert Decimal(lines["A"]["sub_total"]) == Decimal("45000")
    assert Decimal(lines["B"]["sub_total"]) == Decimal("20000")
    assert Decimal(order["total_amount"]) == sum(Decimal(i["sub_total"]) for i in order["items"])

    # later price changes do not rewrite history
    client.put(f"/api/books/{a['id']}", json={"price": "99000"}, headers=admin["headers"])
    again = client.get(f"/api/orders/{order['id']}", headers=user["headers"]).json()["data"]
    assert Decimal({i["book_title"]: i for i in again["items"]}["A"]["price_at_time"]) == Decimal("15000")


def test_address_and_phone_snapshot(client, user, make_book, make_address, place_order):
    book = make_book()
    address = make_address(user, city="Ha Noi", ward="Ba Dinh", specific_address="12 Kim Ma")

    order = place_order(user, [(book["id"], 1)], address=address, phone="0911222333").json()["data"]
    assert order["address_snapshot"] == "12 Kim Ma, Ba Dinh, Ha Noi"
    assert order["phone_snapshot"] == "0911222333"


def test_address_snapshot_without_specific_part(client, user, make_book, make_address, place_order):
    book = make_book()
    address = make_address(user, specific_address="   ")

    order = place_order(user, [(book["id"], 1)], address=address).json()["data"]
    assert order["address_snapshot"] == "Ba Dinh, Ha Noi"


def test_insufficient_stock_writes_nothing(client, db, user, make_book, place_order):
    book = make_book(stock=50)

    res = place_order(user, [(book["id"], 100)])
    assert res.status_code == 400
    assert book_state(client, book["id"]) == (50, 0)
    assert db.execute(select(func.count()).select_from(OrderModel)).scalar_one() == 0


def test_failing_line_rolls_back_earlier_lines(client, db, user, make_book, place_order):
    a = make_book(title="A", stock=10)
    b = make_book(title="B", stock=1)

    res = place_order(user, [(a["id"], 5), (b["id"], 2)])
    assert res.status_code == 400
    assert book_state(client, a["id"]) == (10, 0)
    assert db.execute(select(func.count()).select_from(OrderModel)).scalar_one() == 0


def test_repeated_book_lines_share_stock(client, user, make_book, place_order):
    book = make_book(stock=3)

    assert place_order(user, [(book["id"], 2), (book["id"], 2)]).status_code == 400
    assert book_state(client, book["id"]) == (3, 0)

    res = place_order(user, [(book["id"], 1), (book["id"], 2)])
    assert res.status_code == 201
    assert len(res.json()["data"]["items"]) == 2
    assert book_state(client, book["id"]) == (0, 3)


def test_unknown_book_in_order(client, user, place_order):
    assert place_order(user, [(999, 1)]).status_code == 404


def test_non_positive_quantity(client, user, make_book, place_order):
    book = make_book()
    assert place_order(user, [(book["id"], 0)]).status_code == 400


def test_empty_order(client, user, place_order):
    assert place_order(user, []).status_code == 400


def test_address_of_another_user(client, user, other_user, make_book, make_address, place_order):
    book = make_book()
    foreign = make_address(other_user)
    assert place_order(user, [(book["id"], 1)], address=foreign).status_code == 404


def test_order_for_someone_else_is_forbidden(client, user, other_user, make_book, make_address):
    book = make_book()
    address = make_address(other_user)
    body = {
        "user_id": other_user["id"],
        "address_id": address["id"],
        "phone": "0901234567",
        "items": [{"book_id": book["id"], "quantity": 1}],
    }
    assert client.post("/api/orders/", json=body, headers=user["headers"]).status_code == 403


def test_cancel_only_pending(client, admin, user, make_book, place_order):
    book = make_book()
    order = place_order(user, [(book["id"], 1)]).json()["data"]

    client.put(f"/api/orders/{order['id']}/status", json={"status": "completed"}, headers=admin["headers"])

    res = client.put(f"/api/orders/{order['id']}/cancel", headers=user["headers"])
    assert res.status_code == 400
    assert book_state(client, book["id"]) == (49, 1)


def test_cancel_missing_order(client, admin):
    assert client.put("/api/orders/999/cancel", headers=admin["headers"]).status_code == 404


def test_admin_status_update_is_unrestricted(client, admin, user, make_book, place_order):
    book = make_book()
    order = place_order(user, [(book["id"], 1)]).json()["data"]

    for status in ("completed", "pending", "canceled"):
        res = client.put(f"/api/orders/{order['id']}/status", json={"status": status}, headers=admin["headers"])
        assert res.status_code == 200
        assert res.json()["data"]["status"] == status


def test_status_update_requires_admin(client, user, make_book, place_order):
    book = make_book()
    order = place_order(user, [(book["id"], 1)]).json()["data"]
    res = client.put(f"/api/orders/{order['id']}/status", json={"status": "completed"}, headers=user["headers"])
    assert res.status_code == 403


def test_other_users_order_is_forbidden(client, user, other_user, make_book, place_order):
    book = make_book()
    order = place_order(user, [(book["id"], 1)]).json()["data"]
    assert client.get(f"/api/orders/{order['id']}", headers=other_user["headers"]).status_code == 403


def test_user_orders_and_filters(client, admin, user, other_user, make_book, place_order):
    book = make_book()
    mine = place_order(user, [(book["id"], 1)]).json()["data"]
    place_order(other_user, [(book["id"], 1)])

    own = client.get(f"/api/orders/user/{user['id']}", headers=user["headers"]).json()["data"]
    assert [o["id"] for o in own] == [mine["id"]]

    client.put(f"/api/orders/{mine['id']}/status", json={"status": "completed"}, headers=admin["headers"])
    completed = client.get("/api/orders/", params={"status": "completed"}, headers=admin["headers"]).json()["data"]
    assert [o["id"] for o in completed] == [mine["id"]]

    page = client.get("/api/orders/pagination/list", params={"limit": 1}, headers=admin["headers"]).json()
    assert page["pagination"]["total_items"] == 2
    assert len(page["data"]) == 1


def test_order_statistics(client, admin, user, make_book, place_order):
    book = make_book(price="100000")
    first = place_order(user, [(book["id"], 1)]).json()["data"]
    place_order(user, [(book["id"], 2)])

    client.put(f"/api/orders/{first['id']}/status", json={"status": "completed"}, headers=admin["headers"])

    stats = client.get("/api/orders/stats/statistics", headers=admin["headers"]).json()["data"]
    assert stats["total_orders"] == 2
    assert stats["pending_orders"] == 1
    assert stats["completed_orders"] == 1
    assert Decimal(stats["total_revenue"]) == Decimal("100000")

    scoped = client.get(
        "/api/orders/stats/statistics", params={"user_id": 999}, headers=admin["headers"]
    ).json()["data"]
    assert scoped["total_orders"] == 0


def test_concurrent_orders_cannot_oversell(client, user, make_book, make_address):
    book = make_book(stock=50)
    address = make_address(user)
    payload = OrderCreate(
        user_id=user["id"],
        address_id=address["id"],
        phone="0901234567",
        items=[OrderItemIn(book_id=book["id"], quantity=30)],
    )

    first, second = SessionLocal(), SessionLocal()
    try:
        # both sessions read stock 50 before either one writes
        for session in (first, second):
            assert session.get(BookModel, book["id"]).stock_quantity == 50

        OrderService(first).create_order(payload)
        with pytest.raises(InsufficientStockError):
            OrderService(second).create_order(payload)
    finally:
        first.close()
        second.close()

    assert book_state(client, book["id"]) == (20, 30)
    with SessionLocal() as session:
        assert session.execute(select(func.count()).select_from(OrderModel)).scalar_one() == 1


def test_cancel_is_all_or_nothing(client, db, monkeypatch, user, make_book, place_order):
    book = make_book(stock=50)
    order = place_order(user, [(book["id"], 5)]).json()["data"]

    def failing_status_write(self, order, status):
        raise RuntimeError("status write failed")

    monkeypatch.setattr(OrderRepo, "update_order_status", failing_status_write)

    with pytest.raises(RuntimeError):
        OrderService(db).cancel_order(order["id"])

    assert book_state(client, book["id"]) == (45, 5)
    res = client.get(f"/api/orders/{order['id']}", headers=user["headers"])
    assert res.json()["data"]["status"] == "pending"


def test_cancel_restores_repeated_lines(client, user, make_book, place_order):
    book = make_book(stock=10)
    order = place_order(user, [(book["id"], 2), (book["id"], 3)]).json()["data"]
    assert book_state(client, book["id"]) == (5, 5)

    assert client.put(f"/api/orders/{order['id']}/cancel", headers=user["headers"]).status_code == 200
    assert book_state(client, book["id"]) == (10, 0)
