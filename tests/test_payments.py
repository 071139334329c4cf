from decimal import Decimal

from sqlalchemy import func, select

from bookstore.data.models.payment import PaymentModel


def pending_order(user, make_book, place_order, price="100000", quantity=2):
    book = make_book(price=price)
    return place_order(user, [(book["id"], quantity)]).json()["data"]


def pay(client, owner, order, amount=None, method="credit_card"):
    body = {"order_id": order["id"], "method": method, "amount": amount or order["total_amount"]}
    return client.post("/api/payments/", json=body, headers=owner["headers"])


def test_create_payment(client, user, make_book, place_order):
    order = pending_order(user, make_book, place_order)

    res = pay(client, user, order)
    assert res.status_code == 201
    payment = res.json()["data"]
    assert payment["status"] == "processing"
    assert payment["paid_at"] is None
    assert payment["order"]["id"] == order["id"]
    assert Decimal(payment["amount"]) == Decimal("200000")


def test_amount_mismatch_rejected(client, db, user, make_book, place_order):
    order = pending_order(user, make_book, place_order)

    res = pay(client, user, order, amount="199999.99")
    assert res.status_code == 400
    assert db.execute(select(func.count()).select_from(PaymentModel)).scalar_one() == 0


def test_second_payment_conflicts(client, user, make_book, place_order):
    order = pending_order(user, make_book, place_order)
    assert pay(client, user, order).status_code == 201
    assert pay(client, user, order).status_code == 409


def test_payment_for_missing_order(client, admin):
    body = {"order_id": 999, "method": "cod", "amount": "10"}
    assert client.post("/api/payments/", json=body, headers=admin["headers"]).status_code == 404


def test_process_approved_completes_order(client, user, make_book, place_order):
    order = pending_order(user, make_book, place_order)
    payment = pay(client, user, order).json()["data"]

    res = client.put(f"/api/payments/{payment['id']}/process", headers=user["headers"])
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["status"] == "paid"
    assert data["paid_at"] is not None
    assert data["order"]["status"] == "completed"

    order_now = client.get(f"/api/orders/{order['id']}", headers=user["headers"]).json()["data"]
    assert order_now["status"] == "completed"
    assert order_now["payment"]["status"] == "paid"


def test_process_declined_leaves_order_pending(client, gateway, user, make_book, place_order):
    gateway.approve = False
    order = pending_order(user, make_book, place_order)
    payment = pay(client, user, order).json()["data"]

    res = client.put(f"/api/payments/{payment['id']}/process", headers=user["headers"])
    assert res.json()["data"]["status"] == "failed"
    assert res.json()["message"] == "Payment failed"

    order_now = client.get(f"/api/orders/{order['id']}", headers=user["headers"]).json()["data"]
    assert order_now["status"] == "pending"


def test_process_twice_is_invalid(client, user, make_book, place_order):
    order = pending_order(user, make_book, place_order)
    payment = pay(client, user, order).json()["data"]

    client.put(f"/api/payments/{payment['id']}/process", headers=user["headers"])
    assert client.put(f"/api/payments/{payment['id']}/process", headers=user["headers"]).status_code == 400


def test_admin_marks_paid(client, admin, user, make_book, place_order):
    order = pending_order(user, make_book, place_order)
    payment = pay(client, user, order).json()["data"]

    res = client.put(f"/api/payments/{payment['id']}/status", json={"status": "paid"}, headers=admin["headers"])
    assert res.status_code == 200
    assert res.json()["data"]["paid_at"] is not None
    assert res.json()["data"]["order"]["status"] == "completed"


def test_status_update_missing_payment(client, admin):
    res = client.put("/api/payments/999/status", json={"status": "paid"}, headers=admin["headers"])
    assert res.status_code == 404


def test_payment_by_order(client, user, other_user, make_book, place_order):
    order = pending_order(user, make_book, place_order)
    payment = pay(client, user, order).json()["data"]

    res = client.get(f"/api/payments/order/{order['id']}", headers=user["headers"])
    assert res.json()["data"]["id"] == payment["id"]
    assert client.get(f"/api/payments/order/{order['id']}", headers=other_user["headers"]).status_code == 403


def test_payment_statistics(client, admin, gateway, user, make_book, place_order):
    first = pending_order(user, make_book, place_order, price="100000", quantity=1)
    second = pending_order(user, make_book, place_order, price="50000", quantity=1)
    third = pending_order(user, make_book, place_order, price="70000", quantity=1)

    p1 = pay(client, user, first, method="credit_card").json()["data"]
    p2 = pay(client, user, second, method="cod").json()["data"]
    pay(client, user, third, method="qr_code")

    client.put(f"/api/payments/{p1['id']}/process", headers=user["headers"])
    gateway.approve = False
    client.put(f"/api/payments/{p2['id']}/process", headers=user["headers"])

    stats = client.get("/api/payments/stats/statistics", headers=admin["headers"]).json()["data"]
    assert stats["total_payments"] == 3
    assert stats["paid_payments"] == 1
    assert stats["failed_payments"] == 1
    assert stats["processing_payments"] == 1
    assert Decimal(stats["total_revenue"]) == Decimal("100000")
    assert Decimal(stats["revenue_by_method"]["credit_card"]) == Decimal("100000")
    assert Decimal(stats["revenue_by_method"]["cod"]) == 0


def test_list_payments_filters(client, admin, user, make_book, place_order):
    first = pending_order(user, make_book, place_order)
    second = pending_order(user, make_book, place_order)
    pay(client, user, first, method="cod")
    pay(client, user, second, method="qr_code")

    res = client.get("/api/payments/", params={"method": "cod"}, headers=admin["headers"])
    assert [p["order_id"] for p in res.json()["data"]] == [first["id"]]
    assert client.get("/api/payments/", headers=user["headers"]).status_code == 403
