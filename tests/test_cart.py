from decimal import Decimal


def cart_url(owner, suffix=""):
    return f"/api/carts/{owner['id']}{suffix}"


def add(client, owner, book_id, quantity, **extra):
    return client.post(
        cart_url(owner, "/items"),
        json={"book_id": book_id, "quantity": quantity, **extra},
        headers=owner["headers"],
    )


def test_get_or_create_is_idempotent(client, user):
    first = client.get(cart_url(user), headers=user["headers"]).json()["data"]
    second = client.get(cart_url(user), headers=user["headers"]).json()["data"]
    assert first["cart_id"] == second["cart_id"]
    assert first["user_id"] == user["id"]


def test_add_item(client, user, make_book):
    book = make_book(price="50000", images=["https://img.mail.com/cover.jpg"])

    res = add(client, user, book["id"], 2)
    assert res.status_code == 200

    cart = res.json()["data"]
    assert len(cart["items"]) == 1
    item = cart["items"][0]
    assert item["book_title"] == "Clean Code"
    assert item["book_image"] == "https://img.mail.com/cover.jpg"
    assert item["quantity"] == 2
    assert item["is_selected"] is True
    assert Decimal(item["sub_total"]) == Decimal("100000")
    assert cart["total_items"] == 2


def test_add_same_book_sums_quantity_and_overwrites_selection(client, user, make_book):
    book = make_book()
    add(client, user, book["id"], 2)
    cart = add(client, user, book["id"], 3, is_selected=False).json()["data"]

    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 5
    assert cart["items"][0]["is_selected"] is False


def test_add_more_than_stock(client, user, make_book):
    book = make_book(stock=3)
    res = add(client, user, book["id"], 4)
    assert res.status_code == 400
    assert "Available: 3" in res.json()["message"]


def test_add_unknown_book(client, user):
    assert add(client, user, 999, 1).status_code == 404


def test_add_zero_quantity_rejected(client, user, make_book):
    book = make_book()
    assert add(client, user, book["id"], 0).status_code == 400


def test_total_includes_unselected_items(client, user, make_book):
    a = make_book(title="A", price="10000")
    b = make_book(title="B", price="25000")
    add(client, user, a["id"], 1)
    cart = add(client, user, b["id"], 2, is_selected=False).json()["data"]

    assert cart["total_items"] == 3
    assert Decimal(cart["total_price"]) == Decimal("60000")


def test_update_item_quantity_and_selection(client, user, make_book):
    book = make_book()
    add(client, user, book["id"], 1)

    res = client.put(
        cart_url(user, f"/items/{book['id']}"),
        json={"quantity": 4, "is_selected": False},
        headers=user["headers"],
    )
    item = res.json()["data"]["items"][0]
    assert item["quantity"] == 4
    assert item["is_selected"] is False


def test_update_item_zero_quantity_removes(client, user, make_book):
    book = make_book()
    add(client, user, book["id"], 1)

    res = client.put(cart_url(user, f"/items/{book['id']}"), json={"quantity": 0}, headers=user["headers"])
    assert res.status_code == 200
    assert res.json()["data"]["items"] == []


def test_update_item_over_stock(client, user, make_book):
    book = make_book(stock=5)
    add(client, user, book["id"], 1)

    res = client.put(cart_url(user, f"/items/{book['id']}"), json={"quantity": 6}, headers=user["headers"])
    assert res.status_code == 400


def test_update_missing_item(client, user, make_book):
    book = make_book()
    client.get(cart_url(user), headers=user["headers"])

    res = client.put(cart_url(user, f"/items/{book['id']}"), json={"quantity": 1}, headers=user["headers"])
    assert res.status_code == 404


def test_remove_item(client, user, make_book):
    a = make_book(title="A")
    b = make_book(title="B")
    add(client, user, a["id"], 1)
    add(client, user, b["id"], 1)

    cart = client.delete(cart_url(user, f"/items/{a['id']}"), headers=user["headers"]).json()["data"]
    assert [i["book_title"] for i in cart["items"]] == ["B"]

    assert client.delete(cart_url(user, f"/items/{a['id']}"), headers=user["headers"]).status_code == 404


def test_clear_cart(client, user, make_book):
    add(client, user, make_book(title="A")["id"], 1)
    add(client, user, make_book(title="B")["id"], 2)

    cart = client.delete(cart_url(user, "/clear"), headers=user["headers"]).json()["data"]
    assert cart["items"] == []
    assert Decimal(cart["total_price"]) == 0


def test_cart_of_another_user_is_forbidden(client, user, other_user):
    assert client.get(cart_url(other_user), headers=user["headers"]).status_code == 403


def test_admin_can_read_any_cart(client, admin, user):
    assert client.get(cart_url(user), headers=admin["headers"]).status_code == 200
