def review(client, owner, book_id, rating=5, comment="Great"):
    body = {"user_id": owner["id"], "book_id": book_id, "rating": rating, "comment": comment}
    return client.post("/api/reviews/", json=body, headers=owner["headers"])


def test_create_review(client, user, make_book):
    book = make_book()
    res = review(client, user, book["id"], rating=4)
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["rating"] == 4
    assert data["user_name"] == "Alice"
    assert data["book_title"] == "Clean Code"


def test_duplicate_review_conflicts(client, user, make_book):
    book = make_book()
    assert review(client, user, book["id"]).status_code == 201
    assert review(client, user, book["id"]).status_code == 409


def test_rating_out_of_range(client, user, make_book):
    book = make_book()
    assert review(client, user, book["id"], rating=0).status_code == 400
    assert review(client, user, book["id"], rating=6).status_code == 400


def test_review_for_missing_book(client, user):
    assert review(client, user, 999).status_code == 404


def test_review_on_behalf_of_someone_else(client, user, other_user, make_book):
    book = make_book()
    body = {"user_id": other_user["id"], "book_id": book["id"], "rating": 1}
    assert client.post("/api/reviews/", json=body, headers=user["headers"]).status_code == 403


def test_update_review_stamps_updated_at(client, user, make_book):
    book = make_book()
    created = review(client, user, book["id"], rating=2).json()["data"]

    res = client.put(f"/api/reviews/{created['id']}", json={"rating": 5, "comment": "Changed my mind"}, headers=user["headers"])
    data = res.json()["data"]
    assert data["rating"] == 5
    assert data["comment"] == "Changed my mind"
    assert data["updated_at"] >= created["updated_at"]


def test_update_review_invalid_rating(client, user, make_book):
    book = make_book()
    created = review(client, user, book["id"]).json()["data"]
    res = client.put(f"/api/reviews/{created['id']}", json={"rating": 9}, headers=user["headers"])
    assert res.status_code == 400


def test_delete_review_by_other_user_forbidden(client, user, other_user, make_book):
    book = make_book()
    created = review(client, user, book["id"]).json()["data"]

    assert client.delete(f"/api/reviews/{created['id']}", headers=other_user["headers"]).status_code == 403
    assert client.delete(f"/api/reviews/{created['id']}", headers=user["headers"]).status_code == 200
    assert client.get(f"/api/reviews/{created['id']}").status_code == 404


def test_rating_summary(client, make_account, make_book):
    book = make_book()
    for rating in (5, 4, 4):
        review(client, make_account(), book["id"], rating=rating)

    summary = client.get(f"/api/reviews/book/{book['id']}/summary").json()["data"]
    assert summary["total_reviews"] == 3
    assert summary["average_rating"] == 4.3
    assert summary["rating_distribution"] == {"1": 0, "2": 0, "3": 0, "4": 2, "5": 1}


def test_rating_summary_without_reviews(client, make_book):
    book = make_book()
    summary = client.get(f"/api/reviews/book/{book['id']}/summary").json()["data"]
    assert summary["average_rating"] == 0
    assert summary["total_reviews"] == 0


def test_book_and_user_reviews(client, user, other_user, make_book):
    a = make_book(title="A")
    b = make_book(title="B")
    review(client, user, a["id"])
    review(client, user, b["id"])
    review(client, other_user, a["id"], rating=3)

    assert len(client.get(f"/api/reviews/book/{a['id']}").json()["data"]) == 2
    assert len(client.get(f"/api/reviews/user/{user['id']}").json()["data"]) == 2

    low = client.get("/api/reviews/", params={"rating": 3}).json()["data"]
    assert [r["user_id"] for r in low] == [other_user["id"]]


def add_wish(client, owner, book_id):
    return client.post("/api/wishlists/", json={"user_id": owner["id"], "book_id": book_id}, headers=owner["headers"])


def test_wishlist_add_and_duplicate(client, user, make_book):
    book = make_book()
    res = add_wish(client, user, book["id"])
    assert res.status_code == 201
    assert res.json()["data"]["book"]["title"] == "Clean Code"
    assert add_wish(client, user, book["id"]).status_code == 409


def test_wishlist_missing_book(client, user):
    assert add_wish(client, user, 999).status_code == 404


def test_wishlist_check_and_remove_by_book(client, user, make_book):
    book = make_book()
    entry = add_wish(client, user, book["id"]).json()["data"]
    params = {"user_id": user["id"], "book_id": book["id"]}

    check = client.get("/api/wishlists/check/in-wishlist", params=params, headers=user["headers"]).json()["data"]
    assert check == {"in_wishlist": True, "wishlist_id": entry["id"]}

    assert client.delete("/api/wishlists/", params=params, headers=user["headers"]).status_code == 200

    check = client.get("/api/wishlists/check/in-wishlist", params=params, headers=user["headers"]).json()["data"]
    assert check == {"in_wishlist": False, "wishlist_id": None}
    assert client.delete("/api/wishlists/", params=params, headers=user["headers"]).status_code == 404


def test_wishlist_remove_by_id(client, user, other_user, make_book):
    book = make_book()
    entry = add_wish(client, user, book["id"]).json()["data"]

    assert client.delete(f"/api/wishlists/{entry['id']}", headers=other_user["headers"]).status_code == 403
    assert client.delete(f"/api/wishlists/{entry['id']}", headers=user["headers"]).status_code == 200
    assert client.get(f"/api/wishlists/{entry['id']}", headers=user["headers"]).status_code == 404


def test_user_wishlist(client, user, make_book):
    add_wish(client, user, make_book(title="A")["id"])
    add_wish(client, user, make_book(title="B")["id"])

    entries = client.get(f"/api/wishlists/user/{user['id']}", headers=user["headers"]).json()["data"]
    assert sorted(e["book"]["title"] for e in entries) == ["A", "B"]


def test_deleting_book_removes_wishlist_and_reviews(client, admin, user, make_book):
    book = make_book()
    add_wish(client, user, book["id"])
    review(client, user, book["id"])

    assert client.delete(f"/api/books/{book['id']}", headers=admin["headers"]).status_code == 200
    assert client.get(f"/api/wishlists/user/{user['id']}", headers=user["headers"]).json()["data"] == []
    assert client.get(f"/api/reviews/user/{user['id']}").json()["data"] == []
