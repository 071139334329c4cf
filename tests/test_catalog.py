from decimal import Decimal

from bookstore.domain.enums import Role


def create_genre(client, admin, name="Fiction"):
    res = client.post("/api/genres/", json={"name": name}, headers=admin["headers"])
    assert res.status_code == 201, res.text
    return res.json()["data"]


def create_author(client, admin, name="Jane Writer", email="jane@mail.com"):
    body = {"name": name, "email": email, "password": "Secret123"}
    res = client.post("/api/authors/", json=body, headers=admin["headers"])
    assert res.status_code == 201, res.text
    return res.json()["data"]


def test_create_book_with_genre_authors_images(client, admin, make_book):
    genre = create_genre(client, admin)
    author = create_author(client, admin)

    book = make_book(
        genre_id=genre["id"],
        author_ids=[author["id"]],
        images=["https://img.mail.com/a.jpg", "https://img.mail.com/b.jpg"],
        description="A handbook",
    )

    assert book["genre"] == {"id": genre["id"], "name": "Fiction"}
    assert book["authors"] == [{"id": author["id"], "name": "Jane Writer"}]
    assert book["images"] == ["https://img.mail.com/a.jpg", "https://img.mail.com/b.jpg"]
    assert Decimal(book["price"]) == Decimal("100000")
    assert book["sold_number"] == 0


def test_create_book_unknown_references(client, admin):
    body = {"title": "Ghost", "price": "10", "stock_quantity": 1, "genre_id": 99, "author_ids": [41, 42]}
    res = client.post("/api/books/", json=body, headers=admin["headers"])

    assert res.status_code == 400
    errors = " ".join(res.json()["errors"])
    assert "99" in errors
    assert "41" in errors and "42" in errors


def test_create_book_requires_admin(client, user):
    body = {"title": "Nope", "price": "10", "stock_quantity": 1}
    assert client.post("/api/books/", json=body, headers=user["headers"]).status_code == 403
    assert client.post("/api/books/", json=body).status_code == 401


def test_create_book_rejects_negative_stock(client, admin):
    body = {"title": "Bad", "price": "10", "stock_quantity": -1}
    assert client.post("/api/books/", json=body, headers=admin["headers"]).status_code == 400


def test_get_book_not_found(client):
    res = client.get("/api/books/999")
    assert res.status_code == 404
    assert res.json()["success"] is False


def test_list_books_filters(client, admin, make_book):
    fiction = create_genre(client, admin, "Fiction")
    science = create_genre(client, admin, "Science")
    author = create_author(client, admin, name="Carl Sagan", email="carl@mail.com")

    make_book(title="Cosmos", genre_id=science["id"], author_ids=[author["id"]])
    make_book(title="Dune", genre_id=fiction["id"])
    make_book(title="Pale Blue Dot", genre_id=science["id"])

    def titles(**params):
        res = client.get("/api/books/", params=params)
        assert res.status_code == 200
        return [b["title"] for b in res.json()["data"]]

    assert titles(title="Dune") == ["Dune"]
    assert titles(genre="Science") == ["Cosmos", "Pale Blue Dot"]
    assert titles(author="Sagan") == ["Cosmos"]
    # search spans title, author name and genre name
    assert titles(search="Sagan") == ["Cosmos"]
    assert titles(search="Fiction") == ["Dune"]


def test_list_books_sorting(client, make_book):
    make_book(title="B", price="30")
    make_book(title="A", price="20")
    make_book(title="C", price="10")

    by_price = client.get("/api/books/", params={"sort_by": "price", "sort_order": "desc"}).json()["data"]
    assert [b["title"] for b in by_price] == ["B", "A", "C"]

    # unknown field falls back to title
    fallback = client.get("/api/books/", params={"sort_by": "stock_hack"}).json()["data"]
    assert [b["title"] for b in fallback] == ["A", "B", "C"]


def test_paginated_books(client, make_book):
    for i in range(5):
        make_book(title=f"Book {i}")

    body = client.get("/api/books/pagination/list", params={"page": 2, "limit": 2}).json()
    assert [b["title"] for b in body["data"]] == ["Book 2", "Book 3"]
    assert body["pagination"] == {
        "current_page": 2,
        "total_pages": 3,
        "total_items": 5,
        "has_next": True,
        "has_prev": True,
        "page_size": 2,
    }


def test_pagination_limit_out_of_range(client):
    assert client.get("/api/books/pagination/list", params={"limit": 500}).status_code == 400
    assert client.get("/api/books/pagination/list", params={"page": 0}).status_code == 400


def test_update_book_replaces_links_and_images(client, admin, make_book):
    first = create_author(client, admin, name="First", email="first@mail.com")
    second = create_author(client, admin, name="Second", email="second@mail.com")
    book = make_book(author_ids=[first["id"]], images=["https://img.mail.com/old.jpg"])

    body = {"author_ids": [second["id"], first["id"]], "images": ["https://img.mail.com/new.jpg"], "price": "120000"}
    res = client.put(f"/api/books/{book['id']}", json=body, headers=admin["headers"])
    assert res.status_code == 200

    data = res.json()["data"]
    assert sorted(a["name"] for a in data["authors"]) == ["First", "Second"]
    assert data["images"] == ["https://img.mail.com/new.jpg"]
    assert Decimal(data["price"]) == Decimal("120000")


def test_update_book_keeps_untouched_fields(client, admin, make_book):
    book = make_book(description="Keep me")
    res = client.put(f"/api/books/{book['id']}", json={"title": "Renamed"}, headers=admin["headers"])
    data = res.json()["data"]
    assert data["title"] == "Renamed"
    assert data["description"] == "Keep me"
    assert data["stock_quantity"] == 50


def test_delete_book(client, admin, make_book):
    book = make_book()
    assert client.delete(f"/api/books/{book['id']}", headers=admin["headers"]).status_code == 200
    assert client.get(f"/api/books/{book['id']}").status_code == 404


def test_delete_ordered_book_conflicts(client, admin, user, make_book, place_order):
    book = make_book()
    assert place_order(user, [(book["id"], 1)]).status_code == 201

    res = client.delete(f"/api/books/{book['id']}", headers=admin["headers"])
    assert res.status_code == 409
    assert client.get(f"/api/books/{book['id']}").status_code == 200


def test_genre_crud_and_duplicate(client, admin):
    genre = create_genre(client, admin, "Poetry")
    assert client.post("/api/genres/", json={"name": "Poetry"}, headers=admin["headers"]).status_code == 409

    res = client.put(f"/api/genres/{genre['id']}", json={"name": "Verse"}, headers=admin["headers"])
    assert res.json()["data"]["name"] == "Verse"

    assert [g["name"] for g in client.get("/api/genres/", params={"name": "Ver"}).json()["data"]] == ["Verse"]
    assert client.delete(f"/api/genres/{genre['id']}", headers=admin["headers"]).status_code == 200
    assert client.get(f"/api/genres/{genre['id']}").status_code == 404


def test_delete_genre_in_use_conflicts(client, admin, make_book):
    genre = create_genre(client, admin)
    make_book(genre_id=genre["id"])
    assert client.delete(f"/api/genres/{genre['id']}", headers=admin["headers"]).status_code == 409


def test_author_create_and_duplicate_email(client, admin):
    author = create_author(client, admin)
    assert author["email"] == "jane@mail.com"
    assert author["books"] == []

    body = {"name": "Copy", "email": "jane@mail.com", "password": "Secret123"}
    assert client.post("/api/authors/", json=body, headers=admin["headers"]).status_code == 409


def test_created_author_can_log_in(client, admin):
    create_author(client, admin)
    res = client.post("/api/auth/login", json={"email": "jane@mail.com", "password": "Secret123"})
    assert res.status_code == 200
    assert res.json()["data"]["profile"]["role"] == "author"


def test_author_lists_books(client, admin, make_book):
    author = create_author(client, admin)
    make_book(title="Her Book", author_ids=[author["id"]])

    data = client.get(f"/api/authors/{author['id']}").json()["data"]
    assert [b["title"] for b in data["books"]] == ["Her Book"]


def test_author_search(client, admin):
    create_author(client, admin, name="Ann", email="ann@mail.com")
    create_author(client, admin, name="Ben", email="ben@mail.com")

    found = client.get("/api/authors/", params={"search": "ben@"}).json()["data"]
    assert [a["name"] for a in found] == ["Ben"]


def test_author_updates_own_name_only(client, make_account):
    me = make_account(Role.AUTHOR, name="Me")
    someone = make_account(Role.AUTHOR, name="Someone")

    res = client.put(f"/api/authors/{me['id']}", json={"name": "New Me"}, headers=me["headers"])
    assert res.status_code == 200
    assert res.json()["data"]["name"] == "New Me"

    res = client.put(f"/api/authors/{someone['id']}", json={"name": "Hacked"}, headers=me["headers"])
    assert res.status_code == 403


def test_delete_author_linked_to_book_conflicts(client, admin, make_book):
    author = create_author(client, admin)
    make_book(author_ids=[author["id"]])
    assert client.delete(f"/api/authors/{author['id']}", headers=admin["headers"]).status_code == 409


def test_delete_author_removes_account(client, admin):
    author = create_author(client, admin)
    assert client.delete(f"/api/authors/{author['id']}", headers=admin["headers"]).status_code == 200
    assert client.get(f"/api/authors/{author['id']}").status_code == 404

    res = client.post("/api/auth/login", json={"email": "jane@mail.com", "password": "Secret123"})
    assert res.status_code == 401
