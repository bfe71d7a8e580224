import httpx

from digital_library.services.openlibrary_service import OpenLibraryClient


def test_index_and_health(client):
    assert client.get("/").get_json()["endpoints"]["books"] == "/books"

    health = client.get("/health").get_json()
    assert health["status"] == "healthy"
    assert health["environment"] == "test"


def test_unknown_route(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.get_json()["message"] == "Route GET /nope not found"


def test_register_login_and_me(client):
    response = client.post("/users/register", json={
        "username": "reader_1",
        "email": "reader@example.com",
        "password": "secret123",
    })
    assert response.status_code == 201
    user = response.get_json()["data"]["user"]
    assert user["role"] == "user"
    assert "password_hash" not in user

    duplicate = client.post("/users/register", json={
        "username": "reader_2",
        "email": "reader@example.com",
        "password": "secret123",
    })
    assert duplicate.status_code == 409
    assert duplicate.get_json()["message"] == "Email already exists"

    bad = client.post("/users/login", json={"email": "reader@example.com", "password": "wrong!!"})
    assert bad.status_code == 401
    assert bad.get_json()["message"] == "Invalid email or password"

    login = client.post("/users/login", json={"email": "reader@example.com", "password": "secret123"})
    token = login.get_json()["data"]["token"]

    me = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.get_json()["data"]["user"]["username"] == "reader_1"


def test_register_validation(client):
    response = client.post("/users/register", json={"username": "x", "email": "a@b.co", "password": "secret123"})
    assert response.status_code == 400
    assert response.get_json()["message"] == "Username must be at least 3 characters"


def test_protected_routes_need_token(client):
    response = client.get("/users/me/borrowed-books")
    assert response.status_code == 401
    assert response.get_json()["message"] == "Access token is required"

    response = client.get("/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.get_json()["message"] == "Invalid or expired token"


def test_book_admin_routes(client, make_user, auth_headers):
    admin, reader = make_user("admin"), make_user()

    payload = {"title": "Dune", "author": "Frank Herbert", "published_year": 1965}
    forbidden = client.post("/books", json=payload, headers=auth_headers(reader))
    assert forbidden.status_code == 403
    assert forbidden.get_json()["message"] == "Admin access required"

    created = client.post("/books", json=payload, headers=auth_headers(admin))
    assert created.status_code == 201
    book = created.get_json()["data"]["book"]
    assert book["available"] == 1

    updated = client.put(f"/books/{book['id']}", json={"title": "Dune Messiah"}, headers=auth_headers(admin))
    assert updated.get_json()["data"]["book"]["title"] == "Dune Messiah"

    assert client.get(f"/books/{book['id']}").status_code == 200
    assert client.delete(f"/books/{book['id']}", headers=auth_headers(admin)).status_code == 200
    assert client.get(f"/books/{book['id']}").status_code == 404


def test_list_and_local_search(client, add_book):
    add_book("Dune", "Frank Herbert")
    add_book("Emma", "Jane Austen")

    listing = client.get("/books?page=1&limit=1").get_json()["data"]
    assert len(listing["data"]) == 1
    assert listing["pagination"]["totalPages"] == 2

    found = client.get("/books/local-search?q=emma").get_json()["data"]
    assert [b["title"] for b in found["data"]] == ["Emma"]

    assert client.get("/books?limit=500").status_code == 400


def test_borrow_and_return_flow(client, make_user, auth_headers, add_book):
    reader, other, admin = make_user(), make_user(), make_user("admin")
    book = add_book()
    headers = auth_headers(reader)

    borrowed = client.post(f"/books/{book.id}/borrow", headers=headers)
    assert borrowed.status_code == 200
    data = borrowed.get_json()["data"]
    assert data["book"]["available"] == 0
    assert data["borrowRecord"]["returned_at"] is None
    assert data["dueDate"] == data["borrowRecord"]["due_date"]

    again = client.post(f"/books/{book.id}/borrow", headers=headers)
    assert again.status_code == 409
    assert again.get_json()["message"] == "You have already borrowed this book"

    taken = client.post(f"/books/{book.id}/borrow", headers=auth_headers(other))
    assert taken.status_code == 409
    assert taken.get_json()["message"] == "Book is not available for borrowing"

    mine = client.get("/users/me/borrowed-books", headers=headers).get_json()["data"]["books"]
    assert [b["id"] for b in mine] == [book.id]

    returned = client.post(f"/books/{book.id}/return", headers=headers)
    assert returned.status_code == 200
    assert returned.get_json()["data"]["book"]["available"] == 1
    assert returned.get_json()["data"]["borrowRecord"]["returned_at"] is not None

    twice = client.post(f"/books/{book.id}/return", headers=headers)
    assert twice.status_code == 409
    assert twice.get_json()["message"] == "You have not borrowed this book"

    history = client.get(f"/books/{book.id}/borrow-history", headers=auth_headers(admin))
    assert len(history.get_json()["data"]) == 1
    assert client.get(f"/books/{book.id}/borrow-history", headers=headers).status_code == 403


def test_borrow_missing_book(client, make_user, auth_headers):
    response = client.post("/books/999/borrow", headers=auth_headers(make_user()))
    assert response.status_code == 404
    assert response.get_json()["message"] == "Book not found"


def test_external_search(app, client):
    def handler(request):
        return httpx.Response(200, json={"numFound": 1, "docs": [{"key": "/works/OL1W", "title": "Dune"}]})

    app.extensions["openlibrary_client"] = OpenLibraryClient(transport=httpx.MockTransport(handler))

    response = client.get("/books/search?q=dune")
    assert response.status_code == 200
    assert response.get_json()["data"]["books"][0]["title"] == "Dune"

    assert client.get("/books/search?q=").status_code == 400


def test_login_rejects_non_string_password(client, make_user):
    user = make_user()
    response = client.post("/users/login", json={"email": user.email, "password": 123456})
    assert response.status_code == 400
    assert response.get_json()["message"] == "Password is required"


def test_register_rejects_non_string_password(client):
    response = client.post("/users/register", json={
        "username": "reader_9",
        "email": "reader9@example.com",
        "password": 12345678,
    })
    assert response.status_code == 400


def test_public_registration_cannot_create_admins(client):
    response = client.post("/users/register", json={
        "username": "sneaky",
        "email": "sneaky@example.com",
        "password": "secret123",
        "role": "admin",
    })
    assert response.status_code == 201
    assert response.get_json()["data"]["user"]["role"] == "user"


def test_huge_page_is_rejected(client):
    response = client.get("/books?page=99999999999999999999")
    assert response.status_code == 400
    assert response.get_json()["message"] == "Page is out of range"


def test_search_query_length_is_capped(app, client):
    def handler(request):
        raise AssertionError("should not be called")

    app.extensions["openlibrary_client"] = OpenLibraryClient(transport=httpx.MockTransport(handler))
    long_query = "x" * 101

    for path in ("/books/search", "/books/local-search"):
        response = client.get(f"{path}?q={long_query}")
        assert response.status_code == 400
        assert response.get_json()["message"] == "Search query must not exceed 100 characters"
