"""Book routes — end-to-end HTTP behaviour over the test database.

Invariants:
    - POST → 201 with hydrated body; PUT/DELETE → 204 with empty body
    - authors omitted or null keeps the set; [] clears it; a list replaces it
    - Unknown ids → 404 on read/update, 500 on delete
    - Non-integer ids and malformed bodies → 400
    - Failed requests leave the store exactly as it was
"""


async def _create_book(client, **body):
    response = await client.post("/books", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def _create_author(client, **body):
    response = await client.post("/authors", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def test_list_books_empty(client):
    response = await client.get("/books")
    assert response.status_code == 200
    assert response.json() == []


async def test_create_book_without_authors(client):
    body = await _create_book(client, title="b1", pages=100)
    assert body["id"] == 1
    assert body["title"] == "b1"
    assert body["pages"] == 100
    assert body["authors"] == []
    assert "created_at" in body and "updated_at" in body


async def test_create_book_linking_existing_authors(client):
    await _create_author(client, name="a1")
    await _create_author(client, name="a2")
    body = await _create_book(client, title="b1", authors=[{"id": 2}, {"id": 1}])
    assert [a["id"] for a in body["authors"]] == [1, 2]


async def test_create_book_with_new_authors(client, count_join_rows):
    body = await _create_book(
        client, title="book1", pages=10,
        authors=[{"name": "author1"}, {"name": "author2"}],
    )
    assert [a["name"] for a in body["authors"]] == ["author1", "author2"]
    assert await count_join_rows(book_id=body["id"]) == 2
    listed = (await client.get("/authors")).json()
    assert [a["books"][0]["title"] for a in listed] == ["book1", "book1"]


async def test_create_book_conflicting_id(client):
    await _create_book(client, title="b1", pages=100)
    response = await client.post("/books", json={"id": 1, "title": "other"})
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "IDENTIFIER_CONFLICT"
    assert (await client.get("/books/1")).json()["title"] == "b1"


async def test_create_book_dangling_author(client):
    response = await client.post(
        "/books", json={"title": "b1", "authors": [{"id": 42}]},
    )
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "DANGLING_REFERENCE"
    assert (await client.get("/books")).json() == []


async def test_get_book(client):
    await _create_book(client, title="b1", pages=100)
    response = await client.get("/books/1")
    assert response.status_code == 200
    assert response.json()["title"] == "b1"


async def test_get_missing_book(client):
    response = await client.get("/books/7")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RECORD_NOT_FOUND"


async def test_get_book_with_non_integer_id(client):
    response = await client.get("/books/abc")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MALFORMED_REQUEST"


async def test_get_book_with_zero_id(client):
    response = await client.get("/books/0")
    assert response.status_code == 400


async def test_create_book_malformed_body(client):
    response = await client.post("/books", json={"title": "b1", "pages": "many"})
    assert response.status_code == 400
    assert (await client.get("/books")).json() == []


async def test_create_book_title_too_long(client):
    response = await client.post("/books", json={"title": "x" * 65})
    assert response.status_code == 400


async def test_update_book_overlays_fields(client):
    await _create_book(client, title="b1", pages=100)
    response = await client.put("/books/1", json={"pages": 150})
    assert response.status_code == 204
    assert response.content == b""
    body = (await client.get("/books/1")).json()
    assert body["title"] == "b1"
    assert body["pages"] == 150


async def test_update_book_empty_values_keep_stored(client):
    await _create_book(client, title="b1", pages=100)
    await client.put("/books/1", json={"title": "", "pages": 0})
    body = (await client.get("/books/1")).json()
    assert body["title"] == "b1"
    assert body["pages"] == 100


async def test_update_book_without_authors_keeps_them(client):
    await _create_author(client, name="a1")
    await _create_book(client, title="b1", authors=[{"id": 1}])
    await client.put("/books/1", json={"title": "b2"})
    body = (await client.get("/books/1")).json()
    assert body["title"] == "b2"
    assert body["authors"] == [{"id": 1, "name": "a1"}]


async def test_update_book_null_authors_keeps_them(client):
    await _create_author(client, name="a1")
    await _create_book(client, title="b1", authors=[{"id": 1}])
    response = await client.put("/books/1", json={"authors": None})
    assert response.status_code == 204
    assert len((await client.get("/books/1")).json()["authors"]) == 1


async def test_update_book_empty_authors_clears(client, count_join_rows):
    await _create_author(client, name="a1")
    await _create_author(client, name="a2")
    await _create_book(client, title="b1", authors=[{"id": 1}, {"id": 2}])
    response = await client.put("/books/1", json={"authors": []})
    assert response.status_code == 204
    assert await count_join_rows(book_id=1) == 0
    assert (await client.get("/books/1")).json()["authors"] == []
    assert (await client.get("/authors/1")).json()["books"] == []


async def test_update_book_replaces_authors(client, count_join_rows):
    for name in ("a1", "a2", "a3"):
        await _create_author(client, name=name)
    await _create_book(client, title="b1", authors=[{"id": 1}, {"id": 2}])
    await client.put("/books/1", json={"authors": [{"id": 2}, {"id": 3}]})
    body = (await client.get("/books/1")).json()
    assert [a["id"] for a in body["authors"]] == [2, 3]
    assert await count_join_rows(author_id=1) == 0


async def test_update_book_dangling_changes_nothing(client):
    await _create_author(client, name="a1")
    await _create_book(client, title="b1", pages=100, authors=[{"id": 1}])
    response = await client.put(
        "/books/1", json={"title": "changed", "authors": [{"id": 1}, {"id": 9}]},
    )
    assert response.status_code == 500
    body = (await client.get("/books/1")).json()
    assert body["title"] == "b1"
    assert [a["id"] for a in body["authors"]] == [1]


async def test_update_missing_book(client):
    response = await client.put("/books/3", json={"title": "x"})
    assert response.status_code == 404


async def test_update_book_malformed_body(client):
    await _create_book(client, title="b1")
    response = await client.put("/books/1", content=b"{not json")
    assert response.status_code == 400


async def test_delete_book_detaches_authors(client, count_join_rows):
    await _create_author(client, name="a1")
    await _create_author(client, name="a2")
    await _create_book(client, title="b1", authors=[{"id": 1}, {"id": 2}])
    assert await count_join_rows(book_id=1) == 2

    response = await client.delete("/books/1")

    assert response.status_code == 204
    assert await count_join_rows(book_id=1) == 0
    assert (await client.get("/books/1")).status_code == 404
    for author_id in (1, 2):
        author = (await client.get(f"/authors/{author_id}")).json()
        assert author["books"] == []


async def test_delete_book_twice(client):
    await _create_book(client, title="b1")
    assert (await client.delete("/books/1")).status_code == 204
    assert (await client.delete("/books/1")).status_code == 500


async def test_delete_missing_book(client):
    response = await client.delete("/books/99")
    assert response.status_code == 500
    body = response.json()
    assert "detail" not in body
    assert body["error"]["code"] == "RECORD_NOT_FOUND"
    assert body["error"]["context"] == {"entity_kind": "book", "entity_id": 99}


async def test_delete_and_get_missing_book_share_envelope(client):
    deleted = (await client.delete("/books/99")).json()["error"]
    fetched = (await client.get("/books/99")).json()["error"]
    assert deleted.keys() == fetched.keys()
    assert deleted["message"] == fetched["message"]


OVERSIZED_ID = "99999999999999999999"


async def test_get_book_with_oversized_id(client):
    response = await client.get(f"/books/{OVERSIZED_ID}")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MALFORMED_REQUEST"


async def test_update_book_with_oversized_id(client):
    response = await client.put(f"/books/{OVERSIZED_ID}", json={"title": "x"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MALFORMED_REQUEST"


async def test_delete_book_with_oversized_id(client):
    for book_id in (OVERSIZED_ID, "9223372036854775808", "2147483648"):
        response = await client.delete(f"/books/{book_id}")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MALFORMED_REQUEST"


async def test_create_book_with_oversized_ids(client):
    response = await client.post(
        "/books", json={"id": int(OVERSIZED_ID), "title": "b1"},
    )
    assert response.status_code == 400
    response = await client.post(
        "/books", json={"title": "b1", "authors": [{"id": int(OVERSIZED_ID)}]},
    )
    assert response.status_code == 400
    assert (await client.get("/books")).json() == []


async def test_delete_book_non_integer_id(client):
    response = await client.delete("/books/abc")
    assert response.status_code == 400


async def test_deleted_book_absent_from_list(client):
    await _create_book(client, title="b1")
    await _create_book(client, title="b2")
    await client.delete("/books/1")
    assert [b["title"] for b in (await client.get("/books")).json()] == ["b2"]


async def test_deleted_book_id_not_reused(client):
    await _create_book(client, title="b1")
    await client.delete("/books/1")
    response = await client.post("/books", json={"id": 1, "title": "again"})
    assert response.status_code == 500
    body = await _create_book(client, title="b2")
    assert body["id"] == 2
