"""Error hierarchy tests — codes, default statuses and the REST envelope."""

from library_api.core.errors import (
    DanglingReferenceError, ErrorCategory, IdentifierConflictError, LibraryError,
    MalformedRequestError, RecordNotFoundError, StoreFailureError,
)


def test_all_errors_share_base():
    for exc in (
        MalformedRequestError("bad", "id"),
        RecordNotFoundError("book", 1),
        IdentifierConflictError("book", 1),
        DanglingReferenceError("author", [2]),
        StoreFailureError("boom", "commit"),
    ):
        assert isinstance(exc, LibraryError)


def test_default_statuses():
    assert MalformedRequestError("bad", "id").http_status == 400
    assert RecordNotFoundError("book", 1).http_status == 404
    assert IdentifierConflictError("book", 1).http_status == 500
    assert DanglingReferenceError("author", [2]).http_status == 500
    assert StoreFailureError("boom", "commit").http_status == 500


def test_not_found_message_and_context():
    exc = RecordNotFoundError("author", 12)
    assert exc.message == "Author not found (by id: 12)"
    assert exc.context.entity_kind == "author"
    assert exc.context.entity_id == 12
    assert exc.category is ErrorCategory.RESOURCE_NOT_FOUND


def test_dangling_reference_sorts_ids():
    exc = DanglingReferenceError("book", [9, 3])
    assert exc.missing_ids == [3, 9]
    assert "book 3, 9" in exc.message


def test_to_response_envelope():
    body = IdentifierConflictError("book", 1).to_response()["error"]
    assert body["code"] == "IDENTIFIER_CONFLICT"
    assert body["category"] == "conflict"
    assert body["severity"] == "error"
    assert body["context"] == {"entity_kind": "book", "entity_id": 1}
    assert "timestamp" in body
