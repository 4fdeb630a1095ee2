from uuid import UUID

from src.shared.http.responses import ResponseBuilder


def test_success_envelope_encodes_data():
    body = ResponseBuilder.success({"id": UUID(int=1)}, "done")

    assert body["success"] is True
    assert body["message"] == "done"
    assert body["data"] == {"id": "00000000-0000-0000-0000-000000000001"}
    assert body["timestamp"].endswith("Z")


def test_paginated_has_more():
    body = ResponseBuilder.paginated([1, 2], total=5, limit=2, offset=2)

    assert body["data"] == [1, 2]
    assert body["pagination"] == {"total": 5, "limit": 2, "offset": 2, "hasMore": True}
    assert ResponseBuilder.paginated([5], total=5, limit=2, offset=4)["pagination"]["hasMore"] is False
