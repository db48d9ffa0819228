"""End-to-end tests for exception journaling and the journal API."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from fastapi import FastAPI
    from httpx import AsyncClient

pytestmark = pytest.mark.integration


async def test_domain_error_is_journaled(client: AsyncClient):
    failed = await client.get(
        "/api/tree/77?verbose=1&verbose=2",
        headers={"User-Agent": "journal-test", "X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
    )
    event_id = failed.json()["event_id"]

    response = await client.get(f"/api/exception-journal/{event_id}")

    assert response.status_code == 200
    entry = response.json()
    assert entry["id"] == event_id
    assert entry["exception_type"] == "tree_service.features.trees.exceptions.TreeNotFoundError"
    assert entry["exception_message"] == "Tree with ID 77 was not found."
    assert entry["http_method"] == "GET"
    assert entry["request_path"] == "/api/tree/77"
    assert entry["query_parameters"] == '{"verbose": ["1", "2"]}'
    assert entry["user_agent"] == "journal-test"
    assert entry["client_ip_address"] == "203.0.113.9"
    assert "TreeNotFoundError" in entry["stack_trace"]


async def test_request_body_is_journaled(client: AsyncClient):
    created = await client.post("/api/tree", json={"tree_name": "Root"})
    tree_id = created.json()["tree_id"]

    failed = await client.post(
        f"/api/tree/{tree_id}/node", json={"parent_id": 4242, "node_name": "Orphan"}
    )
    entry = (await client.get(f"/api/exception-journal/{failed.json()['event_id']}")).json()

    assert entry["http_method"] == "POST"
    assert '"node_name"' in entry["body_parameters"]
    assert "Orphan" in entry["body_parameters"]


async def test_validation_errors_are_not_journaled(client: AsyncClient):
    assert (await client.post("/api/tree", json={"tree_name": ""})).status_code == 422

    response = await client.get("/api/exception-journal")

    assert response.json() == {"items": [], "total": 0}


async def test_unexpected_error_is_masked_and_journaled(app: FastAPI, client: AsyncClient):
    async def explode() -> None:
        msg = "database on fire"
        raise RuntimeError(msg)

    app.add_api_route("/api/explode", explode, methods=["GET"])

    response = await client.get("/api/explode")

    assert response.status_code == 500
    body = response.json()
    assert body["type"] == "internal-error"
    assert body["title"] == "Internal Server Error"
    assert body["detail"] == f"Internal server error ID = {body['event_id']}"
    assert "database on fire" not in response.text

    entry = (await client.get(f"/api/exception-journal/{body['event_id']}")).json()
    assert entry["exception_type"] == "RuntimeError"
    assert entry["exception_message"] == "database on fire"


async def test_list_and_filter_entries(client: AsyncClient):
    await client.get("/api/tree/1")
    await client.get("/api/tree/1/node/5")
    await client.get("/api/tree/2")

    everything = (await client.get("/api/exception-journal")).json()
    nodes_only = (
        await client.get("/api/exception-journal", params={"exception_type": "NodeNotFound"})
    ).json()
    newest = (await client.get("/api/exception-journal", params={"count": 1})).json()

    assert everything["total"] == 3
    assert everything["items"][0]["request_path"] == "/api/tree/2"
    assert [e["request_path"] for e in nodes_only["items"]] == ["/api/tree/1/node/5"]
    assert newest["total"] == 1


async def test_missing_entry_is_404(client: AsyncClient):
    response = await client.get("/api/exception-journal/12345")

    assert response.status_code == 404
    body = response.json()
    assert body["type"] == "not-found"
    assert body["id"] == 12345
    # The lookup failure is itself journaled
    assert body["event_id"] != 12345


async def test_count_is_bounded(client: AsyncClient):
    assert (await client.get("/api/exception-journal", params={"count": 0})).status_code == 422
    assert (await client.get("/api/exception-journal", params={"count": 1001})).status_code == 422
