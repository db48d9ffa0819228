"""End-to-end tests for the tree HTTP API."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from httpx import AsyncClient

pytestmark = pytest.mark.integration


async def _create_tree(client: AsyncClient, name: str = "Company") -> dict:
    response = await client.post("/api/tree", json={"tree_name": name})
    assert response.status_code == 201
    return response.json()


async def _add_node(client: AsyncClient, tree_id: int, parent_id: int, name: str) -> dict:
    response = await client.post(
        f"/api/tree/{tree_id}/node", json={"parent_id": parent_id, "node_name": name}
    )
    assert response.status_code == 201
    return response.json()


class TestTreeLifecycle:
    async def test_create_tree(self, client: AsyncClient):
        tree = await _create_tree(client, "  Company  ")

        assert tree["tree_id"] == 1
        assert tree["total_nodes"] == 1
        root = tree["nodes"][0]
        assert root["name"] == "Company"
        assert root["path"] == f"{root['id']}."
        assert root["level"] == 0
        assert root["is_root"] is True
        assert root["parent_id"] is None
        assert root["children"] == []

    async def test_build_and_read_tree(self, client: AsyncClient):
        tree = await _create_tree(client)
        tree_id = tree["tree_id"]
        root_id = tree["nodes"][0]["id"]
        engineering = await _add_node(client, tree_id, root_id, "Engineering")
        backend = await _add_node(client, tree_id, engineering["id"], "Backend")

        assert engineering["path"] == f"{root_id}.{engineering['id']}."
        assert backend["path"] == f"{root_id}.{engineering['id']}.{backend['id']}."
        assert backend["level"] == 2
        assert "children" not in backend or backend["children"] is None

        response = await client.get(f"/api/tree/{tree_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["total_nodes"] == 3
        assert body["nodes"][0]["children"][0]["children"][0]["name"] == "Backend"

    async def test_list_trees(self, client: AsyncClient):
        first = await _create_tree(client, "First")
        await _add_node(client, first["tree_id"], first["nodes"][0]["id"], "Child")
        await _create_tree(client, "Second")

        response = await client.get("/api/tree")

        assert response.status_code == 200
        assert [(t["root_name"], t["node_count"], t["max_depth"]) for t in response.json()] == [
            ("First", 2, 1),
            ("Second", 1, 0),
        ]

    async def test_rename_node(self, client: AsyncClient):
        tree = await _create_tree(client)
        root = tree["nodes"][0]

        response = await client.put(
            f"/api/tree/{tree['tree_id']}/node/{root['id']}/rename",
            json={"new_name": "Holding"},
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Holding"
        assert response.json()["path"] == root["path"]

        listing = await client.get("/api/tree")
        assert listing.json()[0]["root_name"] == "Holding"

    async def test_delete_leaf(self, client: AsyncClient):
        tree = await _create_tree(client)
        leaf = await _add_node(client, tree["tree_id"], tree["nodes"][0]["id"], "Leaf")

        response = await client.delete(f"/api/tree/{tree['tree_id']}/node/{leaf['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "Node deleted successfully"
        after = await client.get(f"/api/tree/{tree['tree_id']}")
        assert after.json()["total_nodes"] == 1

    async def test_node_children_and_subtree(self, client: AsyncClient):
        tree = await _create_tree(client)
        tree_id = tree["tree_id"]
        root_id = tree["nodes"][0]["id"]
        a = await _add_node(client, tree_id, root_id, "A")
        await _add_node(client, tree_id, root_id, "B")
        await _add_node(client, tree_id, a["id"], "A1")

        node = await client.get(f"/api/tree/{tree_id}/node/{a['id']}")
        children = await client.get(f"/api/tree/{tree_id}/node/{root_id}/children")
        subtree = await client.get(f"/api/tree/{tree_id}/node/{a['id']}/subtree")

        assert node.json()["name"] == "A"
        assert [c["name"] for c in children.json()] == ["A", "B"]
        assert subtree.json()["total_nodes"] == 2
        assert subtree.json()["nodes"][0]["children"][0]["name"] == "A1"


class TestProblemResponses:
    async def test_missing_tree_is_404_with_event_id(self, client: AsyncClient):
        response = await client.get("/api/tree/99")

        assert response.status_code == 404
        body = response.json()
        assert body["type"] == "tree-not-found"
        assert body["title"] == "Not Found"
        assert body["status"] == 404
        assert body["detail"] == "Tree with ID 99 was not found."
        assert body["instance"] == "/api/tree/99"
        assert body["tree_id"] == 99
        assert isinstance(body["event_id"], int)
        assert body["request_id"] == response.headers["x-request-id"]

    async def test_delete_node_with_children_is_409(self, client: AsyncClient):
        tree = await _create_tree(client)
        root_id = tree["nodes"][0]["id"]
        await _add_node(client, tree["tree_id"], root_id, "Child")

        response = await client.delete(f"/api/tree/{tree['tree_id']}/node/{root_id}")

        assert response.status_code == 409
        assert response.json()["type"] == "node-has-children"
        still_there = await client.get(f"/api/tree/{tree['tree_id']}")
        assert still_there.json()["total_nodes"] == 2

    async def test_parent_from_other_tree_is_400(self, client: AsyncClient):
        first = await _create_tree(client, "First")
        second = await _create_tree(client, "Second")

        response = await client.post(
            f"/api/tree/{second['tree_id']}/node",
            json={"parent_id": first["nodes"][0]["id"], "node_name": "Stray"},
        )

        assert response.status_code == 400
        assert response.json()["type"] == "invalid-parent-tree"

    async def test_missing_parent_is_404(self, client: AsyncClient):
        tree = await _create_tree(client)

        response = await client.post(
            f"/api/tree/{tree['tree_id']}/node", json={"parent_id": 999, "node_name": "x"}
        )

        assert response.status_code == 404
        assert response.json()["type"] == "parent-not-found"

    @pytest.mark.parametrize(
        "payload",
        [{}, {"tree_name": ""}, {"tree_name": "   "}, {"tree_name": "x" * 256}],
    )
    async def test_invalid_tree_name_is_422(self, client: AsyncClient, payload: dict):
        response = await client.post("/api/tree", json=payload)

        assert response.status_code == 422
        body = response.json()
        assert body["type"] == "validation-error"
        assert "event_id" not in body

    async def test_non_positive_ids_are_422(self, client: AsyncClient):
        assert (await client.get("/api/tree/0")).status_code == 422
        assert (await client.get("/api/tree/1/node/-3")).status_code == 422
