"""Tests for the REST API."""

import pytest
from fastapi.testclient import TestClient

from sourcescan.registry.local_registry import SourceScanRegistry
from web.backend.app.main import app
from web.backend.app.routers.registry import get_registry

OWNER = {"X-Caller-Id": "alice.near"}
BOB = {"X-Caller-Id": "bob.near"}

CONTRACT = {
    "cid": "cid1",
    "code_hash": "hash1",
    "lang": "rust",
    "entry_point": "src/lib.rs",
    "builder_image": "builder:1",
    "github": {"owner": "near", "repo": "app", "sha": "abc123"},
}


@pytest.fixture
def client():
    reg = SourceScanRegistry()
    app.dependency_overrides[get_registry] = lambda: reg
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_init_and_owner(client):
    assert client.get("/api/registry/owner").status_code == 409
    assert client.post("/api/registry/init").status_code == 401

    resp = client.post("/api/registry/init", headers=OWNER)
    assert resp.status_code == 200
    assert client.post("/api/registry/init", headers=BOB).status_code == 409

    assert client.put("/api/registry/owner", json={"owner_id": "bob.near"}, headers=BOB).status_code == 403
    assert client.put("/api/registry/owner", json={"owner_id": "bob.near"}, headers=OWNER).status_code == 200
    assert client.get("/api/registry/owner").json() == {"owner_id": "bob.near"}


def test_contract_lifecycle(client):
    client.post("/api/registry/init", headers=OWNER)

    assert client.put("/api/registry/contracts/app.testnet", json=CONTRACT, headers=BOB).status_code == 403
    resp = client.put("/api/registry/contracts/app.testnet", json=CONTRACT, headers=OWNER)
    assert resp.status_code == 200
    assert resp.json()["github"]["repo"] == "app"

    got = client.get("/api/registry/contracts/app.testnet").json()
    assert got["account_id"] == "app.testnet"
    assert got["code_hash"] == "hash1"

    assert client.delete("/api/registry/contracts/app.testnet", headers=OWNER).status_code == 200
    assert client.get("/api/registry/contracts/app.testnet").status_code == 404
    assert client.delete("/api/registry/contracts/app.testnet", headers=OWNER).status_code == 200


def test_list_and_search(client):
    client.post("/api/registry/init", headers=OWNER)
    for name in ("account1.testnet", "account2.testnet", "account3.testnet"):
        client.put(f"/api/registry/contracts/{name}", json=CONTRACT, headers=OWNER)

    page = client.get("/api/registry/contracts", params={"from_index": 0, "limit": 2}).json()
    assert len(page["entries"]) == 2
    assert page["pages"] == 2

    found = client.get("/api/registry/contracts/search", params={"key": "account1"}).json()
    assert [e["account_id"] for e in found["entries"]] == ["account1.testnet"]
    assert found["pages"] == 1

    assert client.get("/api/registry/contracts", params={"limit": 0}).status_code == 422


def test_votes_and_comments(client):
    client.post("/api/registry/init", headers=OWNER)
    client.put("/api/registry/contracts/app.testnet", json=CONTRACT, headers=OWNER)

    client.post("/api/registry/contracts/app.testnet/votes", json={"kind": "upvote"}, headers=BOB)
    vote = client.post("/api/registry/contracts/app.testnet/votes", json={"kind": "downvote"}, headers=BOB)
    assert vote.status_code == 200
    assert isinstance(vote.json()["timestamp"], str)
    assert client.post(
        "/api/registry/contracts/app.testnet/votes", json={"kind": "like"}, headers=BOB
    ).status_code == 422

    record = client.get("/api/registry/contracts/app.testnet").json()
    assert [v["kind"] for v in record["votes"]] == ["downvote"]
    assert record["score"] == -1

    comment = client.post(
        "/api/registry/contracts/app.testnet/comments", json={"description": "LGTM"}, headers=BOB
    ).json()
    assert comment["id"] == 0
    reply = client.post(
        "/api/registry/comments/0/replies", json={"description": "+1"}, headers=OWNER
    ).json()
    assert reply["id"] == 1
    assert client.post("/api/registry/comments/0/likes", headers=OWNER).status_code == 200

    stored = client.get("/api/registry/comments/0").json()
    assert stored["replies"] == [1]
    assert [l["author_id"] for l in stored["likes"]] == ["alice.near"]

    comments = client.get("/api/registry/contracts/app.testnet/comments").json()
    assert [c["description"] for c in comments] == ["LGTM"]

    assert client.get("/api/registry/comments/9").status_code == 404
    assert client.post(
        "/api/registry/contracts/nobody.testnet/comments", json={"description": "?"}, headers=BOB
    ).status_code == 404


def test_reads_need_no_caller(client):
    client.post("/api/registry/init", headers=OWNER)
    client.put("/api/registry/contracts/app.testnet", json=CONTRACT, headers=OWNER)

    assert client.get("/api/registry/owner").status_code == 200
    assert client.get("/api/registry/contracts").status_code == 200
    assert client.get("/api/registry/contracts/search", params={"key": "app"}).status_code == 200
    assert client.get("/api/registry/contracts/app.testnet").status_code == 200
    assert client.get("/api/registry/contracts/app.testnet/comments").json() == []
    assert client.post("/api/registry/comments/0/likes").status_code == 401
