"""
Tests for the HTTP surface: status codes, response shapes and error mapping
"""

import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.errors import StorageBusy, StorageUnavailable


@pytest.fixture
def client(tmp_path):
    # parent directory does not exist yet; the app creates it on startup
    app = create_app(str(tmp_path / "data" / "cart.db"))
    with TestClient(app) as c:
        yield c


def test_empty_cart(client):
    resp = client.get("/cart")
    assert resp.status_code == 200
    assert resp.json() == []


def test_add_list_remove(client):
    resp = client.post("/cart", json={"productId": "p1", "name": "Widget", "price": 5.0})
    assert resp.status_code == 201
    item = resp.json()
    assert item == {"id": 1, "productId": "p1", "name": "Widget", "price": 5.0}

    assert client.get("/cart").json() == [item]

    resp = client.delete(f"/cart/{item['id']}")
    assert resp.status_code == 204
    assert resp.content == b""
    assert client.get("/cart").json() == []


def test_list_is_ordered_by_id(client):
    ids = [client.post("/cart", json={"productId": f"p{i}", "name": "Item", "price": i}).json()["id"] for i in range(3)]
    assert [i["id"] for i in client.get("/cart").json()] == ids


@pytest.mark.parametrize(
    "body",
    [
        {"productId": "p1", "name": "", "price": 5.0},
        {"productId": "p1", "name": "Widget", "price": -1},
        {"productId": "", "name": "Widget", "price": 1},
        {"productId": "p1", "name": "Widget", "price": "cheap"},
        {"name": "Widget", "price": 1},
        {"productId": "p1", "name": "Widget", "price": 10 ** 400},
    ],
)
def test_add_invalid_is_client_error(client, body):
    resp = client.post("/cart", json=body)
    assert resp.status_code == 400
    assert resp.json()["error"] == "INVALID_ARGUMENT"
    assert client.get("/cart").json() == []


def test_remove_missing_is_not_found(client):
    item = client.post("/cart", json={"productId": "p1", "name": "Widget", "price": 1}).json()
    assert client.delete(f"/cart/{item['id']}").status_code == 204

    resp = client.delete(f"/cart/{item['id']}")
    assert resp.status_code == 404
    assert resp.json()["error"] == "NOT_FOUND"


def test_remove_huge_id_is_not_found_and_store_stays_writable(client):
    resp = client.delete("/cart/99999999999999999999999")
    assert resp.status_code == 404
    assert resp.json()["error"] == "NOT_FOUND"

    resp = client.post("/cart", json={"productId": "p1", "name": "Widget", "price": 1})
    assert resp.status_code == 201


def test_blank_product_id_is_accepted(client):
    resp = client.post("/cart", json={"productId": " ", "name": "Widget", "price": 1})
    assert resp.status_code == 201
    assert resp.json()["productId"] == " "


def test_storage_busy_is_service_unavailable(client, monkeypatch):
    def busy(*args, **kwargs):
        raise StorageBusy("database busy after 5 retries")

    monkeypatch.setattr("routers.cart.add_item", busy)
    resp = client.post("/cart", json={"productId": "p1", "name": "Widget", "price": 1})
    assert resp.status_code == 503
    assert resp.json() == {"error": "STORAGE_BUSY", "detail": "database busy after 5 retries"}


def test_storage_unavailable_is_server_error(client):
    client.app.state.db.close()
    assert client.get("/cart").status_code == 500
    resp = client.delete("/cart/1")
    assert resp.status_code == 500
    assert resp.json()["error"] == "STORAGE_UNAVAILABLE"


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["time"].endswith("Z")

    client.app.state.db.close()
    resp = client.get("/health")
    assert resp.status_code == 503
    assert resp.json()["status"] == "unavailable"


def test_state_survives_app_restart(tmp_path):
    path = str(tmp_path / "cart.db")
    with TestClient(create_app(path)) as c:
        item = c.post("/cart", json={"productId": "p1", "name": "Widget", "price": 2.5}).json()
    with TestClient(create_app(path)) as c:
        assert c.get("/cart").json() == [item]
