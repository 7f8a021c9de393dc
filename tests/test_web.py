from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import seed
from pharmacy.adapters.inbound.web.fastapi_app import create_app
from pharmacy.bootstrap import build_usecases
from pharmacy.config import Settings
from pharmacy.core.domain.model.errors import StorageFailure


@pytest.fixture
def ids(memory_uow):
    return seed(memory_uow)


@pytest.fixture
def client(memory_uow, publisher):
    app = create_app(build_usecases(Settings(storage="memory"), uow=memory_uow, events=publisher))
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_place_order_returns_receipt(client, ids, publisher):
    resp = client.post(
        "/orders",
        json={"client_id": ids.client_id, "lines": [{"medicine_id": ids.medicine_a, "quantity": 5}]},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert resp.headers["Location"] == f"/orders/{body['order_id']}"
    assert body["total"] == "10.00"
    assert body["currency"] == "EUR"
    assert body["lines"] == [
        {"medicine_id": ids.medicine_a, "unit_price": "2.00", "quantity": 5, "subtotal": "10.00"}
    ]
    assert len(publisher.events) == 1

    medicines = {m["medicine_id"]: m for m in client.get("/medicines").json()}
    assert medicines[ids.medicine_a]["stock"] == 5


def test_insufficient_stock_is_a_conflict(client, ids):
    resp = client.post(
        "/orders",
        json={"client_id": ids.client_id, "lines": [{"medicine_id": ids.medicine_b, "quantity": 100}]},
    )

    assert resp.status_code == 409
    assert resp.json()["kind"] == "integrity_conflict"
    assert resp.json()["type"] == "OrderCreationFailed"
    assert client.get("/orders").json() == []


def test_unknown_medicine_is_not_found(client, ids):
    resp = client.post(
        "/orders",
        json={"client_id": ids.client_id, "lines": [{"medicine_id": 999, "quantity": 1}]},
    )

    assert resp.status_code == 404


@pytest.mark.parametrize(
    "payload",
    [
        {"client_id": 1, "lines": []},
        {"client_id": 0, "lines": [{"medicine_id": 1, "quantity": 1}]},
        {"client_id": 1, "lines": [{"medicine_id": 1, "quantity": 0}]},
        {"lines": [{"medicine_id": 1, "quantity": 1}]},
    ],
)
def test_malformed_order_is_rejected(client, payload):
    resp = client.post("/orders", json=payload)

    assert resp.status_code == 400
    assert resp.json()["kind"] == "validation"


def test_get_list_and_delete_order(client, ids):
    created = client.post(
        "/orders",
        json={
            "client_id": ids.client_id,
            "lines": [
                {"medicine_id": ids.medicine_a, "quantity": 1},
                {"medicine_id": ids.medicine_b, "quantity": 2},
            ],
        },
    ).json()
    order_id = created["order_id"]

    details = client.get(f"/orders/{order_id}").json()
    assert details["total"] == "5.00"
    assert len(details["lines"]) == 2
    assert _by_medicine(details["lines"]) == _by_medicine(created["lines"])

    listed = client.get("/orders", params={"client_id": ids.client_id}).json()
    assert [o["order_id"] for o in listed] == [order_id]

    (summary,) = client.get("/orders/summaries").json()
    assert summary["total_items_count"] == 3
    assert summary["client_last_name"] == "Petraitytė"

    assert client.delete(f"/orders/{order_id}").status_code == 204
    assert client.get(f"/orders/{order_id}").status_code == 404


def test_clients_listing(client, ids):
    (c,) = client.get("/clients").json()

    assert c["client_id"] == ids.client_id
    assert c["city"] == "Vilnius"


def test_storage_outage_maps_to_503(publisher):
    class DownUnitOfWork:
        def begin(self):
            raise StorageFailure("database unreachable")

    app = create_app(build_usecases(Settings(), uow=DownUnitOfWork(), events=publisher))
    client = TestClient(app)

    assert client.get("/medicines").status_code == 503
    resp = client.post("/orders", json={"client_id": 1, "lines": [{"medicine_id": 1, "quantity": 1}]})
    assert resp.status_code == 503
    assert resp.json()["kind"] == "storage_failure"


def _by_medicine(lines):
    return sorted(lines, key=lambda ln: ln["medicine_id"])
