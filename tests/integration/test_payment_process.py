from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from restbucks.api.main import app
from restbucks.client.order_process import OrderProcess


def _process(client: TestClient) -> OrderProcess:
    return OrderProcess(client, poll_interval=0.05, poll_timeout=15.0)


def test_process_existing_order() -> None:
    with TestClient(app) as client:
        response = _process(client).process_existing_order()

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "Delivered"
    assert set(body["_links"]) == {"self", "curies"}


def test_process_new_order() -> None:
    with TestClient(app) as client:
        response = _process(client).process_new_order()

    assert response.status_code == 200
    assert response.json()["status"] == "Delivered"


def test_cancel_order_before_payment() -> None:
    with TestClient(app) as client:
        response = _process(client).cancel_order_before_payment()

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_poll_sees_receipt_only_once_order_is_ready() -> None:
    with TestClient(app) as client:
        process = _process(client)
        root = process.access_root_resource()
        order = process.create_new_order(root)
        payment = process.trigger_payment(order)
        ready = process.poll_until_order_has_receipt_link(payment)

        body = ready.json()
        assert body["status"] == "Ready"
        assert set(body["_links"]) == {"self", "restbucks:receipt", "curies"}

        receipt = process.take_receipt(ready)
        assert receipt.json()["amount"]["amountCents"] == body["total"]["amountCents"]

        # The receipt is gone once the drinks have been taken.
        again = client.get(body["_links"]["restbucks:receipt"]["href"])
        assert again.status_code == 404
