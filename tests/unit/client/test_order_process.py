from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from restbucks.client.order_process import ContractViolationError, OrderProcess

BASE = "http://shop"
ORDER = f"{BASE}/orders/1"


class FakeRestbucks:
    """In-memory server for a single order, scripted through its states."""

    def __init__(
        self,
        polls_until_ready: int = 3,
        receipt_early: bool = False,
        delete_after_payment: int = 405,
        unchanged_status: int = 304,
        unchanged_body: bytes = b"",
        links_after_payment: bool = False,
    ) -> None:
        self.polls_until_ready = polls_until_ready
        self.receipt_early = receipt_early
        self.delete_after_payment = delete_after_payment
        self.unchanged_status = unchanged_status
        self.unchanged_body = unchanged_body
        self.links_after_payment = links_after_payment
        self.status: str | None = None
        self.polls = 0
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = (request.method, request.url.path)

        if route == ("GET", "/"):
            return self._hal(self._root(), media_type="application/prs.hal-forms+json")
        if route == ("GET", "/drinks/options"):
            return httpx.Response(200, json=[{"value": f"{BASE}/drinks/1", "prompt": "Latte"}])
        if route == ("GET", "/orders"):
            return self._hal(self._orders())
        if route == ("POST", "/orders"):
            body = json.loads(request.content)
            assert body == {"drinks": [f"{BASE}/drinks/1"], "location": "To go"}
            self.status = "Payment expected"
            return httpx.Response(201, headers={"Location": ORDER}, json=self._order())
        if route == ("GET", "/orders/1"):
            return self._get_order(request)
        if route == ("DELETE", "/orders/1"):
            if self.status == "Payment expected":
                self.status = None
                return httpx.Response(204)
            return httpx.Response(self.delete_after_payment)
        if route == ("PUT", "/orders/1/payment"):
            self.status = "Paid"
            return self._hal(
                {"_links": {"self": {"href": f"{ORDER}/payment"}, "restbucks:order": {"href": ORDER}}},
                status_code=201,
            )
        if route == ("GET", "/orders/1/receipt"):
            return self._hal({"_links": {"restbucks:order": {"href": ORDER}}})
        if route == ("DELETE", "/orders/1/receipt"):
            self.status = "Delivered"
            return self._hal({"_links": {"restbucks:order": {"href": ORDER}}})
        return httpx.Response(404)

    def _get_order(self, request: httpx.Request) -> httpx.Response:
        if self.status is None:
            return httpx.Response(404)
        if self.status in ("Paid", "Ready"):
            self.polls += 1
            if self.polls >= self.polls_until_ready:
                self.status = "Ready"
        etag = f'"{self.status}"'
        if request.headers.get("If-None-Match") == etag:
            return httpx.Response(self.unchanged_status, content=self.unchanged_body, headers={"ETag": etag})
        return self._hal(self._order(), headers={"ETag": etag})

    def _root(self) -> dict:
        return {
            "_links": {"self": {"href": f"{BASE}/"}, "restbucks:orders": {"href": f"{BASE}/orders"}},
            "_templates": {
                "default": {
                    "method": "post",
                    "properties": [
                        {"name": "drinks", "options": {"link": {"href": f"{BASE}/drinks/options"}}},
                        {"name": "location", "options": {"inline": ["To go", "In store"]}},
                    ],
                }
            },
        }

    def _orders(self) -> dict:
        self.status = self.status or "Payment expected"
        return {
            "_embedded": {
                "restbucks:orders": [
                    {"status": "Delivered", "_links": {"self": {"href": f"{BASE}/orders/0"}}},
                    {"status": "Payment expected", "_links": {"self": {"href": ORDER}}},
                ]
            },
            "_links": {"self": {"href": f"{BASE}/orders"}},
        }

    def _order(self) -> dict:
        links: dict = {"self": {"href": ORDER}, "curies": [{"href": f"{BASE}/docs/{{rel}}"}]}
        if self.status == "Payment expected" or (self.status == "Paid" and self.links_after_payment):
            for rel in ("restbucks:cancel", "restbucks:update"):
                links[rel] = {"href": ORDER}
            links["restbucks:payment"] = {"href": f"{ORDER}/payment"}
        if self.status == "Ready" or self.receipt_early:
            links["restbucks:receipt"] = {"href": f"{ORDER}/receipt"}
        return {"status": self.status, "_links": links}

    def _hal(
        self,
        document: dict,
        status_code: int = 200,
        media_type: str = "application/hal+json",
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return httpx.Response(
            status_code,
            content=json.dumps(document).encode("utf-8"),
            headers={"Content-Type": media_type, **(headers or {})},
        )


def _process(server: FakeRestbucks, **kwargs) -> tuple[OrderProcess, list[float]]:
    sleeps: list[float] = []
    client = httpx.Client(transport=httpx.MockTransport(server.handle), base_url=BASE)
    return OrderProcess(client, sleep=sleeps.append, **kwargs), sleeps


def test_new_order_is_processed_to_delivery() -> None:
    server = FakeRestbucks(polls_until_ready=3)
    process, sleeps = _process(server, poll_interval=0.5)

    response = process.process_new_order()

    assert response.json()["status"] == "Delivered"
    assert sleeps == [0.5, 0.5]
    polls = [r for r in server.requests if r.method == "GET" and r.url.path == "/orders/1"]
    # Creation lookup, three polls and the final verification.
    assert len(polls) == 5
    assert "If-None-Match" not in polls[1].headers
    assert polls[2].headers["If-None-Match"] == '"Paid"'


def test_existing_order_is_picked_by_status() -> None:
    server = FakeRestbucks(polls_until_ready=1)
    process, _ = _process(server)

    response = process.process_existing_order()

    assert response.json()["status"] == "Delivered"
    assert not any(r.url.path == "/orders/0" for r in server.requests)


def test_cancel_before_payment() -> None:
    server = FakeRestbucks()
    process, _ = _process(server)

    response = process.cancel_order_before_payment()

    assert response.status_code == 404
    assert [r.method for r in server.requests if r.url.path == "/orders/1"] == ["GET", "DELETE", "GET"]


def test_receipt_before_payment_violates_contract() -> None:
    process, _ = _process(FakeRestbucks(receipt_early=True))

    with pytest.raises(ContractViolationError, match="restbucks:receipt"):
        process.process_new_order()


def test_paid_order_must_refuse_deletion() -> None:
    process, _ = _process(FakeRestbucks(delete_after_payment=204))

    with pytest.raises(ContractViolationError, match="expected 405"):
        process.process_new_order()


def test_polling_gives_up_after_timeout() -> None:
    process, sleeps = _process(FakeRestbucks(polls_until_ready=10_000), poll_timeout=0.0)

    with pytest.raises(ContractViolationError, match="no receipt"):
        process.process_new_order()
    assert sleeps == []


def test_unchanged_order_may_answer_no_content() -> None:
    server = FakeRestbucks(polls_until_ready=3, unchanged_status=204)
    process, sleeps = _process(server, poll_interval=0.5)

    response = process.process_new_order()

    assert response.json()["status"] == "Delivered"
    assert sleeps == [0.5, 0.5]


@pytest.mark.parametrize("unchanged_status", [204, 304])
def test_unchanged_order_with_body_violates_contract(unchanged_status: int) -> None:
    server = FakeRestbucks(unchanged_status=unchanged_status, unchanged_body=b"x")
    process, _ = _process(server)

    with pytest.raises(ContractViolationError, match=f"{unchanged_status} response .* has a body"):
        process.process_new_order()


def test_paid_order_must_not_offer_cancel_or_update() -> None:
    process, _ = _process(FakeRestbucks(links_after_payment=True))

    with pytest.raises(ContractViolationError, match="restbucks:cancel"):
        process.process_new_order()


def test_non_json_answer_violates_contract() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>maintenance</html>", headers={"Content-Type": "text/html"})

    client = httpx.Client(transport=httpx.MockTransport(handler), base_url=BASE)

    with pytest.raises(ContractViolationError, match="did not return JSON"):
        OrderProcess(client).process_new_order()
