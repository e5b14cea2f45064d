from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from restbucks.client.discovery import LinkDiscoverer, LinkNotFoundError

logger = logging.getLogger(__name__)

HAL_JSON = "application/hal+json"
HAL_FORMS_JSON = "application/prs.hal-forms+json"

SELF = "self"
NEXT = "next"
ORDERS = "restbucks:orders"
ORDER = "restbucks:order"
PAYMENT = "restbucks:payment"
RECEIPT = "restbucks:receipt"
CANCEL = "restbucks:cancel"
UPDATE = "restbucks:update"

PAYMENT_EXPECTED = "Payment expected"
DELIVERED = "Delivered"

DEFAULT_CARD_NUMBER = "1234123412341234"


class ContractViolationError(AssertionError):
    """The server answered in a way the order process does not allow."""


class OrderProcess:
    """Walks an order through its lifecycle by following links only.

    Apart from the root URI every request targets an href taken from the
    previous response. Each step returns the response the next step starts
    from.
    """

    def __init__(
        self,
        client: httpx.Client,
        root_uri: str = "/",
        poll_interval: float = 2.0,
        poll_timeout: float | None = None,
        card_number: str = DEFAULT_CARD_NUMBER,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._root_uri = root_uri
        self._poll_interval = poll_interval
        self._poll_timeout = poll_timeout
        self._card_number = card_number
        self._sleep = sleep
        self._links = LinkDiscoverer()

    # Scenarios

    def process_existing_order(self) -> httpx.Response:
        root = self.access_root_resource()
        orders = self.discover_orders_resource(root)
        order = self.access_first_order(orders)
        return self._pay_and_collect(order)

    def process_new_order(self) -> httpx.Response:
        root = self.access_root_resource()
        order = self.create_new_order(root)
        return self._pay_and_collect(order)

    def cancel_order_before_payment(self) -> httpx.Response:
        root = self.access_root_resource()
        order = self.create_new_order(root)
        return self.cancel_order(order)

    def _pay_and_collect(self, order: httpx.Response) -> httpx.Response:
        payment = self.trigger_payment(order)
        ready = self.poll_until_order_has_receipt_link(payment)
        receipt = self.take_receipt(ready)
        return self.verify_order_taken(receipt)

    # Steps

    def access_root_resource(self) -> httpx.Response:
        logger.info("accessing_root_resource", extra={"path": self._root_uri})
        response = self._client.get(self._root_uri, headers={"Accept": HAL_FORMS_JSON})
        self._expect_status(response, 200)
        self._expect_links(response, ORDERS)
        return response

    def discover_orders_resource(self, root: httpx.Response) -> httpx.Response:
        href = self._link(root, ORDERS)
        logger.info("discovering_orders_resource", extra={"path": href})
        response = self._get(href)
        self._expect_status(response, 200)
        return response

    def access_first_order(self, orders: httpx.Response) -> httpx.Response:
        page = orders
        while True:
            embedded = self._document(page).get("_embedded", {}).get(ORDERS, [])
            for candidate in embedded:
                if candidate.get("status") == PAYMENT_EXPECTED:
                    href = self._link_in(candidate, SELF)
                    logger.info("accessing_order", extra={"path": href})
                    response = self._get(href)
                    self._expect_status(response, 200)
                    self._expect_payable(response)
                    return response

            next_href = self._links.find_link(self._document(page), NEXT)
            if next_href is None:
                raise ContractViolationError("no order awaiting payment in the orders resource")
            page = self._get(next_href)
            self._expect_status(page, 200)

    def create_new_order(self, root: httpx.Response) -> httpx.Response:
        document = self._document(root)
        try:
            properties = document["_templates"]["default"]["properties"]
            options_href = properties[0]["options"]["link"]["href"]
            location = properties[1]["options"]["inline"][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise ContractViolationError("root resource has no usable order template") from exc

        options = self._client.get(options_href)
        self._expect_status(options, 200)
        choices = self._document(options)
        if not choices:
            raise ContractViolationError("no drinks offered")
        drink = choices[0]["value"]

        orders_href = self._link(root, ORDERS)
        logger.info("placing_order", extra={"path": orders_href})
        created = self._client.post(
            orders_href,
            json={"drinks": [drink], "location": location},
            headers={"Accept": HAL_JSON},
        )
        self._expect_status(created, 201)
        order_href = created.headers.get("Location")
        if not order_href:
            raise ContractViolationError("created order has no Location header")

        response = self._get(order_href)
        self._expect_status(response, 200)
        self._expect_payable(response)
        return response

    def trigger_payment(self, order: httpx.Response) -> httpx.Response:
        payment_href = self._link(order, PAYMENT)
        logger.info("triggering_payment", extra={"path": payment_href})
        payment = self._client.put(
            payment_href,
            json={"number": self._card_number},
            headers={"Accept": HAL_JSON},
        )
        self._expect_status(payment, 201)
        self._expect_links(payment, ORDER)

        # A paid order can no longer be cancelled.
        order_href = self._link(order, SELF)
        rejected = self._client.delete(order_href)
        self._expect_status(rejected, 405)
        return payment

    def poll_until_order_has_receipt_link(self, payment: httpx.Response) -> httpx.Response:
        order_href = self._link(payment, ORDER)
        deadline = None if self._poll_timeout is None else time.monotonic() + self._poll_timeout
        etag: str | None = None
        last: httpx.Response | None = None

        while True:
            headers = {"Accept": HAL_JSON}
            if etag:
                headers["If-None-Match"] = etag
            response = self._client.get(order_href, headers=headers)

            if response.status_code in (204, 304):
                if response.content:
                    raise ContractViolationError(
                        f"{response.status_code} response to {order_href} has a body"
                    )
                logger.info("order_unchanged", extra={"path": order_href})
            else:
                self._expect_status(response, 200)
                self._expect_links(response, SELF)
                self._expect_no_links(response, UPDATE, CANCEL)
                etag = response.headers.get("ETag")
                last = response
                if self._links.has_link(self._document(response), RECEIPT):
                    logger.info("receipt_available", extra={"path": order_href})
                    return response
                logger.info(
                    "order_in_progress",
                    extra={"path": order_href, "status": self._document(response).get("status")},
                )

            if deadline is not None and time.monotonic() >= deadline:
                status = self._document(last).get("status") if last is not None else None
                raise ContractViolationError(
                    f"no receipt for {order_href} within {self._poll_timeout}s (status={status})"
                )
            self._sleep(self._poll_interval)

    def take_receipt(self, order: httpx.Response) -> httpx.Response:
        receipt_href = self._link(order, RECEIPT)
        logger.info("taking_receipt", extra={"path": receipt_href})
        receipt = self._get(receipt_href)
        self._expect_status(receipt, 200)

        taken = self._client.delete(receipt_href, headers={"Accept": HAL_JSON})
        self._expect_status(taken, 200)
        self._expect_links(taken, ORDER)
        return taken

    def verify_order_taken(self, receipt: httpx.Response) -> httpx.Response:
        order_href = self._link(receipt, ORDER)
        logger.info("verifying_order_taken", extra={"path": order_href})
        response = self._get(order_href)
        self._expect_status(response, 200)
        self._expect_links(response, SELF)
        self._expect_no_links(response, UPDATE, CANCEL, PAYMENT)

        status = self._document(response).get("status")
        if status != DELIVERED:
            raise ContractViolationError(f"expected status {DELIVERED!r}, got {status!r}")
        return response

    def cancel_order(self, order: httpx.Response) -> httpx.Response:
        cancel_href = self._link(order, CANCEL)
        logger.info("cancelling_order", extra={"path": cancel_href})
        cancelled = self._client.delete(cancel_href)
        self._expect_status(cancelled, 204)

        gone = self._get(self._link(order, SELF))
        self._expect_status(gone, 404)
        return gone

    # Helpers

    def _get(self, href: str) -> httpx.Response:
        return self._client.get(href, headers={"Accept": HAL_JSON})

    def _document(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ContractViolationError(
                f"{response.request.method} {response.request.url} did not return JSON"
            ) from exc

    def _link(self, response: httpx.Response, rel: str) -> str:
        return self._link_in(self._document(response), rel)

    def _link_in(self, document: dict[str, Any], rel: str) -> str:
        try:
            return self._links.find_required_link(document, rel)
        except LinkNotFoundError as exc:
            raise ContractViolationError(str(exc)) from exc

    def _expect_status(self, response: httpx.Response, expected: int) -> None:
        if response.status_code != expected:
            raise ContractViolationError(
                f"{response.request.method} {response.request.url} returned "
                f"{response.status_code}, expected {expected}"
            )

    def _expect_links(self, response: httpx.Response, *rels: str) -> None:
        document = self._document(response)
        missing = [rel for rel in rels if not self._links.has_link(document, rel)]
        if missing:
            raise ContractViolationError(f"{response.request.url} is missing links {missing}")

    def _expect_no_links(self, response: httpx.Response, *rels: str) -> None:
        document = self._document(response)
        present = [rel for rel in rels if self._links.has_link(document, rel)]
        if present:
            raise ContractViolationError(f"{response.request.url} exposes links {present}")

    def _expect_payable(self, response: httpx.Response) -> None:
        relations = self._links.relations(self._document(response))
        expected = {SELF, CANCEL, UPDATE, PAYMENT}
        if relations != expected:
            raise ContractViolationError(
                f"order awaiting payment exposes {sorted(relations)}, expected {sorted(expected)}"
            )
