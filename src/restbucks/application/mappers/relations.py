from __future__ import annotations

from restbucks.application.dto.responses import LinkResponse

CURIE_NAMESPACE = "restbucks"

SELF_REL = "self"
NEXT_REL = "next"
PREV_REL = "prev"


def curie(name: str) -> str:
    return f"{CURIE_NAMESPACE}:{name}"


ORDERS_REL = curie("orders")
ORDER_REL = curie("order")
DRINKS_REL = curie("drinks")
RECEIPT_REL = curie("receipt")
CANCEL_REL = curie("cancel")
UPDATE_REL = curie("update")
PAYMENT_REL = curie("payment")

RELATION_DOCS: dict[str, str] = {
    "orders": "The collection of orders. POST a list of drink URIs and a location to place a new order.",
    "order": "The order a payment or receipt belongs to. Poll it to follow the order's progress.",
    "drinks": "The catalog of drinks that can be ordered.",
    "receipt": "The receipt of a prepared order. GET to inspect it, DELETE to take the drinks.",
    "cancel": "DELETE to cancel an order that has not been paid yet.",
    "update": "PUT a new list of drinks and a location to change an order that has not been paid yet.",
    "payment": "PUT a credit card number to pay for the order.",
}


def curies(docs_href: str) -> list[LinkResponse]:
    return [LinkResponse(href=docs_href, name=CURIE_NAMESPACE, templated=True)]
