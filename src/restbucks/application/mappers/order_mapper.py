from __future__ import annotations

from math import ceil

from restbucks.application.dto.responses import (
    LineItemResponse,
    LinkResponse,
    OrderResponse,
    OrdersResponse,
    PageMetadataResponse,
)
from restbucks.application.mappers.drink_mapper import to_money_response
from restbucks.application.mappers.relations import (
    CANCEL_REL,
    NEXT_REL,
    ORDERS_REL,
    PAYMENT_REL,
    PREV_REL,
    RECEIPT_REL,
    SELF_REL,
    UPDATE_REL,
    curies,
)
from restbucks.application.ports.links import LinkBuilder
from restbucks.domain.order.entities import Order


def order_links(order: Order, links: LinkBuilder) -> dict[str, LinkResponse]:
    """Links an order exposes in its current state.

    Only an order that still expects payment can be cancelled, updated or
    paid. The receipt shows up once the drinks are ready and disappears when
    they have been taken.
    """
    order_href = links.order(order.order_id)
    result = {SELF_REL: LinkResponse(href=order_href)}

    if order.is_payment_expected():
        result[CANCEL_REL] = LinkResponse(href=order_href)
        result[UPDATE_REL] = LinkResponse(href=order_href)
        result[PAYMENT_REL] = LinkResponse(href=links.payment(order.order_id))

    if order.is_ready():
        result[RECEIPT_REL] = LinkResponse(href=links.receipt(order.order_id))

    return result


def to_order_response(order: Order, links: LinkBuilder) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        location=order.location.value,
        status=order.status.value,
        lineItems=[
            LineItemResponse(
                drinkId=str(item.drink_id),
                name=item.name,
                milk=item.milk.value,
                size=item.size.value,
                price=to_money_response(item.price),
            )
            for item in order.line_items
        ],
        total=to_money_response(order.total),
        orderedAt=order.ordered_at,
        links={**order_links(order, links), "curies": curies(links.docs())},
    )


def to_orders_response(
    orders: list[Order],
    total_elements: int,
    page: int,
    size: int,
    links: LinkBuilder,
) -> OrdersResponse:
    total_pages = ceil(total_elements / size) if size else 0
    orders_href = links.orders()
    page_links: dict[str, LinkResponse | list[LinkResponse]] = {
        SELF_REL: LinkResponse(href=f"{orders_href}?page={page}&size={size}"),
        "curies": curies(links.docs()),
    }
    if page + 1 < total_pages:
        page_links[NEXT_REL] = LinkResponse(href=f"{orders_href}?page={page + 1}&size={size}")
    if page > 0:
        page_links[PREV_REL] = LinkResponse(href=f"{orders_href}?page={page - 1}&size={size}")

    embedded_orders = []
    for order in orders:
        embedded = to_order_response(order, links)
        embedded.links = order_links(order, links)
        embedded_orders.append(embedded)

    return OrdersResponse(
        embedded={ORDERS_REL: embedded_orders},
        page=PageMetadataResponse(
            size=size,
            totalElements=total_elements,
            totalPages=total_pages,
            number=page,
        ),
        links=page_links,
    )
