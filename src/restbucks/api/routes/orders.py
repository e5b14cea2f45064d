from __future__ import annotations

import re
from urllib.parse import urlsplit

from fastapi import APIRouter, Header, HTTPException, Query, Request, Response, status

from restbucks.api.hal import HalJSONResponse, RequestLinkBuilder, etag_for, etag_matches
from restbucks.api.middleware.request_id import get_request_id
from restbucks.application.dto.requests import PlaceOrderRequest
from restbucks.application.mappers.order_mapper import to_order_response, to_orders_response
from restbucks.application.use_cases.cancel_order import CancelOrder
from restbucks.application.use_cases.context import TraceContext
from restbucks.application.use_cases.get_order import GetOrder, ListOrders, OrderNotFoundError
from restbucks.application.use_cases.place_order import PlaceOrder
from restbucks.application.use_cases.update_order import UpdateOrder
from restbucks.domain.common.ids import DrinkId, OrderId
from restbucks.domain.order.entities import Order
from restbucks.infrastructure.db.repositories.drink_repo import SqlAlchemyDrinkRepository
from restbucks.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from restbucks.infrastructure.messaging.redis_publisher import RedisEventPublisher
from restbucks.infrastructure.observability.otel import current_trace_id

router = APIRouter()

_DRINK_PATH = re.compile(r"/drinks/(?P<drink_id>[^/]+)/?$")


class InvalidDrinkUriError(Exception):
    pass


def _trace_context() -> TraceContext:
    return TraceContext(trace_id=current_trace_id(), request_id=get_request_id())


def _drink_ids(drink_uris: list[str]) -> list[DrinkId]:
    drink_ids: list[DrinkId] = []
    for uri in drink_uris:
        match = _DRINK_PATH.search(urlsplit(uri).path)
        if match is None:
            raise InvalidDrinkUriError(f"{uri} does not identify a drink")
        drink_ids.append(DrinkId(match.group("drink_id")))
    return drink_ids


def _order_response(
    order: Order,
    request: Request,
    status_code: int = status.HTTP_200_OK,
    headers: dict[str, str] | None = None,
) -> HalJSONResponse:
    return HalJSONResponse(
        status_code=status_code,
        content=to_order_response(order, RequestLinkBuilder(request)).to_hal(),
        headers={"ETag": etag_for(order.version), **(headers or {})},
    )


@router.get("/orders", response_class=HalJSONResponse)
def list_orders(
    request: Request,
    page: int = Query(default=0),
    size: int = Query(default=20),
) -> HalJSONResponse:
    orders, total = ListOrders(order_repository=SqlAlchemyOrderRepository()).execute(
        page=page,
        size=size,
    )
    resource = to_orders_response(
        orders,
        total_elements=total,
        page=page,
        size=size,
        links=RequestLinkBuilder(request),
    )
    return HalJSONResponse(content=resource.to_hal())


@router.post("/orders", response_class=HalJSONResponse, status_code=status.HTTP_201_CREATED)
def place_order(request_dto: PlaceOrderRequest, request: Request) -> HalJSONResponse:
    use_case = PlaceOrder(
        drink_repository=SqlAlchemyDrinkRepository(),
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
    )
    order = use_case.execute(
        drink_ids=_drink_ids(request_dto.drinks),
        location=request_dto.location,
        trace_ctx=_trace_context(),
    )
    location = RequestLinkBuilder(request).order(order.order_id)
    return _order_response(
        order,
        request,
        status_code=status.HTTP_201_CREATED,
        headers={"Location": location},
    )


@router.get("/orders/{order_id}", response_class=HalJSONResponse)
def get_order(
    order_id: str,
    request: Request,
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
) -> Response:
    try:
        order = GetOrder(order_repository=SqlAlchemyOrderRepository()).execute(OrderId(order_id))
    except OrderNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    etag = etag_for(order.version)
    if etag_matches(if_none_match, etag):
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers={"ETag": etag})
    return _order_response(order, request)


@router.put("/orders/{order_id}", response_class=HalJSONResponse)
def update_order(order_id: str, request_dto: PlaceOrderRequest, request: Request) -> HalJSONResponse:
    use_case = UpdateOrder(
        drink_repository=SqlAlchemyDrinkRepository(),
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
    )
    order = use_case.execute(
        order_id=OrderId(order_id),
        drink_ids=_drink_ids(request_dto.drinks),
        location=request_dto.location,
        trace_ctx=_trace_context(),
    )
    return _order_response(order, request)


@router.delete("/orders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_order(order_id: str) -> Response:
    CancelOrder(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
    ).execute(order_id=OrderId(order_id), trace_ctx=_trace_context())
    return Response(status_code=status.HTTP_204_NO_CONTENT)
