from __future__ import annotations

from fastapi.responses import JSONResponse
from starlette.requests import Request

from restbucks.application.ports.links import LinkBuilder
from restbucks.domain.common.ids import DrinkId, OrderId

HAL_JSON = "application/hal+json"
HAL_FORMS_JSON = "application/prs.hal-forms+json"


class HalJSONResponse(JSONResponse):
    media_type = HAL_JSON


class HalFormsJSONResponse(JSONResponse):
    media_type = HAL_FORMS_JSON


class RequestLinkBuilder(LinkBuilder):
    """Builds absolute hrefs from the named routes of the current request."""

    def __init__(self, request: Request) -> None:
        self._request = request

    def _url(self, name: str, **path_params: str) -> str:
        return str(self._request.url_for(name, **path_params))

    def root(self) -> str:
        return self._url("root")

    def docs(self) -> str:
        return f"{self._request.base_url}docs/{{rel}}"

    def orders(self) -> str:
        return self._url("list_orders")

    def order(self, order_id: OrderId) -> str:
        return self._url("get_order", order_id=str(order_id))

    def payment(self, order_id: OrderId) -> str:
        return self._url("get_payment", order_id=str(order_id))

    def receipt(self, order_id: OrderId) -> str:
        return self._url("get_receipt", order_id=str(order_id))

    def drinks(self) -> str:
        return self._url("list_drinks")

    def drink_options(self) -> str:
        return self._url("drink_options")

    def drink(self, drink_id: DrinkId) -> str:
        return self._url("get_drink", drink_id=str(drink_id))


def etag_for(version: int) -> str:
    return f'"order-v{version}"'


def etag_matches(if_none_match: str | None, etag: str) -> bool:
    if not if_none_match:
        return False
    candidates = {candidate.strip() for candidate in if_none_match.split(",")}
    weak = f"W/{etag}"
    return "*" in candidates or etag in candidates or weak in candidates
