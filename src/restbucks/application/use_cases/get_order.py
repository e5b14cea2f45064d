from __future__ import annotations

from restbucks.application.ports.repositories import OrderRepository
from restbucks.domain.common.ids import OrderId
from restbucks.domain.order.entities import Order

MAX_PAGE_SIZE = 100


class OrderNotFoundError(Exception):
    pass


class InvalidPageError(Exception):
    pass


class GetOrder:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_id: OrderId) -> Order:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        return order


class ListOrders:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, page: int = 0, size: int = 20) -> tuple[list[Order], int]:
        if page < 0:
            raise InvalidPageError("page must be >= 0")
        if size < 1 or size > MAX_PAGE_SIZE:
            raise InvalidPageError(f"size must be between 1 and {MAX_PAGE_SIZE}")
        return self._order_repository.list_page(page=page, size=size)
