from __future__ import annotations

from typing import Protocol

from restbucks.domain.common.ids import DrinkId, OrderId
from restbucks.domain.drinks.entities import Drink
from restbucks.domain.order.entities import Order, OrderStatus
from restbucks.domain.payment.entities import CreditCard, Payment


class DrinkRepository(Protocol):
    def list_all(self) -> list[Drink]: ...

    def get(self, drink_id: DrinkId) -> Drink | None: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> None: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def list_page(self, page: int, size: int) -> tuple[list[Order], int]: ...

    def list_by_status(self, status: OrderStatus) -> list[Order]: ...

    def save_with_version(self, order: Order, expected_version: int) -> Order: ...

    def delete_with_version(self, order_id: OrderId, expected_version: int) -> None: ...


class CreditCardRepository(Protocol):
    def get_by_number(self, number: str) -> CreditCard | None: ...


class PaymentRepository(Protocol):
    def get_by_order(self, order_id: OrderId) -> Payment | None: ...

    def add_for_order(self, payment: Payment, paid_order: Order, expected_version: int) -> Payment: ...


class OptimisticConcurrencyError(Exception):
    pass


class DuplicatePaymentError(Exception):
    pass
