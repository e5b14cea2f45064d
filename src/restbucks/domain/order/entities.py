from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from restbucks.domain.common.ids import DrinkId, LineItemId, OrderId
from restbucks.domain.common.money import Money
from restbucks.domain.drinks.entities import Milk, Size


class Location(str, Enum):
    TAKE_AWAY = "To go"
    IN_STORE = "In store"


class OrderStatus(str, Enum):
    PAYMENT_EXPECTED = "Payment expected"
    PAID = "Paid"
    PREPARING = "Preparing"
    READY = "Ready"
    TAKEN = "Delivered"


@dataclass(frozen=True)
class LineItem:
    line_item_id: LineItemId
    drink_id: DrinkId
    name: str
    milk: Milk
    size: Size
    price: Money


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    location: Location
    status: OrderStatus
    line_items: list[LineItem]
    total: Money
    ordered_at: datetime
    status_changed_at: datetime
    version: int = 0

    def __post_init__(self) -> None:
        if not self.line_items:
            raise ValueError("order must contain at least one line item")
        currency = self.line_items[0].price.currency
        if self.total.currency != currency:
            raise ValueError("order total currency must match line item currency")
        expected_total = sum(item.price.amount_cents for item in self.line_items)
        if self.total.amount_cents != expected_total:
            raise ValueError("order total must equal sum of line item prices")

    def is_payment_expected(self) -> bool:
        return self.status == OrderStatus.PAYMENT_EXPECTED

    def is_paid(self) -> bool:
        return self.status != OrderStatus.PAYMENT_EXPECTED

    def is_ready(self) -> bool:
        return self.status == OrderStatus.READY

    def is_taken(self) -> bool:
        return self.status == OrderStatus.TAKEN

    def ensure_modifiable(self) -> None:
        if not self.is_payment_expected():
            raise OrderNotModifiableError(
                f"order {self.order_id} cannot be modified in status={self.status.value}"
            )

    def update(self, location: Location, line_items: list[LineItem], now: datetime) -> Order:
        self.ensure_modifiable()
        return replace(
            self,
            location=location,
            line_items=line_items,
            total=_total_of(line_items),
            status_changed_at=now,
        )

    def mark_paid(self, now: datetime) -> Order:
        return self._transition(OrderStatus.PAYMENT_EXPECTED, OrderStatus.PAID, now)

    def mark_in_preparation(self, now: datetime) -> Order:
        return self._transition(OrderStatus.PAID, OrderStatus.PREPARING, now)

    def mark_prepared(self, now: datetime) -> Order:
        return self._transition(OrderStatus.PREPARING, OrderStatus.READY, now)

    def mark_taken(self, now: datetime) -> Order:
        return self._transition(OrderStatus.READY, OrderStatus.TAKEN, now)

    def _transition(self, expected: OrderStatus, target: OrderStatus, now: datetime) -> Order:
        if self.status != expected:
            raise OrderTransitionError(
                f"cannot move order from status={self.status.value} to status={target.value}"
            )
        return replace(self, status=target, status_changed_at=now)


def create_order(
    order_id: OrderId,
    location: Location,
    line_items: list[LineItem],
    now: datetime,
) -> Order:
    if not line_items:
        raise ValueError("order must contain at least one line item")

    return Order(
        order_id=order_id,
        location=location,
        status=OrderStatus.PAYMENT_EXPECTED,
        line_items=line_items,
        total=_total_of(line_items),
        ordered_at=now,
        status_changed_at=now,
    )


def _total_of(line_items: list[LineItem]) -> Money:
    if not line_items:
        raise ValueError("order must contain at least one line item")
    return Money(
        amount_cents=sum(item.price.amount_cents for item in line_items),
        currency=line_items[0].price.currency,
    )


class OrderTransitionError(Exception):
    pass


class OrderNotModifiableError(Exception):
    pass
