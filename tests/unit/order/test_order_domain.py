from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from restbucks.domain.common.ids import DrinkId, LineItemId, OrderId
from restbucks.domain.common.money import Money
from restbucks.domain.drinks.entities import Milk, Size
from restbucks.domain.order.entities import (
    LineItem,
    Location,
    Order,
    OrderNotModifiableError,
    OrderStatus,
    OrderTransitionError,
    create_order,
)
from restbucks.domain.order.events import OrderStatusChanged

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def _line_item(line_item_id: str = "lit_001", cents: int = 420) -> LineItem:
    return LineItem(
        line_item_id=LineItemId(line_item_id),
        drink_id=DrinkId("drk_001"),
        name="Java Chip",
        milk=Milk.SEMI,
        size=Size.LARGE,
        price=Money(amount_cents=cents, currency="EUR"),
    )


def _order() -> Order:
    return create_order(
        order_id=OrderId("ord_001"),
        location=Location.TAKE_AWAY,
        line_items=[_line_item("lit_001", 420), _line_item("lit_002", 320)],
        now=NOW,
    )


def test_create_order_expects_payment_and_sums_total() -> None:
    order = _order()

    assert order.status == OrderStatus.PAYMENT_EXPECTED
    assert order.total == Money(amount_cents=740, currency="EUR")
    assert order.version == 0
    assert order.ordered_at == order.status_changed_at == NOW
    assert order.is_payment_expected()
    assert not order.is_paid()


def test_order_requires_line_items() -> None:
    with pytest.raises(ValueError):
        create_order(OrderId("ord_001"), Location.IN_STORE, [], NOW)


def test_order_total_must_match_line_items() -> None:
    with pytest.raises(ValueError):
        Order(
            order_id=OrderId("ord_001"),
            location=Location.IN_STORE,
            status=OrderStatus.PAYMENT_EXPECTED,
            line_items=[_line_item()],
            total=Money(amount_cents=1, currency="EUR"),
            ordered_at=NOW,
            status_changed_at=NOW,
        )


def test_order_walks_through_its_lifecycle() -> None:
    paid = _order().mark_paid(NOW + timedelta(seconds=1))
    preparing = paid.mark_in_preparation(NOW + timedelta(seconds=2))
    ready = preparing.mark_prepared(NOW + timedelta(seconds=3))
    taken = ready.mark_taken(NOW + timedelta(seconds=4))

    assert [paid.status, preparing.status, ready.status, taken.status] == [
        OrderStatus.PAID,
        OrderStatus.PREPARING,
        OrderStatus.READY,
        OrderStatus.TAKEN,
    ]
    assert ready.is_ready()
    assert taken.is_taken()
    assert taken.status.value == "Delivered"
    assert taken.status_changed_at == NOW + timedelta(seconds=4)
    assert taken.ordered_at == NOW


@pytest.mark.parametrize(
    "step",
    ["mark_in_preparation", "mark_prepared", "mark_taken"],
)
def test_order_cannot_skip_payment(step: str) -> None:
    with pytest.raises(OrderTransitionError):
        getattr(_order(), step)(NOW)


def test_order_cannot_be_paid_twice() -> None:
    paid = _order().mark_paid(NOW)

    with pytest.raises(OrderTransitionError):
        paid.mark_paid(NOW)


def test_update_replaces_line_items_while_payment_expected() -> None:
    later = NOW + timedelta(minutes=1)

    updated = _order().update(Location.IN_STORE, [_line_item("lit_003", 290)], later)

    assert updated.location == Location.IN_STORE
    assert updated.total.amount_cents == 290
    assert updated.status == OrderStatus.PAYMENT_EXPECTED
    assert updated.status_changed_at == later


def test_paid_order_is_not_modifiable() -> None:
    paid = _order().mark_paid(NOW)

    with pytest.raises(OrderNotModifiableError):
        paid.update(Location.IN_STORE, [_line_item()], NOW)
    with pytest.raises(OrderNotModifiableError):
        paid.ensure_modifiable()


@pytest.mark.parametrize(
    ("from_status", "to_status", "event_type"),
    [
        (None, OrderStatus.PAYMENT_EXPECTED, "order.placed"),
        (OrderStatus.PAYMENT_EXPECTED, None, "order.cancelled"),
        (OrderStatus.PAYMENT_EXPECTED, OrderStatus.PAYMENT_EXPECTED, "order.updated"),
        (OrderStatus.PAYMENT_EXPECTED, OrderStatus.PAID, "order.paid"),
        (OrderStatus.READY, OrderStatus.TAKEN, "order.taken"),
    ],
)
def test_status_change_event_type(
    from_status: OrderStatus | None,
    to_status: OrderStatus | None,
    event_type: str,
) -> None:
    event = OrderStatusChanged(
        order_id=OrderId("ord_001"),
        from_status=from_status,
        to_status=to_status,
        occurred_at=NOW,
    )

    assert event.event_type == event_type
