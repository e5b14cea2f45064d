from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from restbucks.application.ports.repositories import OptimisticConcurrencyError
from restbucks.application.use_cases.context import TraceContext
from restbucks.application.use_cases.pay_order import (
    CreditCardExpiredError,
    CreditCardNotFoundError,
    GetPayment,
    OrderAlreadyPaidError,
    OrderNotFoundError,
    PaymentNotFoundError,
    PayOrder,
)
from restbucks.application.use_cases.receipt import GetReceipt, ReceiptNotFoundError, TakeReceipt
from restbucks.domain.common.ids import DrinkId, LineItemId, OrderId
from restbucks.domain.common.money import Money
from restbucks.domain.drinks.entities import Milk, Size
from restbucks.domain.order.entities import LineItem, Location, Order, OrderStatus, create_order
from restbucks.domain.payment.entities import CreditCard, Payment

TRACE = TraceContext(trace_id=None, request_id="req-1")
NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
CARD_NUMBER = "1234123412341234"


class FakeOrderRepository:
    def __init__(self, orders: list[Order]) -> None:
        self._orders = {str(order.order_id): order for order in orders}

    def get(self, order_id: OrderId) -> Order | None:
        return self._orders.get(str(order_id))

    def save_with_version(self, order: Order, expected_version: int) -> Order:
        current = self._orders[str(order.order_id)]
        if current.version != expected_version:
            raise OptimisticConcurrencyError(f"order {order.order_id} version conflict")
        saved = replace(order, version=expected_version + 1)
        self._orders[str(order.order_id)] = saved
        return saved


class FakeCreditCardRepository:
    def __init__(self, cards: list[CreditCard]) -> None:
        self._cards = {card.number: card for card in cards}

    def get_by_number(self, number: str) -> CreditCard | None:
        return self._cards.get(number)


class FakePaymentRepository:
    def __init__(self, order_repository: FakeOrderRepository) -> None:
        self._order_repository = order_repository
        self._payments: dict[str, Payment] = {}

    def get_by_order(self, order_id: OrderId) -> Payment | None:
        return self._payments.get(str(order_id))

    def add_for_order(self, payment: Payment, paid_order: Order, expected_version: int) -> Payment:
        self._order_repository.save_with_version(paid_order, expected_version=expected_version)
        self._payments[str(payment.order_id)] = payment
        return payment


class FakePublisher:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def publish(self, channel: str, message: str) -> None:
        self.messages.append((channel, message))


def _order() -> Order:
    return create_order(
        order_id=OrderId("ord_001"),
        location=Location.IN_STORE,
        line_items=[
            LineItem(
                line_item_id=LineItemId("lit_001"),
                drink_id=DrinkId("drk_001"),
                name="Java Chip",
                milk=Milk.SEMI,
                size=Size.LARGE,
                price=Money(amount_cents=420, currency="EUR"),
            )
        ],
        now=NOW,
    )


def _card(expiry_year: int = 2099) -> CreditCard:
    return CreditCard(
        number=CARD_NUMBER,
        card_holder_name="Oliver Gierke",
        expiry_month=12,
        expiry_year=expiry_year,
    )


class Shop:
    def __init__(self, card: CreditCard | None = None) -> None:
        self.orders = FakeOrderRepository([_order()])
        self.payments = FakePaymentRepository(self.orders)
        self.cards = FakeCreditCardRepository([card or _card()])
        self.publisher = FakePublisher()

    def pay(self, card_number: str = CARD_NUMBER, order_id: str = "ord_001") -> Payment:
        return PayOrder(
            order_repository=self.orders,
            credit_card_repository=self.cards,
            payment_repository=self.payments,
            publisher=self.publisher,
        ).execute(order_id=OrderId(order_id), card_number=card_number, trace_ctx=TRACE, now=NOW)

    def advance_to_ready(self) -> None:
        order = self.orders.get(OrderId("ord_001"))
        preparing = self.orders.save_with_version(order.mark_in_preparation(NOW), order.version)
        self.orders.save_with_version(preparing.mark_prepared(NOW), preparing.version)

    def take_receipt(self):
        return TakeReceipt(
            order_repository=self.orders,
            payment_repository=self.payments,
            publisher=self.publisher,
        ).execute(order_id=OrderId("ord_001"), trace_ctx=TRACE)


def test_pay_order_records_payment_for_order_total() -> None:
    shop = Shop()

    payment = shop.pay()

    assert payment.amount == Money(amount_cents=420, currency="EUR")
    assert payment.paid_at == NOW
    assert shop.orders.get(OrderId("ord_001")).status == OrderStatus.PAID
    assert GetPayment(payment_repository=shop.payments).execute(OrderId("ord_001")) == payment


def test_pay_order_twice_is_rejected() -> None:
    shop = Shop()
    shop.pay()

    with pytest.raises(OrderAlreadyPaidError):
        shop.pay()


def test_pay_unknown_order() -> None:
    with pytest.raises(OrderNotFoundError):
        Shop().pay(order_id="ord_404")


def test_pay_with_unknown_card() -> None:
    shop = Shop()

    with pytest.raises(CreditCardNotFoundError):
        shop.pay(card_number="0000000000000000")
    assert shop.orders.get(OrderId("ord_001")).status == OrderStatus.PAYMENT_EXPECTED


def test_pay_with_expired_card() -> None:
    shop = Shop(card=_card(expiry_year=2020))

    with pytest.raises(CreditCardExpiredError):
        shop.pay()


def test_payment_lookup_before_payment() -> None:
    with pytest.raises(PaymentNotFoundError):
        GetPayment(payment_repository=Shop().payments).execute(OrderId("ord_001"))


def test_receipt_requires_ready_order() -> None:
    shop = Shop()
    shop.pay()

    with pytest.raises(ReceiptNotFoundError):
        GetReceipt(order_repository=shop.orders, payment_repository=shop.payments).execute(
            OrderId("ord_001")
        )


def test_taking_receipt_concludes_order() -> None:
    shop = Shop()
    shop.pay()
    shop.advance_to_ready()

    receipt = shop.take_receipt()

    assert receipt.amount.amount_cents == 420
    assert receipt.paid_at == NOW
    assert shop.orders.get(OrderId("ord_001")).status == OrderStatus.TAKEN
    with pytest.raises(ReceiptNotFoundError):
        shop.take_receipt()
