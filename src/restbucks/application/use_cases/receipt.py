from __future__ import annotations

import logging
from datetime import datetime, timezone

from restbucks.application.metrics.order_lifecycle import record_order_status, record_transition
from restbucks.application.ports.publisher import EventPublisher
from restbucks.application.ports.repositories import (
    OptimisticConcurrencyError,
    OrderRepository,
    PaymentRepository,
)
from restbucks.application.use_cases.context import TraceContext
from restbucks.application.use_cases.events import publish_order_event
from restbucks.domain.common.ids import OrderId
from restbucks.domain.order.entities import Order, OrderStatus
from restbucks.domain.order.events import OrderStatusChanged
from restbucks.domain.payment.entities import Receipt, receipt_for

logger = logging.getLogger(__name__)


class OrderNotFoundError(Exception):
    pass


class ReceiptNotFoundError(Exception):
    pass


class OrderConflictError(Exception):
    pass


def _ready_order_receipt(
    order_repository: OrderRepository,
    payment_repository: PaymentRepository,
    order_id: OrderId,
) -> tuple[Order, Receipt]:
    order = order_repository.get(order_id)
    if order is None:
        raise OrderNotFoundError(f"order {order_id} not found")
    if not order.is_ready():
        raise ReceiptNotFoundError(
            f"no receipt available for order {order_id} in status={order.status.value}"
        )
    payment = payment_repository.get_by_order(order_id)
    if payment is None:
        raise ReceiptNotFoundError(f"no payment recorded for order {order_id}")
    return order, receipt_for(payment)


class GetReceipt:
    def __init__(
        self,
        order_repository: OrderRepository,
        payment_repository: PaymentRepository,
    ) -> None:
        self._order_repository = order_repository
        self._payment_repository = payment_repository

    def execute(self, order_id: OrderId) -> Receipt:
        _, receipt = _ready_order_receipt(
            self._order_repository,
            self._payment_repository,
            order_id,
        )
        return receipt


class TakeReceipt:
    """Hands the drinks over: the receipt is consumed and the order concluded."""

    def __init__(
        self,
        order_repository: OrderRepository,
        payment_repository: PaymentRepository,
        publisher: EventPublisher,
    ) -> None:
        self._order_repository = order_repository
        self._payment_repository = payment_repository
        self._publisher = publisher

    def execute(self, order_id: OrderId, trace_ctx: TraceContext) -> Receipt:
        order, receipt = _ready_order_receipt(
            self._order_repository,
            self._payment_repository,
            order_id,
        )

        now = datetime.now(timezone.utc)
        taken = order.mark_taken(now)
        try:
            persisted = self._order_repository.save_with_version(
                taken,
                expected_version=order.version,
            )
        except OptimisticConcurrencyError as exc:
            current = self._order_repository.get(order_id)
            if current is None:
                raise OrderNotFoundError(f"order {order_id} not found") from exc
            if current.is_taken():
                raise ReceiptNotFoundError(f"receipt for order {order_id} was already taken") from exc
            raise OrderConflictError(f"order {order_id} was modified concurrently") from exc

        record_transition(from_status=OrderStatus.READY, to_status=OrderStatus.TAKEN)
        record_order_status(persisted)
        logger.info("order_taken", extra={"order_id": str(order_id)})
        publish_order_event(
            self._publisher,
            OrderStatusChanged(
                order_id=order_id,
                from_status=OrderStatus.READY,
                to_status=OrderStatus.TAKEN,
                occurred_at=now,
            ),
            persisted,
            trace_ctx,
        )
        return receipt
