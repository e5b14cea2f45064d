from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from restbucks.application.metrics.order_lifecycle import (
    record_order_status,
    record_time_to_ready,
    record_transition,
)
from restbucks.application.ports.publisher import EventPublisher
from restbucks.application.ports.repositories import (
    OptimisticConcurrencyError,
    OrderRepository,
    PaymentRepository,
)
from restbucks.application.use_cases.context import TraceContext
from restbucks.application.use_cases.events import publish_order_event
from restbucks.domain.order.entities import Order, OrderStatus
from restbucks.domain.order.events import OrderStatusChanged

logger = logging.getLogger(__name__)

_NO_TRACE = TraceContext(trace_id=None, request_id=None)


class PrepareOrders:
    """One pass of the barista.

    Paid orders go into preparation right away. An order in preparation is
    ready once ``preparation_seconds`` have passed since it entered that
    state. Time to ready is measured from the payment.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        payment_repository: PaymentRepository,
        publisher: EventPublisher,
        preparation_seconds: float = 5.0,
    ) -> None:
        self._order_repository = order_repository
        self._payment_repository = payment_repository
        self._publisher = publisher
        self._preparation_time = timedelta(seconds=max(preparation_seconds, 0.0))

    def execute(self, now: datetime | None = None) -> list[Order]:
        current_time = now or datetime.now(timezone.utc)
        changed: list[Order] = []

        for order in self._order_repository.list_by_status(OrderStatus.PAID):
            started = self._advance(order, order.mark_in_preparation(current_time))
            if started is not None:
                changed.append(started)

        for order in self._order_repository.list_by_status(OrderStatus.PREPARING):
            if current_time - order.status_changed_at < self._preparation_time:
                continue
            prepared = self._advance(order, order.mark_prepared(current_time))
            if prepared is not None:
                self._record_time_to_ready(prepared, current_time)
                changed.append(prepared)

        return changed

    def _record_time_to_ready(self, order: Order, now: datetime) -> None:
        payment = self._payment_repository.get_by_order(order.order_id)
        if payment is None:
            logger.warning("order_ready_without_payment", extra={"order_id": str(order.order_id)})
            return
        record_time_to_ready(payment.paid_at, now=now)

    def _advance(self, order: Order, target: Order) -> Order | None:
        try:
            persisted = self._order_repository.save_with_version(
                target,
                expected_version=order.version,
            )
        except OptimisticConcurrencyError:
            logger.warning(
                "order_transition_lost_race",
                extra={"order_id": str(order.order_id), "status": target.status.value},
            )
            return None

        record_transition(from_status=order.status, to_status=persisted.status)
        record_order_status(persisted)
        logger.info(
            "order_status_changed",
            extra={"order_id": str(order.order_id), "status": persisted.status.value},
        )
        publish_order_event(
            self._publisher,
            OrderStatusChanged(
                order_id=order.order_id,
                from_status=order.status,
                to_status=persisted.status,
                occurred_at=target.status_changed_at,
            ),
            persisted,
            _NO_TRACE,
        )
        return persisted
