from __future__ import annotations

import logging
from datetime import datetime, timezone

from restbucks.application.metrics.order_lifecycle import record_cancellation
from restbucks.application.ports.publisher import EventPublisher
from restbucks.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from restbucks.application.use_cases.context import TraceContext
from restbucks.application.use_cases.events import publish_order_event
from restbucks.domain.common.ids import OrderId
from restbucks.domain.order.events import OrderStatusChanged

logger = logging.getLogger(__name__)


class OrderNotFoundError(Exception):
    pass


class OrderConflictError(Exception):
    pass


class CancelOrder:
    def __init__(self, order_repository: OrderRepository, publisher: EventPublisher) -> None:
        self._order_repository = order_repository
        self._publisher = publisher

    def execute(self, order_id: OrderId, trace_ctx: TraceContext) -> None:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        order.ensure_modifiable()

        try:
            self._order_repository.delete_with_version(order_id, expected_version=order.version)
        except OptimisticConcurrencyError as exc:
            current = self._order_repository.get(order_id)
            if current is None:
                raise OrderNotFoundError(f"order {order_id} not found") from exc
            current.ensure_modifiable()
            raise OrderConflictError(f"order {order_id} was modified concurrently") from exc

        record_cancellation()
        logger.info("order_cancelled", extra={"order_id": str(order_id)})
        publish_order_event(
            self._publisher,
            OrderStatusChanged(
                order_id=order_id,
                from_status=order.status,
                to_status=None,
                occurred_at=datetime.now(timezone.utc),
            ),
            order,
            trace_ctx,
        )
