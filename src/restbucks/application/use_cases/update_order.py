from __future__ import annotations

import logging
from datetime import datetime, timezone

from restbucks.application.ports.publisher import EventPublisher
from restbucks.application.ports.repositories import (
    DrinkRepository,
    OptimisticConcurrencyError,
    OrderRepository,
)
from restbucks.application.use_cases.context import TraceContext
from restbucks.application.use_cases.events import publish_order_event
from restbucks.application.use_cases.place_order import build_line_items
from restbucks.domain.common.ids import DrinkId, OrderId
from restbucks.domain.order.entities import Location, Order
from restbucks.domain.order.events import OrderStatusChanged

logger = logging.getLogger(__name__)


class OrderNotFoundError(Exception):
    pass


class OrderConflictError(Exception):
    pass


class UpdateOrder:
    def __init__(
        self,
        drink_repository: DrinkRepository,
        order_repository: OrderRepository,
        publisher: EventPublisher,
    ) -> None:
        self._drink_repository = drink_repository
        self._order_repository = order_repository
        self._publisher = publisher

    def execute(
        self,
        order_id: OrderId,
        drink_ids: list[DrinkId],
        location: Location,
        trace_ctx: TraceContext,
    ) -> Order:
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        order.ensure_modifiable()

        line_items = build_line_items(self._drink_repository, drink_ids)
        now = datetime.now(timezone.utc)
        updated = order.update(location=location, line_items=line_items, now=now)

        try:
            persisted = self._order_repository.save_with_version(
                updated,
                expected_version=order.version,
            )
        except OptimisticConcurrencyError as exc:
            current = self._order_repository.get(order_id)
            if current is None:
                raise OrderNotFoundError(f"order {order_id} not found") from exc
            current.ensure_modifiable()
            raise OrderConflictError(f"order {order_id} was modified concurrently") from exc

        logger.info("order_updated", extra={"order_id": str(order_id)})
        publish_order_event(
            self._publisher,
            OrderStatusChanged(
                order_id=order_id,
                from_status=order.status,
                to_status=persisted.status,
                occurred_at=now,
            ),
            persisted,
            trace_ctx,
        )
        return persisted
