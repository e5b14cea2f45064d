from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from restbucks.application.metrics.order_lifecycle import record_order_status
from restbucks.application.ports.publisher import EventPublisher
from restbucks.application.ports.repositories import DrinkRepository, OrderRepository
from restbucks.application.use_cases.context import TraceContext
from restbucks.application.use_cases.events import publish_order_event
from restbucks.domain.common.ids import DrinkId, LineItemId, OrderId
from restbucks.domain.order.entities import LineItem, Location, Order, create_order
from restbucks.domain.order.events import OrderStatusChanged

logger = logging.getLogger(__name__)


class DrinkNotFoundError(Exception):
    pass


class MixedCurrencyError(Exception):
    pass


def build_line_items(drink_repository: DrinkRepository, drink_ids: list[DrinkId]) -> list[LineItem]:
    line_items: list[LineItem] = []
    for drink_id in drink_ids:
        drink = drink_repository.get(drink_id)
        if drink is None:
            raise DrinkNotFoundError(f"drink {drink_id} does not exist")
        line_items.append(
            LineItem(
                line_item_id=LineItemId(f"lit_{uuid4().hex[:12]}"),
                drink_id=drink.drink_id,
                name=drink.name,
                milk=drink.milk,
                size=drink.size,
                price=drink.price,
            )
        )
    currencies = {item.price.currency for item in line_items}
    if len(currencies) > 1:
        raise MixedCurrencyError("drinks must be priced in a single currency")
    return line_items


class PlaceOrder:
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
        drink_ids: list[DrinkId],
        location: Location,
        trace_ctx: TraceContext,
    ) -> Order:
        line_items = build_line_items(self._drink_repository, drink_ids)

        now = datetime.now(timezone.utc)
        order = create_order(
            order_id=OrderId(f"ord_{uuid4().hex[:12]}"),
            location=location,
            line_items=line_items,
            now=now,
        )
        self._order_repository.add(order)

        record_order_status(order)
        logger.info("order_placed", extra={"order_id": str(order.order_id)})
        publish_order_event(
            self._publisher,
            OrderStatusChanged(
                order_id=order.order_id,
                from_status=None,
                to_status=order.status,
                occurred_at=now,
            ),
            order,
            trace_ctx,
        )
        return order
