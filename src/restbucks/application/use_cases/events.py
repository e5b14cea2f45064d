from __future__ import annotations

import logging

from restbucks.application.mappers.event_envelope import serialize_order_event
from restbucks.application.ports.publisher import EventPublisher
from restbucks.application.use_cases.context import TraceContext
from restbucks.domain.order.entities import Order
from restbucks.domain.order.events import OrderStatusChanged

ORDER_EVENTS_CHANNEL = "events:orders"

logger = logging.getLogger(__name__)


def publish_order_event(
    publisher: EventPublisher,
    event: OrderStatusChanged,
    order: Order,
    trace_ctx: TraceContext,
) -> None:
    message = serialize_order_event(
        event=event,
        order=order,
        trace_id=trace_ctx.trace_id,
        request_id=trace_ctx.request_id,
    )
    try:
        publisher.publish(channel=ORDER_EVENTS_CHANNEL, message=message)
    except Exception:
        logger.warning(
            "order_event_publish_failed",
            extra={"order_id": str(order.order_id), "event_type": event.event_type},
        )
