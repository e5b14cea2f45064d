from __future__ import annotations

import json
from typing import Any
from uuid import uuid4

from restbucks.domain.order.entities import Order
from restbucks.domain.order.events import OrderStatusChanged


def serialize_order_event(
    *,
    event: OrderStatusChanged,
    order: Order,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    payload: dict[str, Any] = {
        "orderId": str(order.order_id),
        "previousStatus": event.from_status.value if event.from_status else None,
        "status": event.to_status.value if event.to_status else None,
        "location": order.location.value,
        "totalMoney": {
            "amountCents": order.total.amount_cents,
            "currency": order.total.currency,
        },
        "orderedAt": order.ordered_at.isoformat(),
        "lineItems": [
            {
                "drinkId": str(item.drink_id),
                "name": item.name,
                "milk": item.milk.value,
                "size": item.size.value,
            }
            for item in order.line_items
        ],
    }
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event.event_type,
        "occurred_at": event.occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)
