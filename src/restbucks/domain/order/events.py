from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from restbucks.domain.common.ids import OrderId
from restbucks.domain.order.entities import OrderStatus


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: OrderId
    from_status: OrderStatus | None
    to_status: OrderStatus | None
    occurred_at: datetime

    @property
    def event_type(self) -> str:
        if self.to_status is None:
            return "order.cancelled"
        if self.from_status is None:
            return "order.placed"
        if self.from_status == self.to_status:
            return "order.updated"
        return f"order.{self.to_status.name.lower()}"
