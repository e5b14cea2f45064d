from __future__ import annotations

from datetime import datetime, timezone

from prometheus_client import Counter, Histogram

from restbucks.domain.order.entities import Order, OrderStatus

ORDERS_TOTAL = Counter(
    "restbucks_orders_total",
    "Total number of orders observed by status.",
    ["status"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "restbucks_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

ORDERS_CANCELLED_TOTAL = Counter(
    "restbucks_orders_cancelled_total",
    "Total number of orders cancelled before payment.",
)

PAYMENTS_TOTAL = Counter(
    "restbucks_payments_total",
    "Total number of payment attempts by outcome.",
    ["outcome"],
)

ORDER_TIME_TO_READY_SECONDS = Histogram(
    "restbucks_order_time_to_ready_seconds",
    "Time between payment and readiness.",
)


def record_order_status(order: Order) -> None:
    ORDERS_TOTAL.labels(status=order.status.value).inc()


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_cancellation() -> None:
    ORDERS_CANCELLED_TOTAL.inc()


def record_payment(outcome: str) -> None:
    PAYMENTS_TOTAL.labels(outcome=outcome).inc()


def record_time_to_ready(paid_at: datetime, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    ORDER_TIME_TO_READY_SECONDS.observe(max((current - paid_at).total_seconds(), 0.0))
