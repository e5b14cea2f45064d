from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from restbucks.application.metrics.order_lifecycle import (
    record_order_status,
    record_payment,
    record_transition,
)
from restbucks.application.ports.publisher import EventPublisher
from restbucks.application.ports.repositories import (
    CreditCardRepository,
    DuplicatePaymentError,
    OptimisticConcurrencyError,
    OrderRepository,
    PaymentRepository,
)
from restbucks.application.use_cases.context import TraceContext
from restbucks.application.use_cases.events import publish_order_event
from restbucks.domain.common.ids import OrderId, PaymentId
from restbucks.domain.order.entities import OrderStatus
from restbucks.domain.order.events import OrderStatusChanged
from restbucks.domain.payment.entities import Payment

logger = logging.getLogger(__name__)


class OrderNotFoundError(Exception):
    pass


class OrderAlreadyPaidError(Exception):
    pass


class CreditCardNotFoundError(Exception):
    pass


class CreditCardExpiredError(Exception):
    pass


class PaymentNotFoundError(Exception):
    pass


class OrderConflictError(Exception):
    pass


class PayOrder:
    def __init__(
        self,
        order_repository: OrderRepository,
        credit_card_repository: CreditCardRepository,
        payment_repository: PaymentRepository,
        publisher: EventPublisher,
    ) -> None:
        self._order_repository = order_repository
        self._credit_card_repository = credit_card_repository
        self._payment_repository = payment_repository
        self._publisher = publisher

    def execute(
        self,
        order_id: OrderId,
        card_number: str,
        trace_ctx: TraceContext,
        now: datetime | None = None,
    ) -> Payment:
        current_time = now or datetime.now(timezone.utc)

        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        if order.is_paid():
            record_payment("already_paid")
            raise OrderAlreadyPaidError(f"order {order_id} has already been paid")

        credit_card = self._credit_card_repository.get_by_number(card_number)
        if credit_card is None:
            record_payment("card_not_found")
            raise CreditCardNotFoundError("credit card not found")
        if not credit_card.is_valid(current_time.date()):
            record_payment("card_expired")
            raise CreditCardExpiredError(
                f"credit card {credit_card.masked_number} expired on {credit_card.expiry_date.isoformat()}"
            )

        paid_order = order.mark_paid(current_time)
        payment = Payment(
            payment_id=PaymentId(f"pay_{uuid4().hex[:12]}"),
            order_id=order.order_id,
            credit_card_number=credit_card.number,
            amount=order.total,
            paid_at=current_time,
        )
        try:
            persisted = self._payment_repository.add_for_order(
                payment,
                paid_order=paid_order,
                expected_version=order.version,
            )
        except DuplicatePaymentError as exc:
            record_payment("already_paid")
            raise OrderAlreadyPaidError(f"order {order_id} has already been paid") from exc
        except OptimisticConcurrencyError as exc:
            current = self._order_repository.get(order_id)
            if current is None:
                raise OrderNotFoundError(f"order {order_id} not found") from exc
            if current.is_paid():
                raise OrderAlreadyPaidError(f"order {order_id} has already been paid") from exc
            raise OrderConflictError(f"order {order_id} was modified concurrently") from exc

        record_payment("accepted")
        record_transition(from_status=OrderStatus.PAYMENT_EXPECTED, to_status=OrderStatus.PAID)
        record_order_status(paid_order)
        logger.info("order_paid", extra={"order_id": str(order_id)})
        publish_order_event(
            self._publisher,
            OrderStatusChanged(
                order_id=order_id,
                from_status=order.status,
                to_status=OrderStatus.PAID,
                occurred_at=current_time,
            ),
            paid_order,
            trace_ctx,
        )
        return persisted


class GetPayment:
    def __init__(self, payment_repository: PaymentRepository) -> None:
        self._payment_repository = payment_repository

    def execute(self, order_id: OrderId) -> Payment:
        payment = self._payment_repository.get_by_order(order_id)
        if payment is None:
            raise PaymentNotFoundError(f"no payment recorded for order {order_id}")
        return payment
