from __future__ import annotations

from datetime import timezone

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from restbucks.application.ports.repositories import (
    CreditCardRepository,
    DuplicatePaymentError,
    PaymentRepository,
)
from restbucks.domain.common.ids import OrderId, PaymentId
from restbucks.domain.common.money import Money
from restbucks.domain.order.entities import Order
from restbucks.domain.payment.entities import CreditCard, Payment
from restbucks.infrastructure.db.models.payment import CreditCardModel, PaymentModel
from restbucks.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from restbucks.infrastructure.db.session import get_engine


class SqlAlchemyCreditCardRepository(CreditCardRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get_by_number(self, number: str) -> CreditCard | None:
        with Session(self._engine) as session:
            model = session.get(CreditCardModel, number)
        if model is None:
            return None
        return CreditCard(
            number=model.number,
            card_holder_name=model.card_holder_name,
            expiry_month=model.expiry_month,
            expiry_year=model.expiry_year,
        )


class SqlAlchemyPaymentRepository(PaymentRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()
        self._orders = SqlAlchemyOrderRepository(self._engine)

    def get_by_order(self, order_id: OrderId) -> Payment | None:
        statement = select(PaymentModel).where(PaymentModel.order_id == str(order_id)).limit(1)
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def add_for_order(self, payment: Payment, paid_order: Order, expected_version: int) -> Payment:
        existing = select(PaymentModel.id).where(PaymentModel.order_id == str(payment.order_id))
        with Session(self._engine) as session:
            if session.execute(existing).first() is not None:
                raise DuplicatePaymentError(f"order {payment.order_id} has already been paid")

            # Order status and payment are written in one transaction.
            self._orders.apply_versioned_update(session, paid_order, expected_version)
            session.add(
                PaymentModel(
                    id=str(payment.payment_id),
                    order_id=str(payment.order_id),
                    credit_card_number=payment.credit_card_number,
                    amount_cents=payment.amount.amount_cents,
                    currency=payment.amount.currency,
                    paid_at=payment.paid_at,
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicatePaymentError(
                    f"order {payment.order_id} has already been paid"
                ) from exc

        created = self.get_by_order(payment.order_id)
        if created is None:
            raise RuntimeError("created payment not found")
        return created

    def _to_domain(self, model: PaymentModel) -> Payment:
        paid_at = model.paid_at
        if paid_at.tzinfo is None:
            paid_at = paid_at.replace(tzinfo=timezone.utc)
        return Payment(
            payment_id=PaymentId(model.id),
            order_id=OrderId(model.order_id),
            credit_card_number=model.credit_card_number,
            amount=Money(amount_cents=model.amount_cents, currency=model.currency),
            paid_at=paid_at,
        )
