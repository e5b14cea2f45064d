from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, delete, func, select, update
from sqlalchemy.orm import Session, joinedload

from restbucks.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from restbucks.domain.common.ids import DrinkId, LineItemId, OrderId
from restbucks.domain.common.money import Money
from restbucks.domain.drinks.entities import Milk, Size
from restbucks.domain.order.entities import LineItem, Location, Order, OrderStatus
from restbucks.infrastructure.db.models.order import LineItemModel, OrderModel
from restbucks.infrastructure.db.session import get_engine


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, order: Order) -> None:
        order_model = self._to_model(order)
        with Session(self._engine) as session:
            session.add(order_model)
            session.commit()

    def get(self, order_id: OrderId) -> Order | None:
        statement = (
            select(OrderModel)
            .options(joinedload(OrderModel.line_items))
            .where(OrderModel.id == str(order_id))
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).unique().scalar_one_or_none()

        if model is None:
            return None

        return self._to_domain(model)

    def list_page(self, page: int, size: int) -> tuple[list[Order], int]:
        statement = (
            select(OrderModel)
            .options(joinedload(OrderModel.line_items))
            .order_by(OrderModel.ordered_at, OrderModel.id)
            .offset(page * size)
            .limit(size)
        )
        count_statement = select(func.count()).select_from(OrderModel)
        with Session(self._engine) as session:
            models = list(session.execute(statement).unique().scalars().all())
            total = session.execute(count_statement).scalar_one()
        return [self._to_domain(model) for model in models], total

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        statement = (
            select(OrderModel)
            .options(joinedload(OrderModel.line_items))
            .where(OrderModel.status == status.name)
            .order_by(OrderModel.status_changed_at, OrderModel.id)
        )
        with Session(self._engine) as session:
            models = list(session.execute(statement).unique().scalars().all())
        return [self._to_domain(model) for model in models]

    def save_with_version(self, order: Order, expected_version: int) -> Order:
        with Session(self._engine) as session:
            self.apply_versioned_update(session, order, expected_version)
            session.commit()

        updated = self.get(order.order_id)
        if updated is None:
            raise RuntimeError(f"order {order.order_id} not found after update")
        return updated

    def apply_versioned_update(self, session: Session, order: Order, expected_version: int) -> None:
        """Writes ``order`` inside ``session`` if nobody changed it since ``expected_version``."""
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order.order_id),
                OrderModel.version == expected_version,
            )
            .values(
                location=order.location.name,
                status=order.status.name,
                status_changed_at=order.status_changed_at,
                total_cents=order.total.amount_cents,
                currency=order.total.currency,
                version=OrderModel.version + 1,
            )
        )
        result = session.execute(statement)
        if result.rowcount != 1:
            session.rollback()
            raise OptimisticConcurrencyError(f"order {order.order_id} version conflict")

        stored_ids = set(
            session.execute(
                select(LineItemModel.id).where(LineItemModel.order_id == str(order.order_id))
            ).scalars()
        )
        if stored_ids != {str(item.line_item_id) for item in order.line_items}:
            session.execute(
                delete(LineItemModel).where(LineItemModel.order_id == str(order.order_id))
            )
            session.add_all(self._to_line_item_models(order))

    def delete_with_version(self, order_id: OrderId, expected_version: int) -> None:
        with Session(self._engine) as session:
            result = session.execute(
                delete(OrderModel).where(
                    OrderModel.id == str(order_id),
                    OrderModel.version == expected_version,
                )
            )
            if result.rowcount != 1:
                session.rollback()
                raise OptimisticConcurrencyError(f"order {order_id} version conflict")
            # SQLite does not enforce ON DELETE CASCADE unless asked to.
            session.execute(delete(LineItemModel).where(LineItemModel.order_id == str(order_id)))
            session.commit()

    def _to_model(self, order: Order) -> OrderModel:
        order_model = OrderModel(
            id=str(order.order_id),
            location=order.location.name,
            status=order.status.name,
            version=order.version,
            ordered_at=order.ordered_at,
            status_changed_at=order.status_changed_at,
            total_cents=order.total.amount_cents,
            currency=order.total.currency,
        )
        order_model.line_items = self._to_line_item_models(order)
        return order_model

    def _to_line_item_models(self, order: Order) -> list[LineItemModel]:
        return [
            LineItemModel(
                id=str(item.line_item_id),
                order_id=str(order.order_id),
                position=position,
                drink_id=str(item.drink_id),
                name=item.name,
                milk=item.milk.value,
                size=item.size.value,
                price_cents=item.price.amount_cents,
                currency=item.price.currency,
            )
            for position, item in enumerate(order.line_items)
        ]

    def _to_domain(self, model: OrderModel) -> Order:
        line_items = [
            LineItem(
                line_item_id=LineItemId(item.id),
                drink_id=DrinkId(item.drink_id),
                name=item.name,
                milk=Milk(item.milk),
                size=Size(item.size),
                price=Money(amount_cents=item.price_cents, currency=item.currency),
            )
            for item in model.line_items
        ]
        return Order(
            order_id=OrderId(model.id),
            location=Location[model.location],
            status=OrderStatus[model.status],
            line_items=line_items,
            total=Money(amount_cents=model.total_cents, currency=model.currency),
            ordered_at=_as_utc(model.ordered_at),
            status_changed_at=_as_utc(model.status_changed_at),
            version=model.version,
        )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
