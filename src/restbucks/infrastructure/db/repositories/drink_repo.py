from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from restbucks.application.ports.repositories import DrinkRepository
from restbucks.domain.common.ids import DrinkId
from restbucks.domain.common.money import Money
from restbucks.domain.drinks.entities import Drink, Milk, Size
from restbucks.infrastructure.db.models.drink import DrinkModel
from restbucks.infrastructure.db.session import get_engine


class SqlAlchemyDrinkRepository(DrinkRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_all(self) -> list[Drink]:
        statement = select(DrinkModel).order_by(DrinkModel.id)
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [_to_domain(model) for model in models]

    def get(self, drink_id: DrinkId) -> Drink | None:
        with Session(self._engine) as session:
            model = session.get(DrinkModel, str(drink_id))
        if model is None:
            return None
        return _to_domain(model)


def _to_domain(model: DrinkModel) -> Drink:
    return Drink(
        drink_id=DrinkId(model.id),
        name=model.name,
        milk=Milk(model.milk),
        size=Size(model.size),
        price=Money(amount_cents=model.price_cents, currency=model.currency),
    )
