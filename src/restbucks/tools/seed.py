from __future__ import annotations

from datetime import datetime, timezone

import redis
from sqlalchemy import func, inspect, select
from sqlalchemy.orm import Session

from restbucks.application.use_cases.get_drinks import DRINKS_CATALOG_CACHE_KEY
from restbucks.application.use_cases.place_order import build_line_items
from restbucks.domain.common.ids import DrinkId, OrderId
from restbucks.domain.order.entities import Location, create_order
from restbucks.infrastructure.cache.cache_store import RedisCacheStore
from restbucks.infrastructure.cache.redis_client import redis_configured
from restbucks.infrastructure.db.models.drink import DrinkModel
from restbucks.infrastructure.db.models.order import OrderModel
from restbucks.infrastructure.db.models.payment import CreditCardModel
from restbucks.infrastructure.db.repositories.drink_repo import SqlAlchemyDrinkRepository
from restbucks.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from restbucks.infrastructure.db.session import get_engine

DRINKS = [
    {
        "id": "drk_001",
        "name": "Java Chip",
        "milk": "Semi",
        "size": "Large",
        "price_cents": 420,
        "currency": "EUR",
    },
    {
        "id": "drk_002",
        "name": "Cappuccino",
        "milk": "Whole",
        "size": "Medium",
        "price_cents": 320,
        "currency": "EUR",
    },
    {
        "id": "drk_003",
        "name": "Caramel Macchiato",
        "milk": "Skim",
        "size": "Medium",
        "price_cents": 370,
        "currency": "EUR",
    },
    {
        "id": "drk_004",
        "name": "Caffe Latte",
        "milk": "Semi",
        "size": "Small",
        "price_cents": 290,
        "currency": "EUR",
    },
]

CREDIT_CARD = {
    "number": "1234123412341234",
    "card_holder_name": "Oliver Gierke",
    "expiry_month": 12,
    "expiry_year": 2099,
}

SAMPLE_ORDERS = [
    (Location.TAKE_AWAY, ["drk_001"]),
    (Location.IN_STORE, ["drk_002", "drk_003"]),
]


def _seed_orders() -> int:
    engine = get_engine(timeout_seconds=2.0)
    with Session(engine) as session:
        if session.execute(select(func.count()).select_from(OrderModel)).scalar_one():
            return 0

    drinks = SqlAlchemyDrinkRepository(engine)
    orders = SqlAlchemyOrderRepository(engine)
    for index, (location, drink_ids) in enumerate(SAMPLE_ORDERS, start=1):
        order = create_order(
            order_id=OrderId(f"ord_seed_{index:03d}"),
            location=location,
            line_items=build_line_items(drinks, [DrinkId(drink_id) for drink_id in drink_ids]),
            now=datetime.now(timezone.utc),
        )
        orders.add(order)
    return len(SAMPLE_ORDERS)


def main() -> None:
    engine = get_engine(timeout_seconds=2.0)
    required_tables = {"drinks", "orders", "order_line_items", "credit_cards", "payments"}
    if not required_tables.issubset(set(inspect(engine).get_table_names())):
        print("no schema yet")
        return

    with Session(engine) as session:
        for drink in DRINKS:
            session.merge(DrinkModel(**drink))
        session.merge(CreditCardModel(**CREDIT_CARD))
        session.commit()

    created = _seed_orders()

    if redis_configured():
        try:
            RedisCacheStore().delete(DRINKS_CATALOG_CACHE_KEY)
        except redis.RedisError:
            print("drinks cache not cleared")

    print(f"seed complete ({len(DRINKS)} drinks, {created} orders)")


if __name__ == "__main__":
    main()
