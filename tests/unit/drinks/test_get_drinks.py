from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from restbucks.application.use_cases.get_drinks import DRINKS_CATALOG_CACHE_KEY, GetDrinks
from restbucks.domain.common.ids import DrinkId
from restbucks.domain.common.money import Money
from restbucks.domain.drinks.entities import Drink, Milk, Size
from restbucks.infrastructure.messaging.redis_publisher import RedisEventPublisher

LATTE = Drink(
    drink_id=DrinkId("drk_001"),
    name="Latte",
    milk=Milk.SEMI,
    size=Size.LARGE,
    price=Money(amount_cents=420, currency="EUR"),
)


class CountingDrinkRepository:
    def __init__(self) -> None:
        self.calls = 0

    def list_all(self) -> list[Drink]:
        self.calls += 1
        return [LATTE]

    def get(self, drink_id: DrinkId) -> Drink | None:
        return LATTE if drink_id == LATTE.drink_id else None


class MemoryCache:
    def __init__(self) -> None:
        self.entries: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.entries.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.entries[key] = value

    def delete(self, key: str) -> None:
        self.entries.pop(key, None)


def test_catalog_is_served_from_cache_after_first_read() -> None:
    repository = CountingDrinkRepository()
    cache = MemoryCache()
    use_case = GetDrinks(repository=repository, cache=cache)

    assert use_case.execute() == [LATTE]
    assert use_case.execute() == [LATTE]
    assert repository.calls == 1
    assert DRINKS_CATALOG_CACHE_KEY in cache.entries


def test_catalog_without_cache_reads_repository(caplog) -> None:
    repository = CountingDrinkRepository()
    use_case = GetDrinks(repository=repository, cache=None)

    assert use_case.execute() == [LATTE]
    assert use_case.execute() == [LATTE]
    assert repository.calls == 2
    assert not [record for record in caplog.records if record.levelname == "WARNING"]


def test_publisher_without_redis_url_is_a_no_op(monkeypatch) -> None:
    monkeypatch.delenv("REDIS_URL", raising=False)

    RedisEventPublisher().publish("events:orders", "{}")
