from __future__ import annotations

import logging

from pydantic import BaseModel, TypeAdapter, ValidationError

from restbucks.application.ports.cache import CacheStore
from restbucks.application.ports.repositories import DrinkRepository
from restbucks.domain.common.ids import DrinkId
from restbucks.domain.common.money import Money
from restbucks.domain.drinks.entities import Drink, Milk, Size

DRINKS_CATALOG_CACHE_KEY = "drinks:catalog"

logger = logging.getLogger(__name__)


class DrinkNotFoundError(Exception):
    pass


class _CachedDrink(BaseModel):
    drink_id: str
    name: str
    milk: Milk
    size: Size
    price_cents: int
    currency: str

    @classmethod
    def from_domain(cls, drink: Drink) -> _CachedDrink:
        return cls(
            drink_id=str(drink.drink_id),
            name=drink.name,
            milk=drink.milk,
            size=drink.size,
            price_cents=drink.price.amount_cents,
            currency=drink.price.currency,
        )

    def to_domain(self) -> Drink:
        return Drink(
            drink_id=DrinkId(self.drink_id),
            name=self.name,
            milk=self.milk,
            size=self.size,
            price=Money(amount_cents=self.price_cents, currency=self.currency),
        )


_CATALOG_ADAPTER = TypeAdapter(list[_CachedDrink])


class GetDrinks:
    def __init__(
        self,
        repository: DrinkRepository,
        cache: CacheStore | None,
        ttl_seconds: int = 300,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _cache_get(self, key: str) -> str | None:
        if self._cache is None:
            return None
        try:
            return self._cache.get(key)
        except Exception:
            logger.warning("drinks_cache_read_failed")
            return None

    def _cache_set(self, key: str, value: str) -> None:
        if self._cache is None:
            return
        try:
            self._cache.set(key, value, ttl_seconds=self._ttl_seconds)
        except Exception:
            logger.warning("drinks_cache_write_failed")

    def execute(self) -> list[Drink]:
        payload = self._cache_get(DRINKS_CATALOG_CACHE_KEY)
        if payload:
            try:
                return [entry.to_domain() for entry in _CATALOG_ADAPTER.validate_json(payload)]
            except ValidationError:
                logger.warning("drinks_cache_payload_invalid")

        drinks = self._repository.list_all()
        cached = [_CachedDrink.from_domain(drink) for drink in drinks]
        self._cache_set(DRINKS_CATALOG_CACHE_KEY, _CATALOG_ADAPTER.dump_json(cached).decode("utf-8"))
        return drinks


class GetDrink:
    def __init__(self, repository: DrinkRepository) -> None:
        self._repository = repository

    def execute(self, drink_id: DrinkId) -> Drink:
        drink = self._repository.get(drink_id)
        if drink is None:
            raise DrinkNotFoundError(f"drink {drink_id} not found")
        return drink
