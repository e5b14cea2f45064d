from __future__ import annotations

import os

from fastapi import APIRouter, HTTPException, Request

from restbucks.api.hal import HalJSONResponse, RequestLinkBuilder
from restbucks.application.dto.responses import DrinkOptionResponse
from restbucks.application.mappers.drink_mapper import (
    to_drink_options,
    to_drink_response,
    to_drinks_response,
)
from restbucks.application.use_cases.get_drinks import DrinkNotFoundError, GetDrink, GetDrinks
from restbucks.domain.common.ids import DrinkId
from restbucks.infrastructure.cache.cache_store import RedisCacheStore
from restbucks.infrastructure.cache.redis_client import redis_configured
from restbucks.infrastructure.db.repositories.drink_repo import SqlAlchemyDrinkRepository

router = APIRouter()


def _get_drinks_use_case() -> GetDrinks:
    return GetDrinks(
        repository=SqlAlchemyDrinkRepository(),
        cache=RedisCacheStore() if redis_configured() else None,
        ttl_seconds=int(os.getenv("RESTBUCKS_DRINKS_CACHE_TTL", "300")),
    )


@router.get("/drinks", response_class=HalJSONResponse)
def list_drinks(request: Request) -> HalJSONResponse:
    drinks = _get_drinks_use_case().execute()
    return HalJSONResponse(content=to_drinks_response(drinks, RequestLinkBuilder(request)).to_hal())


@router.get("/drinks/options", response_model=list[DrinkOptionResponse])
def drink_options(request: Request) -> list[DrinkOptionResponse]:
    drinks = _get_drinks_use_case().execute()
    return to_drink_options(drinks, RequestLinkBuilder(request))


@router.get("/drinks/{drink_id}", response_class=HalJSONResponse)
def get_drink(drink_id: str, request: Request) -> HalJSONResponse:
    try:
        drink = GetDrink(repository=SqlAlchemyDrinkRepository()).execute(DrinkId(drink_id))
    except DrinkNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return HalJSONResponse(content=to_drink_response(drink, RequestLinkBuilder(request)).to_hal())
