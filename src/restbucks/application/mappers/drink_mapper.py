from __future__ import annotations

from restbucks.application.dto.responses import (
    DrinkOptionResponse,
    DrinkResponse,
    DrinksResponse,
    LinkResponse,
    MoneyResponse,
)
from restbucks.application.mappers.relations import DRINKS_REL, SELF_REL, curies
from restbucks.application.ports.links import LinkBuilder
from restbucks.domain.common.money import Money
from restbucks.domain.drinks.entities import Drink


def to_money_response(money: Money) -> MoneyResponse:
    return MoneyResponse(
        amountCents=money.amount_cents,
        currency=money.currency,
        formatted=money.format(),
    )


def to_drink_response(drink: Drink, links: LinkBuilder) -> DrinkResponse:
    return DrinkResponse(
        drinkId=str(drink.drink_id),
        name=drink.name,
        milk=drink.milk.value,
        size=drink.size.value,
        price=to_money_response(drink.price),
        links={SELF_REL: LinkResponse(href=links.drink(drink.drink_id))},
    )


def to_drinks_response(drinks: list[Drink], links: LinkBuilder) -> DrinksResponse:
    return DrinksResponse(
        embedded={DRINKS_REL: [to_drink_response(drink, links) for drink in drinks]},
        links={
            SELF_REL: LinkResponse(href=links.drinks()),
            "curies": curies(links.docs()),
        },
    )


def to_drink_options(drinks: list[Drink], links: LinkBuilder) -> list[DrinkOptionResponse]:
    return [
        DrinkOptionResponse(value=links.drink(drink.drink_id), prompt=drink.label)
        for drink in drinks
    ]
